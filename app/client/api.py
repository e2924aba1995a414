"""
HTTP client for the Portfolio API.

Every call goes through one ``requests.Session`` with the base URL and the
bearer token from an ``AuthStore``. Non-2xx responses raise ``APIError``
carrying the server's ``message``; nothing is retried.
"""

import logging
from typing import Any, BinaryIO, Dict, List, Optional, Tuple

import requests

from app.client.auth_store import AuthStore

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5001"

FileField = Tuple[str, BinaryIO, str]


class APIError(Exception):
    def __init__(self, status_code: int, message: str, errors: Optional[List[str]] = None):
        self.status_code = status_code
        self.message = message
        self.errors = errors or []
        super().__init__(f"{status_code}: {message}")


class PortfolioClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        store: Optional[AuthStore] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.store = store or AuthStore()
        self.session = session or requests.Session()
        self.timeout = timeout

    # plumbing

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.store.token:
            headers["Authorization"] = f"Bearer {self.store.token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Any:
        response = self.session.request(
            method,
            f"{self.base_url}{path}",
            json=json,
            params={k: v for k, v in (params or {}).items() if v is not None} or None,
            data=data,
            files=files,
            headers=self._headers(),
            timeout=self.timeout,
        )
        if response.status_code == 401 and self.store.token:
            logger.info("Token rejected on %s %s, signing out", method, path)
            self.store.logout()
        if not response.ok:
            raise self._error(response)
        if response.headers.get("content-type", "").startswith("application/json"):
            return response.json()
        return response.text

    @staticmethod
    def _error(response: requests.Response) -> APIError:
        try:
            body = response.json()
        except ValueError:
            return APIError(response.status_code, response.text or response.reason or "Request failed")
        message = body.get("message") or body.get("detail") or "Request failed"
        return APIError(response.status_code, str(message), body.get("errors"))

    # auth

    def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        try:
            body = self.request("POST", "/api/auth/register", json={"name": name, "email": email, "password": password})
        except APIError as e:
            self.store.auth_fail(e.message)
            raise
        self.store.auth_success(body["user"], body["token"])
        return body

    def login(self, email: str, password: str) -> Dict[str, Any]:
        try:
            body = self.request("POST", "/api/auth/login", json={"email": email, "password": password})
        except APIError as e:
            self.store.auth_fail(e.message)
            raise
        self.store.auth_success(body["user"], body["token"])
        return body

    def load_user(self) -> Optional[Dict[str, Any]]:
        """Rehydrate the session from a persisted token, if there is one."""
        token = self.store.token
        if not token:
            self.store.auth_fail()
            return None
        try:
            user = self.request("GET", "/api/auth/profile")
        except APIError as e:
            self.store.auth_fail(e.message)
            return None
        self.store.auth_success(user, token)
        return user

    def logout(self) -> None:
        self.store.logout()

    def update_profile(self, **fields: Any) -> Dict[str, Any]:
        user = self.request("PUT", "/api/auth/profile", json=fields)
        self.store.update_user(user)
        return user

    def change_password(self, current_password: str, new_password: str) -> Dict[str, Any]:
        return self.request(
            "PUT",
            "/api/auth/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )

    def upload_avatar(self, avatar: FileField) -> Dict[str, Any]:
        user = self.request("PUT", "/api/auth/profile/avatar", files={"avatar": avatar})
        self.store.update_user(user)
        return user

    def list_users(self, page: int = 1, limit: int = 50) -> Dict[str, Any]:
        return self.request("GET", "/api/auth/users", params={"page": page, "limit": limit})

    def delete_user(self, user_id: str) -> Dict[str, Any]:
        return self.request("DELETE", f"/api/auth/users/{user_id}")

    # projects

    def list_projects(self, category: Optional[str] = None, search: Optional[str] = None,
                      featured: Optional[bool] = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        params = {"category": category, "search": search, "page": page, "limit": limit,
                  "featured": "true" if featured else None}
        return self.request("GET", "/api/projects", params=params)

    def get_project(self, project_id: str) -> Dict[str, Any]:
        return self.request("GET", f"/api/projects/{project_id}")

    def user_projects(self, user_id: str) -> List[Dict[str, Any]]:
        return self.request("GET", f"/api/projects/user/{user_id}")

    def create_project(self, fields: Dict[str, Any], image: Optional[FileField] = None) -> Dict[str, Any]:
        if image is not None:
            return self.request("POST", "/api/projects", data=fields, files={"image": image})
        return self.request("POST", "/api/projects", json=fields)

    def update_project(self, project_id: str, fields: Dict[str, Any], image: Optional[FileField] = None) -> Dict[str, Any]:
        if image is not None:
            return self.request("PUT", f"/api/projects/{project_id}", data=fields, files={"image": image})
        return self.request("PUT", f"/api/projects/{project_id}", json=fields)

    def delete_project(self, project_id: str) -> Dict[str, Any]:
        return self.request("DELETE", f"/api/projects/{project_id}")

    def like_project(self, project_id: str) -> int:
        return self.request("PUT", f"/api/projects/{project_id}/like")["likes"]

    def toggle_featured(self, project_id: str) -> Dict[str, Any]:
        return self.request("PUT", f"/api/projects/{project_id}/feature")

    def project_stats(self) -> Dict[str, Any]:
        return self.request("GET", "/api/projects/stats")

    def upload_project_images(self, images: List[FileField]) -> List[str]:
        files = [("images", image) for image in images]
        return self.request("POST", "/api/projects/upload-images", files=files)["images"]

    # experiences

    def list_experiences(self, user_id: Optional[str] = None, current: Optional[bool] = None,
                         page: int = 1, limit: int = 10) -> Dict[str, Any]:
        params = {"userId": user_id, "current": "true" if current else None, "page": page, "limit": limit}
        return self.request("GET", "/api/experiences", params=params)

    def get_experience(self, experience_id: str) -> Dict[str, Any]:
        return self.request("GET", f"/api/experiences/{experience_id}")

    def create_experience(self, fields: Dict[str, Any], company_logo: Optional[FileField] = None) -> Dict[str, Any]:
        if company_logo is not None:
            return self.request("POST", "/api/experiences", data=fields, files={"companyLogo": company_logo})
        return self.request("POST", "/api/experiences", json=fields)

    def update_experience(self, experience_id: str, fields: Dict[str, Any],
                          company_logo: Optional[FileField] = None) -> Dict[str, Any]:
        path = f"/api/experiences/{experience_id}"
        if company_logo is not None:
            return self.request("PUT", path, data=fields, files={"companyLogo": company_logo})
        return self.request("PUT", path, json=fields)

    def delete_experience(self, experience_id: str) -> Dict[str, Any]:
        return self.request("DELETE", f"/api/experiences/{experience_id}")

    def experience_stats(self) -> Dict[str, Any]:
        return self.request("GET", "/api/experiences/stats")

    # skills

    def list_skills(self, category: Optional[str] = None, level: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.request("GET", "/api/skills", params={"category": category, "level": level})

    def create_skill(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("POST", "/api/skills", json=fields)

    def update_skill(self, skill_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("PUT", f"/api/skills/{skill_id}", json=fields)

    def delete_skill(self, skill_id: str) -> Dict[str, Any]:
        return self.request("DELETE", f"/api/skills/{skill_id}")

    # about

    def public_about(self) -> Dict[str, Any]:
        return self.request("GET", "/api/about/public")["about"]

    def my_about(self) -> Dict[str, Any]:
        return self.request("GET", "/api/about/me")["about"]

    def save_about(self, fields: Dict[str, Any], create: bool = False) -> Dict[str, Any]:
        return self.request("POST" if create else "PUT", "/api/about/me", json=fields)["about"]

    def delete_about(self) -> Dict[str, Any]:
        return self.request("DELETE", "/api/about/me")

    def upload_resume(self, resume: FileField) -> str:
        return self.request("PUT", "/api/about/me/resume", files={"resume": resume})["resumeUrl"]

    # contacts

    def send_contact(self, name: str, email: str, message: str, subject: Optional[str] = None) -> Dict[str, Any]:
        payload = {"name": name, "email": email, "message": message}
        if subject:
            payload["subject"] = subject
        return self.request("POST", "/api/contacts", json=payload)

    def list_contacts(self, status: Optional[str] = None, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self.request("GET", "/api/contacts", params={"status": status, "page": page, "limit": limit})

    def set_contact_status(self, contact_id: str, status: str) -> Dict[str, Any]:
        return self.request("PUT", f"/api/contacts/{contact_id}", json={"status": status})

    def delete_contact(self, contact_id: str) -> Dict[str, Any]:
        return self.request("DELETE", f"/api/contacts/{contact_id}")

    # newsletter

    def subscribe(self, email: str, source: str = "website") -> Dict[str, Any]:
        return self.request("POST", "/api/newsletter/subscribe", json={"email": email, "source": source})

    def unsubscribe(self, email: str) -> Dict[str, Any]:
        return self.request("GET", f"/api/newsletter/unsubscribe/{email}")

    def list_subscriptions(self, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        return self.request("GET", "/api/newsletter/admin/subscriptions", params={"page": page, "limit": limit})

    def subscription_stats(self) -> Dict[str, Any]:
        return self.request("GET", "/api/newsletter/admin/stats")["stats"]

    def export_subscriptions(self, as_csv: bool = False) -> Any:
        return self.request("GET", "/api/newsletter/admin/export", params={"format": "csv" if as_csv else None})

    def delete_subscription(self, subscription_id: str) -> Dict[str, Any]:
        return self.request("DELETE", f"/api/newsletter/admin/subscription/{subscription_id}")

    # misc

    def health(self) -> Dict[str, Any]:
        return self.request("GET", "/api/health")
