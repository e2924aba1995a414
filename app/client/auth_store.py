"""
Client-side authentication state.

An explicit store object replaces a global auth context: it holds the current
user and token, persists the token to disk, and rehydrates from it on startup.
"""

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthState:
    user: Optional[Dict[str, Any]] = None
    token: Optional[str] = None
    isAuthenticated: bool = False
    loading: bool = True
    error: Optional[str] = None


class AuthStore:
    def __init__(self, token_path: Optional[Path] = None):
        self.token_path = Path(token_path) if token_path else None
        self.state = AuthState(token=self._read_token())
        self._listeners: List[Callable[[AuthState], None]] = []

    # persistence

    def _read_token(self) -> Optional[str]:
        if self.token_path is None or not self.token_path.exists():
            return None
        try:
            return json.loads(self.token_path.read_text()).get("token")
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable token file %s: %s", self.token_path, e)
            return None

    def _write_token(self, token: Optional[str]) -> None:
        if self.token_path is None:
            return
        if token:
            self.token_path.parent.mkdir(parents=True, exist_ok=True)
            self.token_path.write_text(json.dumps({"token": token}))
        elif self.token_path.exists():
            self.token_path.unlink()

    # transitions

    def subscribe(self, listener: Callable[[AuthState], None]) -> None:
        self._listeners.append(listener)

    def _set(self, state: AuthState) -> AuthState:
        self.state = state
        for listener in self._listeners:
            listener(state)
        return state

    @property
    def token(self) -> Optional[str]:
        return self.state.token

    @property
    def is_admin(self) -> bool:
        return bool(self.state.user and self.state.user.get("role") == "admin")

    def auth_success(self, user: Dict[str, Any], token: str) -> AuthState:
        self._write_token(token)
        return self._set(AuthState(user=user, token=token, isAuthenticated=True, loading=False))

    def auth_fail(self, error: Optional[str] = None) -> AuthState:
        self._write_token(None)
        return self._set(AuthState(loading=False, error=error))

    def logout(self) -> AuthState:
        self._write_token(None)
        return self._set(AuthState(loading=False))

    def clear_error(self) -> AuthState:
        return self._set(replace(self.state, error=None))

    def update_user(self, user: Dict[str, Any]) -> AuthState:
        return self._set(replace(self.state, user=user))
