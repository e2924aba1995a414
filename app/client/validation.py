"""
Form checks run before a request leaves the client.

Each function returns a dict of field name to message; an empty dict means
the input is acceptable. The rules track the API's own payload validation.
"""

import re
from typing import Dict, Optional

EMAIL_RE = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")

MIN_PASSWORD_LENGTH = 6


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and bool(EMAIL_RE.match(email.strip().lower()))


def _check_email(errors: Dict[str, str], email: Optional[str]) -> None:
    if not email or not email.strip():
        errors["email"] = "Email is required"
    elif not is_valid_email(email):
        errors["email"] = "Please enter a valid email"


def validate_register(
    name: Optional[str],
    email: Optional[str],
    password: Optional[str],
    confirm_password: Optional[str] = None,
) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    name = (name or "").strip()
    if not name:
        errors["name"] = "Name is required"
    elif len(name) < 2:
        errors["name"] = "Name must be at least 2 characters long"
    elif len(name) > 50:
        errors["name"] = "Name cannot exceed 50 characters"
    _check_email(errors, email)
    if not password:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    if confirm_password is not None and confirm_password != password:
        errors["confirmPassword"] = "Passwords do not match"
    return errors


def validate_login(email: Optional[str], password: Optional[str]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    _check_email(errors, email)
    if not password:
        errors["password"] = "Password is required"
    return errors


def validate_contact(
    name: Optional[str],
    email: Optional[str],
    message: Optional[str],
    subject: Optional[str] = None,
) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    name = (name or "").strip()
    if not name:
        errors["name"] = "Name is required"
    elif len(name) > 100:
        errors["name"] = "Name cannot exceed 100 characters"
    _check_email(errors, email)
    if subject and len(subject) > 200:
        errors["subject"] = "Subject cannot exceed 200 characters"
    message = (message or "").strip()
    if not message:
        errors["message"] = "Message is required"
    elif len(message) > 5000:
        errors["message"] = "Message cannot exceed 5000 characters"
    return errors


def validate_newsletter(email: Optional[str]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    _check_email(errors, email)
    return errors
