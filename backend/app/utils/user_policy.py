"""
User Field Policy
Normalisation and validation rules for user record fields.
"""

import re
from typing import Any, Dict, Mapping

from app.models.user import UserRole


EMAIL_PATTERN = re.compile(r"^\w+([.+-]\w+)*@\w+([.-]\w+)*\.[A-Za-z]{2,}$")

MIN_NAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 6

REQUIRED_FIELDS = ("name", "email", "password")
ROLES = {role.value for role in UserRole}


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_password(password: Any) -> Dict[str, str]:
    if not isinstance(password, str) or not password:
        return {"password": "Password is required"}
    if len(password) < MIN_PASSWORD_LENGTH:
        return {"password": f"Password must be at least {MIN_PASSWORD_LENGTH} characters"}
    return {}


def normalize_user_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Trim the name and lowercase the email, leaving other fields untouched.
    """
    data = dict(fields)
    if isinstance(data.get("name"), str):
        data["name"] = data["name"].strip()
    if isinstance(data.get("email"), str):
        data["email"] = normalize_email(data["email"])
    return data


def validate_user_fields(fields: Mapping[str, Any], partial: bool = False) -> Dict[str, str]:
    """
    Validate normalised user fields and return a mapping of field -> error.

    With ``partial`` set only the supplied fields are checked, as for an
    update. Otherwise name, email and password are required.
    """
    errors: Dict[str, str] = {}

    if not partial:
        for field in REQUIRED_FIELDS:
            if fields.get(field) in (None, ""):
                errors[field] = f"{field.capitalize()} is required"

    if "name" in fields and "name" not in errors:
        name = fields["name"]
        if not isinstance(name, str) or not name:
            errors["name"] = "Name is required"
        elif len(name) < MIN_NAME_LENGTH:
            errors["name"] = f"Name must be at least {MIN_NAME_LENGTH} characters"

    if "email" in fields and "email" not in errors:
        email = fields["email"]
        if not isinstance(email, str) or not email:
            errors["email"] = "Email is required"
        elif not EMAIL_PATTERN.match(email):
            errors["email"] = "Please enter a valid email"

    if "password" in fields and "password" not in errors:
        errors.update(validate_password(fields["password"]))

    if "role" in fields and fields["role"] not in ROLES:
        errors["role"] = f"Role must be one of: {', '.join(sorted(ROLES))}"

    if "is_active" in fields and not isinstance(fields["is_active"], bool):
        errors["is_active"] = "Active flag must be a boolean"

    return errors
