"""Custom exceptions for the Userdesk backend"""

from typing import Dict, List, Optional


class UserdeskError(Exception):
    """Base exception for Userdesk. Carries the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationError(UserdeskError):
    """One or more fields failed validation"""

    status_code = 400

    def __init__(self, errors: Dict[str, str], message: str = "Validation failed"):
        self.errors = errors
        super().__init__(message)

    @property
    def fields(self) -> List[str]:
        return list(self.errors)

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "errors": [{"field": f, "message": m} for f, m in self.errors.items()],
        }


class ConflictError(UserdeskError):
    """A unique field would be duplicated"""

    status_code = 400


class InvalidCredentialsError(UserdeskError):
    """Login with an unknown email or a wrong password"""

    status_code = 400

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class UnauthenticatedError(UserdeskError):
    """Missing, invalid or expired token"""

    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class ForbiddenError(UserdeskError):
    """Authenticated, but not allowed"""

    status_code = 403

    def __init__(self, message: str = "Administrator access required"):
        super().__init__(message)


class NotFoundError(UserdeskError):
    """Record id does not resolve"""

    status_code = 404

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class InvalidTokenError(UserdeskError):
    """Token failed signature, shape or expiry checks"""

    status_code = 401

    def __init__(self, message: str = "Token is not valid", reason: Optional[str] = None):
        self.reason = reason
        super().__init__(message)
