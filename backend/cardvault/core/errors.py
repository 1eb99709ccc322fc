"""
Errors raised by the User Record Store.

Every error aborts the write it was raised from; nothing is persisted
and nothing is retried.
"""

from typing import Any, Optional


class UserStoreError(Exception):
    """Base class for all User Record Store failures"""


class UserValidationError(UserStoreError):
    """A field constraint was violated (missing, too short, malformed)"""

    def __init__(self, errors: list[dict[str, Any]]):
        self.errors = errors
        fields = ", ".join(".".join(str(part) for part in err.get("loc", ())) for err in errors)
        super().__init__(f"Invalid user fields: {fields}" if fields else "Invalid user")


class DuplicateEmailError(UserStoreError):
    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email already registered: {email}")


class PasswordHashingError(UserStoreError):
    """Salt generation or hash computation failed"""


class UserNotFoundError(UserStoreError):
    def __init__(self, user_id: Optional[int] = None, email: Optional[str] = None):
        self.user_id = user_id
        self.email = email
        key = f"id={user_id}" if user_id is not None else f"email={email}"
        super().__init__(f"User not found ({key})")
