"""Domain exceptions raised by services and the auth layer.

Services never build HTTP responses themselves. They raise one of the
exceptions below and `main` maps each type to a status code:

    BookstoreError (base)
    ├── NotFoundError          → 404
    ├── ConflictError          → 409
    ├── AuthenticationError    → 401
    ├── PermissionDeniedError  → 403
    └── LoginThrottledError    → 429
"""

from typing import Any


class BookstoreError(Exception):
    """Base class for application errors; `message` is safe to return to clients."""
    status_code = 500

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(message)


class NotFoundError(BookstoreError):
    """A referenced entity id does not exist."""
    status_code = 404

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with ID {entity_id} not found")


class ConflictError(BookstoreError):
    """The operation would break a uniqueness or reference rule."""
    status_code = 409


class AuthenticationError(BookstoreError):
    """Bad credentials or a missing/invalid/expired bearer token."""
    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class PermissionDeniedError(BookstoreError):
    status_code = 403

    def __init__(self, message: str = "Insufficient role"):
        super().__init__(message)


class LoginThrottledError(BookstoreError):
    status_code = 429

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(f"Too many failed login attempts; retry after {retry_after}s")
