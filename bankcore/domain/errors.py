"""
Error taxonomy shared by services and the HTTP layer

The API maps each kind to a status code (see bankcore.main):
InvalidArgumentError -> 400, NotFoundError -> 404,
PreconditionFailedError / ConflictError -> 409, SystemFailureError -> 500.
"""


class AccountServiceError(Exception):
    """Base class for all expected service errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgumentError(AccountServiceError, ValueError):
    """Input violates a shape or value rule (negative balance, bad email, ...)"""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = list(errors or [])


class NotFoundError(AccountServiceError, LookupError):
    """No entity for the given id"""
    pass


class PreconditionFailedError(AccountServiceError):
    """State-dependent rule violated (delete with balance, unknown owner)"""
    pass


class ConflictError(AccountServiceError):
    """Entity with the same id already exists"""
    pass


class SystemFailureError(AccountServiceError):
    """Store unreachable or failed mid-operation"""
    pass
