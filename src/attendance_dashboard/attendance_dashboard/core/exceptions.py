class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when no authenticated session is available."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class PreconditionError(DomainError):
    """An attendance action is not allowed from the current day state.

    Raised locally, before any call to the remote API.
    """


class AlreadyClockedIn(PreconditionError):
    pass


class NotClockedIn(PreconditionError):
    pass


class NoActiveBreak(PreconditionError):
    pass


class GatewayError(DomainError):
    """Transport or server failure reported by the remote time-sheets API."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RecordIntegrityError(DomainError):
    """The remote API returned a record that breaks attendance invariants."""

    def __init__(self, message: str, *, violations: list[str] | None = None):
        super().__init__(message)
        self.violations = list(violations or [])
