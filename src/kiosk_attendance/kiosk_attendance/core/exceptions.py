class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when admin login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced document does not exist."""


class AmbiguousMatch(DomainError):
    """More than one employee matched evidence that must identify exactly one."""


class NoEnrollment(DomainError):
    """No employee has enrolled the credential type being verified."""


class DeviceUnavailable(DomainError):
    """Camera or platform authenticator failed, or is not supported here."""


class UserCancelled(DomainError):
    """The person at the terminal cancelled the prompt or it timed out."""


class CredentialAlreadyRegistered(DomainError):
    """The authenticator is already bound to a different identity."""


class ConcurrencyConflict(DomainError):
    """A batch precondition failed; nothing from the batch was applied."""


class StoreUnavailable(DomainError):
    """Transient failure talking to the document store."""


class DataIntegrityError(DomainError):
    """A stored document does not have the shape this system writes."""
