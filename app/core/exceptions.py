class GuaranteeCoreException(Exception):
    """Base exception for the policy & claims core.

    Every subclass carries a stable ``kind`` so collaborators can branch on
    the failure without parsing the message.
    """

    kind = "error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class UnauthorizedException(GuaranteeCoreException):
    """Raised when JWT validation fails"""

    kind = "unauthorized"


class NotFoundException(GuaranteeCoreException):
    """Raised when a record is absent or owned by another user"""

    kind = "not_found"


class ReferenceException(GuaranteeCoreException):
    """Raised when a referenced parent is missing or belongs to another user"""

    kind = "reference_error"


class ConflictException(GuaranteeCoreException):
    """Raised for illegal state transitions, blocked deletions and uniqueness clashes"""

    kind = "conflict"


class ValidationException(GuaranteeCoreException):
    """Raised for business logic validation errors"""

    kind = "validation_error"


class CollaboratorUnavailableException(GuaranteeCoreException):
    """Raised when an external collaborator (renderer, scorer) is not configured"""

    kind = "collaborator_unavailable"
