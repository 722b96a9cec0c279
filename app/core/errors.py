"""
Error taxonomy for the marketplace core.

Every error is an HTTPException so services can raise them directly and
FastAPI renders them; `category` is the human-readable reason class the
client receives alongside the detail message.
"""

from fastapi import HTTPException, status


class MarketplaceError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    category = "error"

    def __init__(self, detail: str):
        super().__init__(status_code=self.status_code, detail=detail)

    def to_dict(self) -> dict:
        return {"detail": self.detail, "category": self.category}


class AuthError(MarketplaceError):
    """Bad credentials, or a missing/expired session."""
    status_code = status.HTTP_401_UNAUTHORIZED
    category = "unauthenticated"


class PolicyError(MarketplaceError):
    """The policy layer denied the operation. Never used for empty results."""
    status_code = status.HTTP_403_FORBIDDEN
    category = "forbidden"


class NotFoundError(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND
    category = "not_found"


class ConstraintError(MarketplaceError):
    """Uniqueness/foreign-key violation, or a lost compare-and-swap."""
    status_code = status.HTTP_409_CONFLICT
    category = "conflict"


class ValidationError(MarketplaceError):
    """Malformed input or a transition the state machines do not allow."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    category = "validation"


class PersistenceError(MarketplaceError):
    category = "persistence"
