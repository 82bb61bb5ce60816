"""Domain error taxonomy.

Learn: services raise these, routes translate them into HTTP responses.
Nothing in here knows about status codes, so the same services can be
driven from tests or other entry points without FastAPI.
"""


class ShelfError(Exception):
    """Base class for all domain errors."""


class EmailTakenError(ShelfError):
    """Signup with an email that already belongs to an identity."""


class InvalidCredentialsError(ShelfError):
    """Signin failed. Unknown email and wrong password are indistinguishable."""


class UnauthenticatedError(ShelfError):
    """Missing, malformed, expired or forged bearer token."""


class AccessDeniedError(ShelfError):
    """Authenticated caller does not own the requested resource."""


class UniqueViolationError(ShelfError):
    """The store rejected a write because of a unique constraint."""

    def __init__(self, field: str):
        super().__init__(f"unique constraint violated on {field}")
        self.field = field


class StoreFailureError(ShelfError):
    """Opaque persistence failure. Not retried here."""
