"""Authorization guard and FastAPI auth dependencies.

Learn: The guard turns an Authorization header into a CurrentIdentity
or rejects the request. It trusts the token's claims as of issuance
and never looks the user up — a deleted or changed user keeps their
identity until the token expires.

Clients always get the same 401 no matter why the token was refused;
the specific reason (expired, bad signature, malformed) only goes
to the log.

The hasher, issuer and guard are built once in create_app() and
stored on app.state. The get_* providers below hand them to routes,
so tests can swap them with app.dependency_overrides.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import Depends, Header, HTTPException, Request

from shelf.auth.jwt import TokenError, TokenIssuer
from shelf.auth.password import PasswordHasher
from shelf.errors import UnauthenticatedError

logger = structlog.get_logger()


@dataclass(frozen=True)
class CurrentIdentity:
    """The authenticated caller, as resolved from a verified token."""

    user_id: uuid.UUID
    email: str


def extract_bearer_token(authorization_header: Optional[str]) -> str:
    """Extract the token from an `Authorization: Bearer <token>` header."""
    if authorization_header is None or not authorization_header.strip():
        raise UnauthenticatedError("missing bearer token")

    parts = authorization_header.strip().split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise UnauthenticatedError("invalid bearer token header")

    return parts[1]


class AuthorizationGuard:
    """Resolve the caller identity from a bearer token."""

    def __init__(self, token_issuer: TokenIssuer):
        self._token_issuer = token_issuer

    def authenticate(self, authorization_header: Optional[str]) -> CurrentIdentity:
        token = extract_bearer_token(authorization_header)
        try:
            claim = self._token_issuer.verify(token)
            user_id = uuid.UUID(claim.subject_id)
        except TokenError as e:
            logger.info("auth.token_rejected", reason=e.reason)
            raise UnauthenticatedError("invalid bearer token")
        except ValueError:
            logger.info("auth.token_rejected", reason="malformed_subject")
            raise UnauthenticatedError("invalid bearer token")

        structlog.contextvars.bind_contextvars(user_id=str(user_id))
        return CurrentIdentity(user_id=user_id, email=claim.email)


# ─── Providers ──────────────────────────────────────────


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_guard(request: Request) -> AuthorizationGuard:
    return request.app.state.guard


async def get_current_user(
    authorization: Optional[str] = Header(None),
    guard: AuthorizationGuard = Depends(get_guard),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if missing or invalid)."""
    try:
        return guard.authenticate(authorization)
    except UnauthenticatedError:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
