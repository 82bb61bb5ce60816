"""Auth service — signup and signin.

Learn: Both flows end in the same step: issue a token for the identity.
A successful signup therefore authenticates immediately.

Signin never tells the caller *which* check failed. An unknown email
and a wrong password raise the same InvalidCredentialsError, and the
unknown-email path still burns one Argon2 verify against a dummy hash
so response time doesn't reveal whether the account exists.

Argon2 is CPU-bound, so hashing/verifying runs in a worker thread
(asyncio.to_thread) instead of blocking the event loop.
"""

import asyncio

import structlog

from shelf.auth.jwt import IssuedToken, TokenIssuer
from shelf.auth.password import PasswordHasher
from shelf.db.identity_store import IdentityStore
from shelf.errors import (
    EmailTakenError,
    InvalidCredentialsError,
    StoreFailureError,
    UniqueViolationError,
)

logger = structlog.get_logger()


class AuthService:
    """Orchestrates credential checks and token issuance."""

    def __init__(
        self,
        identities: IdentityStore,
        password_hasher: PasswordHasher,
        token_issuer: TokenIssuer,
    ):
        self.identities = identities
        self.password_hasher = password_hasher
        self.token_issuer = token_issuer

    async def signup(self, email: str, password: str) -> IssuedToken:
        password_hash = await asyncio.to_thread(self.password_hasher.hash, password)
        try:
            user = await self.identities.create_identity(email, password_hash)
        except UniqueViolationError:
            logger.info("auth.signup_rejected", reason="email_taken")
            raise EmailTakenError(email)

        logger.info("auth.signup", user_id=str(user.id))
        return self.token_issuer.issue(str(user.id), user.email)

    async def signin(self, email: str, password: str) -> IssuedToken:
        user = await self.identities.find_identity_by_email(email)
        if user is None:
            await asyncio.to_thread(self.password_hasher.verify_dummy, password)
            logger.info("auth.signin_failed")
            raise InvalidCredentialsError()

        valid = await asyncio.to_thread(
            self.password_hasher.verify, user.password_hash, password
        )
        if not valid:
            logger.info("auth.signin_failed", user_id=str(user.id))
            raise InvalidCredentialsError()

        # A failed rehash rolls the session back and expires `user`
        user_id, user_email = str(user.id), user.email
        if self.password_hasher.needs_rehash(user.password_hash):
            await self._upgrade_hash(user, user_id, password)

        logger.info("auth.signin", user_id=user_id)
        return self.token_issuer.issue(user_id, user_email)

    async def _upgrade_hash(self, user, user_id: str, password: str) -> None:
        """Re-hash with current cost parameters.

        Best effort: the credentials were already verified, so a store
        failure here is logged and the signin still succeeds.
        """
        new_hash = await asyncio.to_thread(self.password_hasher.hash, password)
        try:
            await self.identities.update_password_hash(user, new_hash)
        except StoreFailureError as e:
            logger.warning(
                "auth.password_rehash_failed", user_id=user_id, error_type=str(e)
            )
            return
        logger.info("auth.password_rehashed", user_id=user_id)

