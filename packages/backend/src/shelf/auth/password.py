"""Password hashing utilities.

Learn: Uses Argon2id (argon2-cffi) for password hashing. Argon2 is
memory-hard, so brute-forcing leaked hashes on GPUs is expensive.
Each hash carries its own random salt and cost parameters in the
PHC string ("$argon2id$v=19$m=65536,t=3,p=4$<salt>$<hash>"), so no
separate salt column is needed.

Hashes produced with older cost parameters still verify, and
needs_rehash() tells the caller when to upgrade them on login.
"""

from functools import cached_property

from argon2 import PasswordHasher as Argon2Hasher
from argon2.exceptions import InvalidHashError, VerificationError


class PasswordHasher:
    """One-way salted hashing and verification for credentials at rest."""

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
    ):
        self._argon2 = Argon2Hasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    def hash(self, password: str) -> str:
        """Hash a password with a fresh random salt."""
        return self._argon2.hash(password)

    def verify(self, password_hash: str, password: str) -> bool:
        """Verify a password against its stored hash.

        Never raises on bad stored data: a malformed or foreign hash
        simply fails verification.
        """
        if not password_hash:
            return False
        try:
            return self._argon2.verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False

    def needs_rehash(self, password_hash: str) -> bool:
        """Check if a hash was made with parameters other than ours."""
        try:
            return self._argon2.check_needs_rehash(password_hash)
        except InvalidHashError:
            return True

    @cached_property
    def dummy_hash(self) -> str:
        """A throwaway hash for timing equalization on unknown emails.

        Computed on first use, which costs a full Argon2 hash. Read it
        from a worker thread (see verify_dummy), not the event loop.
        """
        return self.hash("shelf-dummy-password")

    def verify_dummy(self, password: str) -> bool:
        """Spend one verify's worth of work for an identity that doesn't exist."""
        self.verify(self.dummy_hash, password)
        return False
