"""Identity persistence — the store behind signup and signin.

Learn: Email uniqueness is enforced by the users.email UNIQUE index,
not by a check-then-insert in application code. Two concurrent
signups for the same email both try the INSERT; the database lets
exactly one through and the other gets an IntegrityError, which we
report as UniqueViolationError.

Any other database error is wrapped in StoreFailureError so callers
above this layer never see driver exceptions.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shelf.db.models import User
from shelf.errors import StoreFailureError, UniqueViolationError


class IdentityStore:
    """Keyed create/find/update operations on identity records."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_identity(self, email: str, password_hash: str) -> User:
        user = User(email=email, password_hash=password_hash)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise UniqueViolationError("email")
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreFailureError(type(e).__name__) from e
        await self.db.refresh(user)
        return user

    async def find_identity_by_email(self, email: str) -> Optional[User]:
        try:
            result = await self.db.execute(select(User).where(User.email == email))
        except SQLAlchemyError as e:
            raise StoreFailureError(type(e).__name__) from e
        return result.scalars().first()

    async def get_identity(self, user_id: uuid.UUID) -> Optional[User]:
        try:
            return await self.db.get(User, user_id)
        except SQLAlchemyError as e:
            raise StoreFailureError(type(e).__name__) from e

    async def update_password_hash(self, user: User, password_hash: str) -> User:
        user.password_hash = password_hash
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreFailureError(type(e).__name__) from e
        await self.db.refresh(user)
        return user
