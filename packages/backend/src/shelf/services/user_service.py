"""User service — profile reads and edits for the authenticated user."""

import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shelf.db.identity_store import IdentityStore
from shelf.db.models import User

# Email is the identity key and stays immutable; passwords change elsewhere.
EDITABLE_FIELDS = ("first_name", "last_name")


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.identities = IdentityStore(db)

    async def get_user(self, user_id: uuid.UUID) -> Optional[User]:
        return await self.identities.get_identity(user_id)

    async def edit_user(self, user_id: uuid.UUID, **changes) -> Optional[User]:
        """Update profile fields. Returns None if the user no longer exists."""
        user = await self.identities.get_identity(user_id)
        if user is None:
            return None
        for field in EDITABLE_FIELDS:
            if field in changes:
                setattr(user, field, changes[field])
        await self.db.commit()
        await self.db.refresh(user)
        return user
