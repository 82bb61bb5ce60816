"""Bookmark service — per-user bookmark CRUD with ownership checks.

Learn: Every read/update/delete loads the row by id and compares
owner_id with the caller. A bookmark that doesn't exist and one that
belongs to somebody else produce the same AccessDeniedError, so a
caller can't probe for other users' bookmark ids.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shelf.db.models import Bookmark
from shelf.errors import AccessDeniedError

EDITABLE_FIELDS = ("title", "description", "link")


class BookmarkService:
    """Business logic for bookmarks. Callers pass the resolved owner id."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_bookmark(
        self,
        owner_id: uuid.UUID,
        title: str,
        description: Optional[str] = None,
        link: Optional[str] = None,
    ) -> Bookmark:
        bookmark = Bookmark(
            owner_id=owner_id,
            title=title,
            description=description,
            link=link,
        )
        self.db.add(bookmark)
        await self.db.commit()
        await self.db.refresh(bookmark)
        return bookmark

    async def list_bookmarks(self, owner_id: uuid.UUID) -> list[Bookmark]:
        result = await self.db.execute(
            select(Bookmark)
            .where(Bookmark.owner_id == owner_id)
            .order_by(Bookmark.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_bookmark(self, owner_id: uuid.UUID, bookmark_id: uuid.UUID) -> Bookmark:
        return await self._get_owned(owner_id, bookmark_id)

    async def update_bookmark(
        self,
        owner_id: uuid.UUID,
        bookmark_id: uuid.UUID,
        **changes,
    ) -> Bookmark:
        """Apply a partial update. Unknown fields are ignored."""
        bookmark = await self._get_owned(owner_id, bookmark_id)
        for field in EDITABLE_FIELDS:
            if field in changes:
                setattr(bookmark, field, changes[field])
        await self.db.commit()
        await self.db.refresh(bookmark)
        return bookmark

    async def delete_bookmark(self, owner_id: uuid.UUID, bookmark_id: uuid.UUID) -> None:
        bookmark = await self._get_owned(owner_id, bookmark_id)
        await self.db.delete(bookmark)
        await self.db.commit()

    async def _get_owned(self, owner_id: uuid.UUID, bookmark_id: uuid.UUID) -> Bookmark:
        bookmark = await self.db.get(Bookmark, bookmark_id)
        if bookmark is None or bookmark.owner_id != owner_id:
            raise AccessDeniedError("Access to resource is denied")
        return bookmark
