"""Bookmark API routes.

Learn: Every handler receives the caller as an explicit CurrentIdentity
parameter and passes its user_id to the service. The service decides
ownership; the route only maps AccessDeniedError to 403.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from shelf.auth.dependencies import CurrentIdentity, get_current_user
from shelf.db.engine import get_db
from shelf.errors import AccessDeniedError
from shelf.schemas.bookmark import BookmarkCreate, BookmarkRead, BookmarkUpdate
from shelf.services.bookmark_service import BookmarkService

router = APIRouter(prefix="/bookmarks")


def _svc(db: AsyncSession = Depends(get_db)) -> BookmarkService:
    return BookmarkService(db)


def _denied() -> HTTPException:
    return HTTPException(status_code=403, detail="Access to resource is denied")


@router.post("", response_model=BookmarkRead, status_code=201)
async def create_bookmark(
    body: BookmarkCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BookmarkService = Depends(_svc),
):
    return await svc.create_bookmark(
        owner_id=identity.user_id,
        title=body.title,
        description=body.description,
        link=body.link,
    )


@router.get("", response_model=list[BookmarkRead])
async def list_bookmarks(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BookmarkService = Depends(_svc),
):
    return await svc.list_bookmarks(identity.user_id)


@router.get("/{bookmark_id}", response_model=BookmarkRead)
async def get_bookmark(
    bookmark_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BookmarkService = Depends(_svc),
):
    try:
        return await svc.get_bookmark(identity.user_id, bookmark_id)
    except AccessDeniedError:
        raise _denied()


@router.patch("/{bookmark_id}", response_model=BookmarkRead)
async def update_bookmark(
    bookmark_id: uuid.UUID,
    body: BookmarkUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BookmarkService = Depends(_svc),
):
    try:
        return await svc.update_bookmark(
            identity.user_id, bookmark_id, **body.model_dump(exclude_unset=True)
        )
    except AccessDeniedError:
        raise _denied()


@router.delete("/{bookmark_id}", status_code=204)
async def delete_bookmark(
    bookmark_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BookmarkService = Depends(_svc),
):
    try:
        await svc.delete_bookmark(identity.user_id, bookmark_id)
    except AccessDeniedError:
        raise _denied()
    return Response(status_code=204)
