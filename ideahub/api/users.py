import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.core.config import settings
from ideahub.db.models import Idea, User
from ideahub.db.session import get_db
from ideahub.schemas.idea import IdeaOut
from ideahub.schemas.user import RoleUpdate, UserOut, UserPublic, UserUpdate
from ideahub.services.ideas import idea_select, list_ideas, serialize_ideas
from ideahub.utils.deps import get_current_user, get_optional_user
from ideahub.utils.s3 import (
    ALLOWED_IMAGE_TYPES,
    delete_file_from_s3,
    key_from_public_url,
    public_url_for_key,
    save_user_avatar_to_s3,
)

log = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserOut)
async def get_my_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/me", response_model=UserOut)
async def update_my_profile(
    user_in: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update username, bio or wallet address."""
    for field, value in user_in.model_dump(exclude_unset=True).items():
        setattr(current_user, field, value)

    db.add(current_user)
    await db.commit()
    await db.refresh(current_user)
    return current_user


@router.put("/me/role", response_model=UserOut)
async def set_my_role(
    data: RoleUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    current_user.role = data.role
    db.add(current_user)
    await db.commit()
    await db.refresh(current_user)
    log.info("user.role_set user=%s role=%s", current_user.id, data.role)
    return current_user


@router.post("/me/avatar", response_model=UserOut)
async def upload_avatar(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    content_type = file.content_type or ""
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(400, "Please select an image file")

    data = await file.read()
    if not data:
        raise HTTPException(400, "No file uploaded")
    if len(data) > settings.MAX_AVATAR_BYTES:
        raise HTTPException(400, "Image must be smaller than 5MB")
    await file.seek(0)

    old_key = key_from_public_url(current_user.avatar_url)
    try:
        key = await save_user_avatar_to_s3(
            file.file,
            file.filename or "avatar.jpg",
            content_type,
            current_user.id,
        )
    except Exception as e:
        log.error("Failed to upload avatar: %s", e, exc_info=True)
        raise HTTPException(500, "Failed to upload avatar")

    current_user.avatar_url = public_url_for_key(key)
    db.add(current_user)
    await db.commit()
    await db.refresh(current_user)

    if old_key and old_key != key:
        await delete_file_from_s3(old_key)
    return current_user


@router.get("/me/owned-ideas", response_model=list[IdeaOut])
async def my_owned_ideas(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Ideas minted by me that someone else created."""
    stmt = (
        idea_select()
        .where(Idea.minted_by == current_user.id, Idea.created_by != current_user.id)
        .order_by(Idea.created_at.desc())
    )
    ideas = (await db.scalars(stmt)).all()
    return await serialize_ideas(db, ideas, current_user)


@router.get("/{user_id}", response_model=UserPublic)
async def get_public_profile(user_id: str, db: AsyncSession = Depends(get_db)):
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(404, "User not found")
    return user


@router.get("/{user_id}/ideas", response_model=list[IdeaOut])
async def get_user_ideas(
    user_id: str,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    if await db.get(User, user_id) is None:
        raise HTTPException(404, "User not found")
    ideas = await list_ideas(db, created_by=user_id, limit=limit, offset=offset)
    return await serialize_ideas(db, ideas, viewer)
