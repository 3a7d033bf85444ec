from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from ideahub.schemas.user import UserPublic

OwnershipMode = Literal["forsale", "partnership", "showcase"]


def _clean_tags(value):
    # Accept "a, b, c" as well as a list, like the upload form does.
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [t.strip() for t in value if t and t.strip()]


class IdeaCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    tags: list[str] = []
    image: Optional[str] = None
    is_nft: bool = False
    is_blurred: bool = False
    ownership_mode: OwnershipMode = "showcase"
    price_cents: Optional[PositiveInt] = None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value):
        return _clean_tags(value)


class IdeaUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1)
    tags: Optional[list[str]] = None
    image: Optional[str] = None
    is_blurred: Optional[bool] = None
    ownership_mode: Optional[OwnershipMode] = None
    price_cents: Optional[PositiveInt] = None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value):
        return _clean_tags(value)


class RemixCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    remix_changes: Optional[str] = None
    tags: Optional[list[str]] = None
    image: Optional[str] = None
    is_nft: bool = False
    is_blurred: bool = False

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value):
        return _clean_tags(value)


class IdeaOut(BaseModel):
    id: str
    title: str
    description: str
    tags: list[str]
    image: Optional[str] = None
    is_nft: bool
    minted_by: Optional[str] = None
    is_blurred: bool
    created_by: str
    remix_of_id: Optional[str] = None
    ownership_mode: str
    price_cents: int
    created_at: datetime

    author: Optional[UserPublic] = None
    minted_user: Optional[UserPublic] = None

    upvote_count: int = 0
    comment_count: int = 0
    user_upvoted: bool = False

    # False when the viewer only sees the blurred teaser
    can_view_full: bool = True
    can_purchase: bool = False


class IdeaListResponse(BaseModel):
    count: int
    items: list[IdeaOut]


class CommentCreate(BaseModel):
    comment_text: str = Field(min_length=1, max_length=5000)


class CommentOut(BaseModel):
    id: str
    idea_id: str
    user_id: str
    comment_text: str
    created_at: datetime
    author: Optional[UserPublic] = None

    model_config = ConfigDict(from_attributes=True)


class UpvoteToggleResponse(BaseModel):
    idea_id: str
    upvoted: bool
    upvote_count: int
