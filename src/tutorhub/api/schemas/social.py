"""Request bodies for social posts and content ingredients."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from tutorhub.db.models.base import IngredientType, PostStatus, SocialPlatform


class PostCreateRequest(BaseModel):
    title: str
    content: str
    platform: SocialPlatform
    status: PostStatus | None = None
    scheduled_date: datetime | None = Field(None, alias="scheduledDate")
    hashtags: list[str] = Field(default_factory=list)
    media_url: str | None = Field(None, alias="mediaUrl")

    model_config = ConfigDict(populate_by_name=True)


class PostUpdateRequest(BaseModel):
    title: str | None = None
    content: str | None = None
    platform: SocialPlatform | None = None
    status: PostStatus | None = None
    scheduled_date: datetime | None = Field(None, alias="scheduledDate")
    hashtags: list[str] | None = None
    media_url: str | None = Field(None, alias="mediaUrl")

    model_config = ConfigDict(populate_by_name=True)


class IngredientCreateRequest(BaseModel):
    title: str
    content: str
    type: IngredientType


class IngredientUpdateRequest(BaseModel):
    title: str | None = None
    content: str | None = None
    type: IngredientType | None = None
