"""Social-media content planning models."""

from __future__ import annotations

import uuid  # noqa: TC003

from sqlalchemy import Enum, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tutorhub.db.models.base import (
    Base,
    IngredientType,
    OptionalTimestampTZ,
    PostStatus,
    SocialPlatform,
    TimestampTZ,
    UUIDPrimaryKey,
)
from tutorhub.db.models.users import User


class SocialPost(Base):
    """Planned or published social-media post."""

    __tablename__ = "social_posts"

    id: Mapped[UUIDPrimaryKey]
    created_at: Mapped[TimestampTZ]
    updated_at: Mapped[TimestampTZ]

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    platform: Mapped[SocialPlatform] = mapped_column(
        Enum(SocialPlatform, name="social_platform", create_constraint=True),
        nullable=False,
    )
    status: Mapped[PostStatus] = mapped_column(
        Enum(PostStatus, name="post_status", create_constraint=True),
        nullable=False,
        default=PostStatus.DRAFT,
    )
    scheduled_date: Mapped[OptionalTimestampTZ]
    hashtags: Mapped[list[str]] = mapped_column(ARRAY(String(100)), nullable=False, default=list)
    media_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    created_by_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_by: Mapped[User] = relationship("User")

    __table_args__ = (Index("ix_social_posts_scheduled_date", "scheduled_date"),)


class ContentIngredient(Base):
    """Reusable building block for posts (caption, hashtag set, media link)."""

    __tablename__ = "content_ingredients"

    id: Mapped[UUIDPrimaryKey]
    created_at: Mapped[TimestampTZ]
    updated_at: Mapped[TimestampTZ]

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[IngredientType] = mapped_column(
        Enum(IngredientType, name="ingredient_type", create_constraint=True),
        nullable=False,
    )

    created_by_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_by: Mapped[User] = relationship("User")
