"""Social-media content planning: posts and reusable content ingredients.

Only the author of a post or ingredient, or an admin, may change it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from tutorhub.core.errors import Forbidden, InvalidInput, NotFound
from tutorhub.db.models.base import IngredientType, PostStatus, SocialPlatform

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

POST_CREATED = "Gönderi başarıyla oluşturuldu"
POST_UPDATED = "Gönderi başarıyla güncellendi"
POST_DELETED = "Gönderi başarıyla silindi"
INGREDIENT_CREATED = "Bileşen başarıyla oluşturuldu"
INGREDIENT_UPDATED = "Bileşen başarıyla güncellendi"
INGREDIENT_DELETED = "Bileşen başarıyla silindi"


class PostNotFoundError(NotFound):
    code = "post_not_found"
    default_message = "Gönderi bulunamadı"


class IngredientNotFoundError(NotFound):
    code = "ingredient_not_found"
    default_message = "Bileşen bulunamadı"


class PostOwnershipError(Forbidden):
    code = "post_forbidden"
    default_message = "Bu gönderiyi düzenleme yetkiniz yok"


class IngredientOwnershipError(Forbidden):
    code = "ingredient_forbidden"
    default_message = "Bu bileşeni düzenleme yetkiniz yok"


def can_modify(created_by_id: UUID, user_id: UUID, is_admin: bool) -> bool:
    return is_admin or created_by_id == user_id


@dataclass(frozen=True, slots=True)
class Author:
    id: UUID
    username: str
    first_name: str | None
    last_name: str | None


def _blank(value: str | None) -> bool:
    """True for a provided value that is empty or whitespace."""
    return value is not None and not value.strip()


def _author(user: Any) -> Author | None:
    if user is None:
        return None
    return Author(
        id=user.id, username=user.username, first_name=user.first_name, last_name=user.last_name
    )


@dataclass(frozen=True, slots=True)
class PostView:
    id: UUID
    title: str
    content: str
    platform: SocialPlatform
    status: PostStatus
    scheduled_date: datetime | None
    hashtags: list[str]
    media_url: str | None
    created_by_id: UUID
    created_at: datetime
    updated_at: datetime
    created_by: Author | None = None

    @classmethod
    def from_model(cls, post: Any) -> PostView:
        return cls(
            id=post.id,
            title=post.title,
            content=post.content,
            platform=post.platform,
            status=post.status,
            scheduled_date=post.scheduled_date,
            hashtags=list(post.hashtags or []),
            media_url=post.media_url,
            created_by_id=post.created_by_id,
            created_at=post.created_at,
            updated_at=post.updated_at,
            created_by=_author(post.created_by),
        )


@dataclass(frozen=True, slots=True)
class IngredientView:
    id: UUID
    title: str
    content: str
    type: IngredientType
    created_by_id: UUID
    created_at: datetime
    updated_at: datetime
    created_by: Author | None = None

    @classmethod
    def from_model(cls, ingredient: Any) -> IngredientView:
        return cls(
            id=ingredient.id,
            title=ingredient.title,
            content=ingredient.content,
            type=ingredient.type,
            created_by_id=ingredient.created_by_id,
            created_at=ingredient.created_at,
            updated_at=ingredient.updated_at,
            created_by=_author(ingredient.created_by),
        )


@dataclass(slots=True)
class PostChanges:
    """Fields to change on a post; None leaves a field as it is."""

    title: str | None = None
    content: str | None = None
    platform: SocialPlatform | None = None
    status: PostStatus | None = None
    scheduled_date: datetime | None = None
    hashtags: list[str] | None = None
    media_url: str | None = None
    clear_media_url: bool = False


class SocialService:
    """Posts and ingredients with author-or-admin ownership checks."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    async def _get_post(self, post_id: UUID) -> Any:
        from sqlalchemy import select
        from sqlalchemy.orm import selectinload

        from tutorhub.db.models import SocialPost

        result = await self._session.execute(
            select(SocialPost)
            .where(SocialPost.id == post_id)
            .options(selectinload(SocialPost.created_by))
        )
        post = result.scalar_one_or_none()
        if post is None:
            raise PostNotFoundError()
        return post

    async def list_posts(
        self,
        platform: SocialPlatform | None = None,
        status: PostStatus | None = None,
    ) -> list[PostView]:
        """Posts, latest scheduled date first; unscheduled drafts last."""
        from sqlalchemy import select
        from sqlalchemy.orm import selectinload

        from tutorhub.db.models import SocialPost

        query = select(SocialPost).options(selectinload(SocialPost.created_by))
        if platform is not None:
            query = query.where(SocialPost.platform == platform)
        if status is not None:
            query = query.where(SocialPost.status == status)
        query = query.order_by(
            SocialPost.scheduled_date.desc().nulls_last(), SocialPost.created_at.desc()
        )
        result = await self._session.execute(query)
        return [PostView.from_model(p) for p in result.scalars().all()]

    async def create_post(
        self,
        *,
        title: str,
        content: str,
        platform: SocialPlatform,
        created_by_id: UUID,
        status: PostStatus | None = None,
        scheduled_date: datetime | None = None,
        hashtags: list[str] | None = None,
        media_url: str | None = None,
    ) -> PostView:
        from tutorhub.db.models import SocialPost

        if not title.strip() or not content.strip():
            raise InvalidInput("Başlık, içerik ve platform gereklidir")

        post = SocialPost(
            title=title.strip(),
            content=content,
            platform=platform,
            status=status or PostStatus.DRAFT,
            scheduled_date=scheduled_date,
            hashtags=hashtags or [],
            media_url=media_url or None,
            created_by_id=created_by_id,
        )
        self._session.add(post)
        await self._session.flush()
        logger.info("Social post created", extra={"post_id": str(post.id)})
        return PostView.from_model(await self._get_post(post.id))

    async def update_post(
        self, post_id: UUID, changes: PostChanges, *, user_id: UUID, is_admin: bool
    ) -> PostView:
        post = await self._get_post(post_id)
        if not can_modify(post.created_by_id, user_id, is_admin):
            logger.warning(
                "Post update denied", extra={"post_id": str(post_id), "user_id": str(user_id)}
            )
            raise PostOwnershipError()

        if _blank(changes.title) or _blank(changes.content):
            raise InvalidInput("Başlık ve içerik boş olamaz")
        for name in ("title", "content", "platform", "status", "scheduled_date", "hashtags"):
            value = getattr(changes, name)
            if value is not None:
                setattr(post, name, value.strip() if name == "title" else value)
        if changes.media_url is not None or changes.clear_media_url:
            post.media_url = changes.media_url or None
        post.updated_at = datetime.now(UTC)

        await self._session.flush()
        logger.info("Social post updated", extra={"post_id": str(post_id)})
        return PostView.from_model(post)

    async def delete_post(self, post_id: UUID, *, user_id: UUID, is_admin: bool) -> None:
        post = await self._get_post(post_id)
        if not can_modify(post.created_by_id, user_id, is_admin):
            raise PostOwnershipError()
        await self._session.delete(post)
        await self._session.flush()
        logger.info("Social post deleted", extra={"post_id": str(post_id)})

    # ------------------------------------------------------------------
    # Ingredients
    # ------------------------------------------------------------------

    async def _get_ingredient(self, ingredient_id: UUID) -> Any:
        from sqlalchemy import select
        from sqlalchemy.orm import selectinload

        from tutorhub.db.models import ContentIngredient

        result = await self._session.execute(
            select(ContentIngredient)
            .where(ContentIngredient.id == ingredient_id)
            .options(selectinload(ContentIngredient.created_by))
        )
        ingredient = result.scalar_one_or_none()
        if ingredient is None:
            raise IngredientNotFoundError()
        return ingredient

    async def list_ingredients(self) -> list[IngredientView]:
        from sqlalchemy import select
        from sqlalchemy.orm import selectinload

        from tutorhub.db.models import ContentIngredient

        result = await self._session.execute(
            select(ContentIngredient)
            .options(selectinload(ContentIngredient.created_by))
            .order_by(ContentIngredient.created_at.desc())
        )
        return [IngredientView.from_model(i) for i in result.scalars().all()]

    async def create_ingredient(
        self, *, title: str, content: str, type: IngredientType, created_by_id: UUID
    ) -> IngredientView:
        from tutorhub.db.models import ContentIngredient

        if not title.strip() or not content.strip():
            raise InvalidInput("Başlık ve içerik gereklidir")

        ingredient = ContentIngredient(
            title=title.strip(), content=content, type=type, created_by_id=created_by_id
        )
        self._session.add(ingredient)
        await self._session.flush()
        logger.info("Content ingredient created", extra={"ingredient_id": str(ingredient.id)})
        return IngredientView.from_model(await self._get_ingredient(ingredient.id))

    async def update_ingredient(
        self,
        ingredient_id: UUID,
        *,
        user_id: UUID,
        is_admin: bool,
        title: str | None = None,
        content: str | None = None,
        type: IngredientType | None = None,
    ) -> IngredientView:
        ingredient = await self._get_ingredient(ingredient_id)
        if not can_modify(ingredient.created_by_id, user_id, is_admin):
            raise IngredientOwnershipError()

        if _blank(title) or _blank(content):
            raise InvalidInput("Başlık ve içerik boş olamaz")
        if title is not None:
            ingredient.title = title.strip()
        if content is not None:
            ingredient.content = content
        if type is not None:
            ingredient.type = type
        ingredient.updated_at = datetime.now(UTC)

        await self._session.flush()
        return IngredientView.from_model(ingredient)

    async def delete_ingredient(self, ingredient_id: UUID, *, user_id: UUID, is_admin: bool) -> None:
        ingredient = await self._get_ingredient(ingredient_id)
        if not can_modify(ingredient.created_by_id, user_id, is_admin):
            raise IngredientOwnershipError()
        await self._session.delete(ingredient)
        await self._session.flush()
        logger.info("Content ingredient deleted", extra={"ingredient_id": str(ingredient_id)})
