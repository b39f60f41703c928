"""Social content planning API router.

Any signed-in user may plan content; only the author or an admin may
change or delete it.
"""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from tutorhub.api.dependencies import CurrentUser, DbSession
from tutorhub.api.schemas.common import ERROR_RESPONSES, ActionResult, HealthResponse, ok
from tutorhub.api.schemas.social import (
    IngredientCreateRequest,
    IngredientUpdateRequest,
    PostCreateRequest,
    PostUpdateRequest,
)
from tutorhub.db.models.base import PostStatus, SocialPlatform
from tutorhub.services.social import (
    INGREDIENT_CREATED,
    INGREDIENT_DELETED,
    INGREDIENT_UPDATED,
    POST_CREATED,
    POST_DELETED,
    POST_UPDATED,
    PostChanges,
    SocialService,
)

router = APIRouter(prefix="/social", tags=["social"], responses=ERROR_RESPONSES)


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(namespace="social")


# -----------------------------------------------------------------------------
# Posts
# -----------------------------------------------------------------------------


@router.get("/posts", response_model=ActionResult)
async def list_posts(
    _user: CurrentUser,
    db: DbSession,
    platform: SocialPlatform | None = None,
    post_status: Annotated[PostStatus | None, Query(alias="status")] = None,
) -> ActionResult:
    return ok(await SocialService(db).list_posts(platform, post_status))


@router.post("/posts", response_model=ActionResult, status_code=status.HTTP_201_CREATED)
async def create_post(body: PostCreateRequest, user: CurrentUser, db: DbSession) -> ActionResult:
    post = await SocialService(db).create_post(created_by_id=user.principal_id, **body.model_dump())
    await db.commit()
    return ok(post, POST_CREATED)


@router.put("/posts/{post_id}", response_model=ActionResult)
async def update_post(
    post_id: UUID, body: PostUpdateRequest, user: CurrentUser, db: DbSession
) -> ActionResult:
    fields = body.model_dump(exclude_unset=True)
    changes = PostChanges(
        **fields,
        clear_media_url="media_url" in fields and not fields["media_url"],
    )
    post = await SocialService(db).update_post(
        post_id, changes, user_id=user.principal_id, is_admin=user.is_admin
    )
    await db.commit()
    return ok(post, POST_UPDATED)


@router.delete("/posts/{post_id}", response_model=ActionResult)
async def delete_post(post_id: UUID, user: CurrentUser, db: DbSession) -> ActionResult:
    await SocialService(db).delete_post(post_id, user_id=user.principal_id, is_admin=user.is_admin)
    await db.commit()
    return ok(None, POST_DELETED)


# -----------------------------------------------------------------------------
# Ingredients
# -----------------------------------------------------------------------------


@router.get("/ingredients", response_model=ActionResult)
async def list_ingredients(_user: CurrentUser, db: DbSession) -> ActionResult:
    return ok(await SocialService(db).list_ingredients())


@router.post("/ingredients", response_model=ActionResult, status_code=status.HTTP_201_CREATED)
async def create_ingredient(
    body: IngredientCreateRequest, user: CurrentUser, db: DbSession
) -> ActionResult:
    ingredient = await SocialService(db).create_ingredient(
        title=body.title, content=body.content, type=body.type, created_by_id=user.principal_id
    )
    await db.commit()
    return ok(ingredient, INGREDIENT_CREATED)


@router.put("/ingredients/{ingredient_id}", response_model=ActionResult)
async def update_ingredient(
    ingredient_id: UUID, body: IngredientUpdateRequest, user: CurrentUser, db: DbSession
) -> ActionResult:
    ingredient = await SocialService(db).update_ingredient(
        ingredient_id,
        user_id=user.principal_id,
        is_admin=user.is_admin,
        **body.model_dump(exclude_unset=True),
    )
    await db.commit()
    return ok(ingredient, INGREDIENT_UPDATED)


@router.delete("/ingredients/{ingredient_id}", response_model=ActionResult)
async def delete_ingredient(ingredient_id: UUID, user: CurrentUser, db: DbSession) -> ActionResult:
    await SocialService(db).delete_ingredient(
        ingredient_id, user_id=user.principal_id, is_admin=user.is_admin
    )
    await db.commit()
    return ok(None, INGREDIENT_DELETED)
