import logging

from fastapi import APIRouter, Depends, HTTPException

from app.db.models import User
from app.relationship import (
    NotFoundError,
    RelationshipQueryService,
    VisibilityEvaluator,
)
from app.schemas.common import MessageResponse
from app.schemas.relationship import (
    CanViewResponse,
    FollowerCountsResponse,
    RelationshipEntry,
)
from app.schemas.user import ProfileSettingsUpdate, UserOut
from app.services.user_directory import UserDirectory
from app.utils.deps import (
    get_current_user,
    get_relationship_queries,
    get_user_directory,
    get_visibility_evaluator,
)

log = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


async def _ensure_user(users: UserDirectory, user_id: int) -> User:
    user = await users.get(user_id)
    if user is None:
        raise NotFoundError("User not found.")
    return user


@router.get("/{user_id}", response_model=UserOut)
async def get_user_profile(
    user_id: int,
    current_user: User = Depends(get_current_user),
    users: UserDirectory = Depends(get_user_directory),
):
    return UserOut.model_validate(await _ensure_user(users, user_id))


@router.put("/{user_id}/settings", response_model=MessageResponse)
async def update_profile_settings(
    user_id: int,
    body: ProfileSettingsUpdate,
    current_user: User = Depends(get_current_user),
    users: UserDirectory = Depends(get_user_directory),
):
    if user_id != current_user.id:
        raise HTTPException(status_code=403, detail="Unauthorized to update this profile.")

    await users.set_profile_type(user_id, body.profile_type)
    log.info("Profile type changed: user=%s type=%s", user_id, body.profile_type.value)
    return MessageResponse(message="Profile settings updated successfully.")


@router.get("/{user_id}/can-view", response_model=CanViewResponse)
async def can_view_profile(
    user_id: int,
    current_user: User = Depends(get_current_user),
    visibility: VisibilityEvaluator = Depends(get_visibility_evaluator),
):
    decision = await visibility.explain(current_user.id, user_id)
    return CanViewResponse.from_visibility(decision)


@router.get("/{user_id}/follower-counts", response_model=FollowerCountsResponse)
async def get_follower_counts(
    user_id: int,
    current_user: User = Depends(get_current_user),
    users: UserDirectory = Depends(get_user_directory),
    queries: RelationshipQueryService = Depends(get_relationship_queries),
):
    await _ensure_user(users, user_id)
    return FollowerCountsResponse(
        followers=await queries.follower_count(user_id),
        following=await queries.following_count(user_id),
    )


@router.get("/{user_id}/followers", response_model=list[RelationshipEntry])
async def list_followers(
    user_id: int,
    current_user: User = Depends(get_current_user),
    users: UserDirectory = Depends(get_user_directory),
    queries: RelationshipQueryService = Depends(get_relationship_queries),
):
    """Users following `user_id`, newest first, flagged with whether the caller follows them."""
    await _ensure_user(users, user_id)
    items = await queries.followers(user_id, viewer_id=current_user.id)
    return [RelationshipEntry.from_edge(item) for item in items]


@router.get("/{user_id}/following", response_model=list[RelationshipEntry])
async def list_following(
    user_id: int,
    current_user: User = Depends(get_current_user),
    users: UserDirectory = Depends(get_user_directory),
    queries: RelationshipQueryService = Depends(get_relationship_queries),
):
    await _ensure_user(users, user_id)
    items = await queries.following(user_id, viewer_id=current_user.id)
    return [RelationshipEntry.from_edge(item) for item in items]
