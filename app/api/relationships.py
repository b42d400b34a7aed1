from fastapi import APIRouter, Depends, Path

from app.db.models import User
from app.relationship import (
    NotFoundError,
    RelationshipEngine,
    RelationshipQueryService,
)
from app.schemas.common import MessageResponse
from app.schemas.relationship import (
    ActionRequest,
    RelationshipEntry,
    RelationshipStatusResponse,
)
from app.services.user_directory import UserDirectory
from app.utils.deps import (
    get_current_user,
    get_relationship_engine,
    get_relationship_queries,
    get_user_directory,
)

router = APIRouter(prefix="/relationships", tags=["relationships"])


@router.get("/pending", response_model=list[RelationshipEntry])
async def list_pending_requests(
    user: User = Depends(get_current_user),
    queries: RelationshipQueryService = Depends(get_relationship_queries),
):
    """Follow requests other users have sent to the caller, oldest first."""
    items = await queries.pending_incoming(user.id)
    return [RelationshipEntry.from_edge(item) for item in items]


@router.get("/outgoing", response_model=list[RelationshipEntry])
async def list_outgoing_requests(
    user: User = Depends(get_current_user),
    queries: RelationshipQueryService = Depends(get_relationship_queries),
):
    """Follow requests the caller has sent that are still awaiting approval."""
    items = await queries.pending_outgoing(user.id)
    return [RelationshipEntry.from_edge(item) for item in items]


@router.get("/{target_id}/status", response_model=RelationshipStatusResponse)
async def get_relationship_status(
    target_id: int = Path(..., description="User on the other side of the relationship"),
    user: User = Depends(get_current_user),
    users: UserDirectory = Depends(get_user_directory),
    queries: RelationshipQueryService = Depends(get_relationship_queries),
):
    if not await users.exists(target_id):
        raise NotFoundError("User not found.")
    dual = await queries.dual_status(user.id, target_id)
    return RelationshipStatusResponse.from_dual(dual)


@router.post("/{target_id}/action", response_model=MessageResponse)
async def perform_relationship_action(
    body: ActionRequest,
    target_id: int = Path(..., description="User the action is directed at"),
    user: User = Depends(get_current_user),
    engine: RelationshipEngine = Depends(get_relationship_engine),
):
    # Errors propagate as RelationshipError and are rendered by the app handler.
    outcome = await engine.execute(user.id, target_id, body.action)
    return MessageResponse(message=outcome.message)
