from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.db.models import User
from app.db.session import get_db
from app.relationship import (
    RelationshipEngine,
    RelationshipQueryService,
    RelationshipStore,
    VisibilityEvaluator,
)
from app.services.session_store import SessionStore, get_session_store
from app.services.user_directory import UserDirectory
from app.utils.auth import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)

AUTH_REQUIRED_MESSAGE = "Authentication required. Please log in."


def get_bearer_token(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
) -> str | None:
    return token or request.cookies.get(settings.ACCESS_TOKEN_COOKIE_NAME)


async def get_current_user(
    token: str | None = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=AUTH_REQUIRED_MESSAGE,
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        raise credentials_exception

    claims = decode_access_token(token)
    if claims is None:
        raise credentials_exception
    user_id, session_id = claims

    # A logged-out or expired session invalidates the JWT even before `exp`.
    if await sessions.get_user_id(session_id) != user_id:
        raise credentials_exception

    user = await db.get(User, user_id)
    if user is None:
        raise credentials_exception

    return user


def get_relationship_store(db: AsyncSession = Depends(get_db)) -> RelationshipStore:
    return RelationshipStore(db)


def get_user_directory(db: AsyncSession = Depends(get_db)) -> UserDirectory:
    return UserDirectory(db)


def get_relationship_engine(
    store: RelationshipStore = Depends(get_relationship_store),
    users: UserDirectory = Depends(get_user_directory),
) -> RelationshipEngine:
    return RelationshipEngine(store, users)


def get_visibility_evaluator(
    store: RelationshipStore = Depends(get_relationship_store),
    users: UserDirectory = Depends(get_user_directory),
) -> VisibilityEvaluator:
    return VisibilityEvaluator(store, users)


def get_relationship_queries(
    store: RelationshipStore = Depends(get_relationship_store),
) -> RelationshipQueryService:
    return RelationshipQueryService(store)
