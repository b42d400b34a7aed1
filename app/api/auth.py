import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy.future import select
from app.core.config import settings
from app.db.models import ProfileType, User
from app.db.session import get_db
from app.schemas.auth import LoginRequest, RegisterRequest, RegisterResponse, Token
from app.schemas.common import MessageResponse
from app.services.session_store import SessionStore, get_session_store
from app.utils.auth import create_access_token, decode_access_token, pwd_context
from app.utils.deps import get_bearer_token

log = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_auth_cookie(response: Response, access_token: str) -> None:
    response.set_cookie(
        key=settings.ACCESS_TOKEN_COOKIE_NAME,
        value=access_token,
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=settings.ACCESS_TOKEN_HTTPONLY,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
        domain=settings.COOKIE_DOMAIN,
        path="/",
    )

def _clear_auth_cookie(response: Response) -> None:
    response.set_cookie(
        key=settings.ACCESS_TOKEN_COOKIE_NAME,
        value="",
        max_age=0,
        httponly=settings.ACCESS_TOKEN_HTTPONLY,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
        domain=settings.COOKIE_DOMAIN,
        path="/",
    )


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(data: RegisterRequest, db: AsyncSession = Depends(get_db)):
    existing = await db.execute(
        select(User.username, User.email).where(
            (User.username == data.username) | (User.email == data.email)
        )
    )
    for username, email in existing.all():
        if username == data.username:
            raise HTTPException(
                status_code=409,
                detail="Username already taken. Please choose a different username.",
            )
        if email == data.email:
            raise HTTPException(
                status_code=409,
                detail="Email already registered. Please use a different email.",
            )

    user = User(
        name=data.name,
        username=data.username,
        email=data.email,
        password_hash=pwd_context.hash(data.password),
        gender=data.gender,
        date_of_birth=data.dob,
        profile_type=ProfileType.PUBLIC.value,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Username or Email already taken.")

    await db.refresh(user)
    log.info("User registered: id=%s username=%s", user.id, user.username)

    return RegisterResponse(message="User registered successfully", user_id=user.id)


@router.post("/login", response_model=Token)
async def login(
    data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
):
    result = await db.execute(select(User).where(User.username == data.username))
    user = result.scalar_one_or_none()

    if not user or not pwd_context.verify(data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password.",
        )

    session_id = await sessions.create(user.id, settings.SESSION_TTL_SECONDS)
    access_token = create_access_token(user.id, session_id)
    _set_auth_cookie(response, access_token)

    return Token(token=access_token, user_id=user.id)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    token: str | None = Depends(get_bearer_token),
    sessions: SessionStore = Depends(get_session_store),
):
    claims = decode_access_token(token) if token else None
    if claims is not None:
        _, session_id = claims
        await sessions.revoke(session_id)
    _clear_auth_cookie(response)
    return MessageResponse(message="Logged out successfully.")
