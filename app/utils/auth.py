from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from passlib.context import CryptContext
from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def create_token(data: dict, secret: str, expires_delta: timedelta):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret, algorithm=settings.ALGORITHM)

def create_access_token(user_id: int, session_id: str) -> str:
    return create_token(
        {"sub": str(user_id), "sid": session_id},
        settings.SECRET_KEY,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

def decode_access_token(token: str) -> tuple[int, str] | None:
    """Returns (user_id, session_id), or None for a bad or expired token."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    sub = payload.get("sub")
    sid = payload.get("sid")
    if sub is None or sid is None:
        return None
    try:
        return int(sub), sid
    except (TypeError, ValueError):
        return None
