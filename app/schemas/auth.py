from datetime import date
from typing import Optional

from pydantic import Field

from app.schemas.common import CamelModel

class LoginRequest(CamelModel):
    username: str
    password: str

class RegisterRequest(CamelModel):
    name: str = Field(min_length=1)
    username: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)
    gender: Optional[str] = None
    dob: Optional[date] = None

class RegisterResponse(CamelModel):
    message: str
    user_id: int

class Token(CamelModel):
    token: str
    user_id: int
