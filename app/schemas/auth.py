from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    # bcrypt only looks at the first 72 bytes
    password: str = Field(..., min_length=6, max_length=72, description="At least 6 characters")


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)


class UserView(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    name: str
    email: str
    created_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    token: str
    user: UserView


class UserResponse(BaseModel):
    user: UserView


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
