"""
User data models for authentication and user management.
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class UserCreate(BaseModel):
    """Schema for user registration."""
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserLogin(BaseModel):
    """Schema for user login."""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserPublic(BaseModel):
    """Public user attributes (never the password digest)."""
    id: str
    name: str
    email: str


class RegisterResponse(BaseModel):
    message: str
    user: UserPublic


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserPublic


class TokenData(BaseModel):
    """Schema for token payload data."""
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    issued_at: Optional[int] = None
    expires_at: Optional[int] = None
