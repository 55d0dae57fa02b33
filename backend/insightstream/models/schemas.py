"""Pydantic schemas for request/response validation."""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Literal
from datetime import datetime


# ============================================
# User Schemas
# ============================================

class UserBase(BaseModel):
    """Base user schema."""
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    role: Literal["user", "admin"] = "user"


class UserCreate(UserBase):
    """Schema for admin-created users."""
    password: str = Field(..., min_length=6)


class UserUpdate(BaseModel):
    """Schema for updating a user. Email cannot be changed."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[Literal["user", "admin"]] = None
    password: Optional[str] = Field(None, min_length=6)


class UserLogin(BaseModel):
    """Schema for user login."""
    email: str
    password: str


class UserResponse(UserBase):
    """Schema for user response."""
    id: str
    created_at: datetime
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


# ============================================
# Authentication Schemas
# ============================================

class Token(BaseModel):
    """Schema for JWT token response."""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# ============================================
# API Key Schemas
# ============================================

class ApiKeyCreate(BaseModel):
    """Schema for creating an API key."""
    service_name: str = Field(..., min_length=1, max_length=100)
    key_value: str = Field(..., min_length=1)
    description: Optional[str] = Field(None, max_length=255)


class ApiKeyUpdate(BaseModel):
    """Schema for updating an API key."""
    service_name: Optional[str] = Field(None, min_length=1, max_length=100)
    key_value: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, max_length=255)


class ApiKeyResponse(BaseModel):
    """Schema for API key response (value masked)."""
    id: str
    service_name: str
    masked_value: str
    description: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime


# ============================================
# Generic Response Schemas
# ============================================

class MessageResponse(BaseModel):
    """Generic message response."""
    message: str
    detail: Optional[str] = None
