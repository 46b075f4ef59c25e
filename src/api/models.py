"""Pydantic models for API request/response."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PhoneRequest(BaseModel):
    """Phone as sent by clients. Omit ``id`` to create a new phone."""
    id: Optional[int] = Field(None, description="Existing phone ID; omit to add a new phone")
    number: Optional[str] = Field(None, examples=["1234567"])
    city_code: Optional[str] = Field(None, examples=["1"])
    country_code: Optional[str] = Field(None, examples=["57"])


class UserRequest(BaseModel):
    """Request model for creating, replacing or patching a user.

    Validation happens in the service layer so that every failing rule can be
    reported together; everything here is optional.
    """
    name: Optional[str] = Field(None, examples=["Juan S"])
    email: Optional[str] = Field(None, examples=["someone@example.com"])
    password: Optional[str] = Field(None, examples=["Juan!1sa"])
    active: Optional[bool] = None
    phones: Optional[list[PhoneRequest]] = None


class PhoneResponse(BaseModel):
    id: Optional[int] = None
    number: Optional[str] = None
    city_code: Optional[str] = None
    country_code: Optional[str] = None


class UserResponse(BaseModel):
    """Response model for a user. Never carries the password hash."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    active: Optional[bool] = None
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    token: Optional[str] = None
    phones: list[PhoneResponse] = Field(default_factory=list)


class LoginRequest(BaseModel):
    """Request model for user login."""
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(BaseModel):
    """Request model for user registration."""
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class TokenResponse(BaseModel):
    """Response model for login and registration."""
    token: str
    token_type: str = "Bearer"


class ValidationErrorResponse(BaseModel):
    errors: list[str]


class ErrorMessage(BaseModel):
    detail: str
