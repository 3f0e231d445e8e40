from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
import uuid


class RegisterRequest(BaseModel):
    """Registration request schema."""
    email: EmailStr = Field(..., max_length=255, description="Email address")
    password: str = Field(..., min_length=8, max_length=72, description="Password (8-72 characters)")


class LoginRequest(BaseModel):
    """Login request schema."""
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, description="Password")


class UserResponse(BaseModel):
    """User response schema (without password)."""
    id: uuid.UUID
    email: str
    created_at: datetime

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    """Authentication response schema."""
    user: UserResponse
    message: str


class DeleteAccountResponse(BaseModel):
    """Response after removing an account and its data."""
    message: str
    flashcards_deleted: int
    learning_sessions_deleted: int
    generation_sessions_deleted: int
