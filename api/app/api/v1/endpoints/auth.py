from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from app.core.database import get_session
from app.models.models import User
from app.schemas.auth import LoginRequest, RegisterRequest, AuthResponse, UserResponse, DeleteAccountResponse
from app.services.user_service import register_user, authenticate_user, delete_user_data
from app.api.v1.endpoints.utils import get_current_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=AuthResponse)
async def login(
    login_data: LoginRequest,
    session: Session = Depends(get_session)
):
    """Login with email and password."""
    user = authenticate_user(session, login_data.email, login_data.password)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        message="Login successful"
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    register_data: RegisterRequest,
    session: Session = Depends(get_session)
):
    """Register a new user."""
    user = register_user(session, register_data.email, register_data.password)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        message="Registration successful"
    )


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the signed-in user."""
    return UserResponse.model_validate(current_user)


@router.delete("/account", response_model=DeleteAccountResponse)
async def delete_account(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """
    Delete the signed-in user's account.

    Removes all learning sessions, review records, flashcards and generation
    sessions owned by the user, then the user itself.
    """
    counts = delete_user_data(session, current_user.id)
    return DeleteAccountResponse(
        message="Account deleted successfully",
        **counts
    )
