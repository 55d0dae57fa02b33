"""Authentication endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

from insightstream.database import get_db
from insightstream.models.schemas import (
    UserLogin,
    UserResponse,
    Token,
    MessageResponse
)
from insightstream.models.user import User
from insightstream.services.auth_service import AuthService
from insightstream.middleware.auth import get_current_user, security

router = APIRouter()


@router.post("/login", response_model=Token)
def login(
    login_data: UserLogin,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Login with email and password.

    Returns:
        JWT access token and user data
    """
    user, error = AuthService.authenticate_user(db, login_data.email, login_data.password)

    if error:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error,
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = AuthService.create_user_session(
        db=db,
        user=user,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent")
    )

    return Token(
        access_token=access_token,
        token_type="bearer",
        user=UserResponse.model_validate(user)
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    credentials=Depends(security),
    db: Session = Depends(get_db)
):
    """Invalidate the current session."""
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    if not AuthService.logout_user(db, credentials.credentials):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found"
        )

    return MessageResponse(message="Successfully logged out")


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Current authenticated user's profile."""
    return UserResponse.model_validate(current_user)


@router.get("/verify", response_model=MessageResponse)
def verify_token(current_user: User = Depends(get_current_user)):
    """Check whether the current token is valid."""
    return MessageResponse(
        message="Token is valid",
        detail=f"Authenticated as {current_user.email}"
    )
