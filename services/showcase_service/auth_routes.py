from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from database import get_db
from schemas import (
    UserRegister, UserLogin, TokenResponse, RefreshTokenRequest, UserResponse,
    AuthSuccessResponse, ForgotPasswordRequest, ResetPasswordRequest, MessageResponse
)
from crud import (
    get_user_by_email, create_user, verify_password, record_login,
    create_refresh_token, get_refresh_token, revoke_refresh_token,
    create_verification_token, consume_verification_token, get_user_by_id,
    set_user_password
)
from auth import create_access_token, get_current_user
from models import User, UserStatus
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def to_user_response(user: User) -> UserResponse:
    return UserResponse.model_validate(user)


def issue_tokens(db: Session, user: User) -> AuthSuccessResponse:
    access_token = create_access_token(data={"sub": user.id, "userType": user.user_type.value})
    refresh_token_obj = create_refresh_token(db, user.id)
    return AuthSuccessResponse(
        access_token=access_token,
        refresh_token=refresh_token_obj.token,
        user=to_user_response(user)
    )


@router.post("/register", response_model=AuthSuccessResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, db: Session = Depends(get_db)):
    existing_user = get_user_by_email(db, user_data.email)
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists with this email"
        )

    db_user = create_user(
        db,
        email=user_data.email,
        password=user_data.password,
        first_name=user_data.first_name.strip(),
        last_name=user_data.last_name.strip(),
        user_type=user_data.user_type,
        country=user_data.country,
        city=user_data.city
    )

    # Mail delivery is not wired up; the token is only logged
    verification = create_verification_token(db, db_user.id, "email")
    logger.info("Email verification token for %s: %s", db_user.email, verification.token)

    return issue_tokens(db, db_user)


@router.post("/login", response_model=AuthSuccessResponse)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    user = get_user_by_email(db, credentials.email)
    if not user or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    if credentials.user_type and user.user_type != credentials.user_type:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    if user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is not active"
        )

    record_login(db, user)
    return issue_tokens(db, user)


@router.post("/refresh", response_model=TokenResponse)
def refresh_token(token_data: RefreshTokenRequest, db: Session = Depends(get_db)):
    db_token = get_refresh_token(db, token_data.refresh_token)
    if not db_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token"
        )

    user = get_user_by_id(db, db_token.user_id)
    if not user or user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token"
        )

    # Rotate: the presented refresh token is single use
    revoke_refresh_token(db, token_data.refresh_token)
    new_refresh = create_refresh_token(db, user.id)
    access_token = create_access_token(data={"sub": user.id, "userType": user.user_type.value})
    return TokenResponse(access_token=access_token, refresh_token=new_refresh.token)


@router.post("/logout", response_model=MessageResponse)
def logout(token_data: RefreshTokenRequest, db: Session = Depends(get_db)):
    revoke_refresh_token(db, token_data.refresh_token)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return to_user_response(current_user)


@router.get("/verify-email/{token}", response_model=MessageResponse)
def verify_email(token: str, db: Session = Depends(get_db)):
    user = consume_verification_token(db, token, "email")
    if not user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired verification token"
        )
    user.is_email_verified = True
    db.commit()
    return MessageResponse(message="Email verified successfully")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(request: ForgotPasswordRequest, db: Session = Depends(get_db)):
    user = get_user_by_email(db, request.email)
    # Same answer whether or not the account exists
    if user:
        reset = create_verification_token(db, user.id, "password_reset", expires_hours=1)
        logger.info("Password reset token for %s: %s", user.email, reset.token)
    return MessageResponse(message="If the email exists, a reset link has been sent")


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(request: ResetPasswordRequest, db: Session = Depends(get_db)):
    user = consume_verification_token(db, request.token, "password_reset")
    if not user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset token"
        )
    set_user_password(db, user, request.new_password)
    return MessageResponse(message="Password reset successfully")
