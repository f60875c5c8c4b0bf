from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user, schedule_outbox_drain
from app.models import User
from app.schemas import (
    EmployerResponse,
    LoginRequest,
    LoginUserResponse,
    MessageResponse,
    PasswordUpdate,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from app.services import accounts

router = APIRouter()


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(schedule_outbox_drain)],
)
def create_user(data: UserCreate, db: Session = Depends(get_db)):
    """Register a user. A verification email is sent asynchronously."""
    user = accounts.create_user(db, data)
    return UserResponse.from_user(user)


@router.post("/login", response_model=LoginUserResponse)
def login_user(data: LoginRequest, db: Session = Depends(get_db)):
    token, payload, user = accounts.login_user(db, data)
    return LoginUserResponse(
        access_token=token,
        access_token_expires_at=payload.expired_at,
        user=UserResponse.from_user(user),
    )


@router.get("/verify-email", response_model=MessageResponse)
def verify_user_email(
    id: int = Query(..., ge=1),
    code: str = Query(..., min_length=32, max_length=128),
    db: Session = Depends(get_db),
):
    accounts.verify_email(db, id, code)
    return MessageResponse(message="Successfully verified email")


@router.get(
    "/send-verification-email",
    response_model=MessageResponse,
    dependencies=[Depends(schedule_outbox_drain)],
)
def send_verification_email_to_user(
    email: str = Query(..., min_length=3, max_length=255),
    db: Session = Depends(get_db),
):
    accounts.resend_verification_email(db, email)
    return MessageResponse(
        message="If an unverified account exists with this email, a verification link has been sent."
    )


@router.get("/employer-company-details/{email}", response_model=EmployerResponse)
def get_employer_company_details(email: str, db: Session = Depends(get_db)):
    employer = accounts.get_employer_company_details(db, email)
    return EmployerResponse.from_employer(employer)


@router.get("", response_model=UserResponse)
def get_user(user: User = Depends(get_current_user)):
    return UserResponse.from_user(user)


@router.patch("", response_model=UserResponse)
def update_user(
    data: UserUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Partial update. Empty strings and zeros keep the current value."""
    user = accounts.update_user(db, user, data)
    return UserResponse.from_user(user)


@router.patch("/password", response_model=MessageResponse)
def update_user_password(
    data: PasswordUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    accounts.update_user_password(db, user, data)
    return MessageResponse(message="password updated successfully")


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    accounts.delete_user(db, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
