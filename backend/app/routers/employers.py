from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_employer, schedule_outbox_drain
from app.models import Employer
from app.schemas import (
    EmployerCreate,
    EmployerResponse,
    EmployerUpdate,
    LoginEmployerResponse,
    LoginRequest,
    MessageResponse,
    PasswordUpdate,
    UserResponse,
)
from app.services import accounts

router = APIRouter()


@router.post(
    "",
    response_model=EmployerResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(schedule_outbox_drain)],
)
def create_employer(data: EmployerCreate, db: Session = Depends(get_db)):
    """Register an employer together with its company."""
    employer = accounts.create_employer(db, data)
    return EmployerResponse.from_employer(employer)


@router.post("/login", response_model=LoginEmployerResponse)
def login_employer(data: LoginRequest, db: Session = Depends(get_db)):
    token, payload, employer = accounts.login_employer(db, data)
    return LoginEmployerResponse(
        access_token=token,
        access_token_expires_at=payload.expired_at,
        employer=EmployerResponse.from_employer(employer),
    )


@router.get("/verify-email", response_model=MessageResponse)
def verify_employer_email(
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
def send_verification_email_to_employer(
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


@router.get("/user-details/{email}", response_model=UserResponse)
def get_user_as_employer(
    email: str,
    employer: Employer = Depends(get_current_employer),
    db: Session = Depends(get_db),
):
    """Applicant profile as seen by an employer."""
    user = accounts.get_user_details(db, email)
    return UserResponse.from_user(user)


@router.get("", response_model=EmployerResponse)
def get_employer(employer: Employer = Depends(get_current_employer)):
    return EmployerResponse.from_employer(employer)


@router.patch("", response_model=EmployerResponse, dependencies=[Depends(schedule_outbox_drain)])
def update_employer(
    data: EmployerUpdate,
    employer: Employer = Depends(get_current_employer),
    db: Session = Depends(get_db),
):
    employer = accounts.update_employer(db, employer, data)
    return EmployerResponse.from_employer(employer)


@router.patch("/password", response_model=MessageResponse)
def update_employer_password(
    data: PasswordUpdate,
    employer: Employer = Depends(get_current_employer),
    db: Session = Depends(get_db),
):
    accounts.update_employer_password(db, employer, data)
    return MessageResponse(message="password updated successfully")


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(schedule_outbox_drain)],
)
def delete_employer(employer: Employer = Depends(get_current_employer), db: Session = Depends(get_db)):
    accounts.delete_employer(db, employer)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
