from typing import Literal

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_employer, get_current_user, schedule_outbox_drain
from app.errors import InvalidRequestError
from app.models import ApplicationStatus, Employer, User
from app.schemas import (
    ChangeStatusRequest,
    ChangeStatusResponse,
    EmployerJobApplicationResponse,
    JobApplicationResponse,
    UserJobApplicationResponse,
)
from app.services import applications as application_service

router = APIRouter()

PAGE_SIZE_MIN = 5
PAGE_SIZE_MAX = 15

SortOrder = Literal["date-asc", "date-desc"]


def _read_cv(cv: UploadFile | None) -> bytes:
    if cv is None:
        raise InvalidRequestError("valid CV file is required")
    try:
        data = cv.file.read()
    except OSError as e:
        raise InvalidRequestError(f"failed to read the CV file: {e}")
    if not data:
        raise InvalidRequestError("valid CV file is required")
    return data


@router.post(
    "",
    response_model=JobApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(schedule_outbox_drain)],
)
def create_job_application(
    job_id: int = Form(..., gt=0),
    message: str | None = Form(None),
    cv: UploadFile = File(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Apply for a job with a CV upload. Applying twice for the same job is refused."""
    application = application_service.create_application(db, user, job_id, message, _read_cv(cv))
    return application


@router.get("/user", response_model=list[UserJobApplicationResponse])
def list_job_applications_for_user(
    page: int = Query(..., ge=1),
    page_size: int = Query(..., ge=PAGE_SIZE_MIN, le=PAGE_SIZE_MAX),
    status_filter: ApplicationStatus | None = Query(None, alias="status"),
    sort: SortOrder | None = Query(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return application_service.list_user_applications(db, user, page, page_size, status_filter, sort)


@router.get("/user/{application_id}", response_model=UserJobApplicationResponse)
def get_job_application_for_user(
    application_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return application_service.get_application_for_user(db, user, application_id)


@router.patch("/user/{application_id}", response_model=UserJobApplicationResponse)
def update_job_application(
    application_id: int,
    message: str | None = Form(None),
    cv_provided: str = Form("false"),
    cv: UploadFile | None = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Edit the message or replace the CV while the employer has not opened the application."""
    replace_cv = cv_provided.strip().lower() in ("true", "1")
    cv_data = _read_cv(cv) if replace_cv else None
    return application_service.update_application(
        db, user, application_id, message, replace_cv, cv_data
    )


@router.delete("/user/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_job_application(
    application_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    application_service.delete_application(db, user, application_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/employer", response_model=list[EmployerJobApplicationResponse])
def list_job_applications_for_employer(
    job_id: int = Query(..., ge=1),
    page: int = Query(..., ge=1),
    page_size: int = Query(..., ge=PAGE_SIZE_MIN, le=PAGE_SIZE_MAX),
    status_filter: ApplicationStatus | None = Query(None, alias="status"),
    sort: SortOrder | None = Query(None),
    employer: Employer = Depends(get_current_employer),
    db: Session = Depends(get_db),
):
    return application_service.list_employer_applications(
        db, employer, job_id, page, page_size, status_filter, sort
    )


@router.get("/employer/{application_id}", response_model=EmployerJobApplicationResponse)
def get_job_application_for_employer(
    application_id: int,
    employer: Employer = Depends(get_current_employer),
    db: Session = Depends(get_db),
):
    """Employer view. Opening an Applied application marks it Seen."""
    return application_service.get_application_for_employer(db, employer, application_id)


@router.patch("/employer/{application_id}/status", response_model=ChangeStatusResponse)
def change_job_application_status(
    application_id: int,
    data: ChangeStatusRequest,
    employer: Employer = Depends(get_current_employer),
    db: Session = Depends(get_db),
):
    return application_service.change_application_status(db, employer, application_id, data.new_status)
