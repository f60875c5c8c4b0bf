"""Job application lifecycle.

Status machine: an application starts as Applied, becomes Seen the first
time the employer opens it, and the employer may then move it to
Interviewing, Offered or Rejected. The applicant may edit it only while it
is still Applied.
"""

import logging

from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import exec_tx
from app.errors import ForbiddenError, InvalidRequestError, NotFoundError
from app.models import ApplicationStatus, Employer, JobApplication, User
from app.schemas import (
    ChangeStatusResponse,
    EmployerJobApplicationResponse,
    UserJobApplicationResponse,
)
from app.services.outbox import record_confirmation_email
from app.store import job_applications as application_store
from app.store import jobs as job_store

logger = logging.getLogger(__name__)
settings = get_settings()


def cv_link(application_id: int) -> str:
    return f"{settings.app_url}/api/v1/assets/cvs/{application_id}.pdf"


def _user_view(application: JobApplication, job_title: str, company_name: str) -> UserJobApplicationResponse:
    return UserJobApplicationResponse(
        application_id=application.id,
        job_id=application.job_id,
        job_title=job_title,
        company_name=company_name,
        application_status=application.status,
        application_date=application.applied_at,
        application_message=application.message,
        cv_link=cv_link(application.id),
        user_id=application.user_id,
    )


def _employer_view(application: JobApplication, job_title: str, applicant: User) -> EmployerJobApplicationResponse:
    return EmployerJobApplicationResponse(
        application_id=application.id,
        job_title=job_title,
        job_id=application.job_id,
        application_status=application.status,
        application_date=application.applied_at,
        application_message=application.message,
        user_id=applicant.id,
        user_email=applicant.email,
        user_full_name=applicant.full_name,
        user_location=applicant.location,
        cv_link=cv_link(application.id),
    )


def _check_applicant(user: User, application: JobApplication) -> None:
    if application.user_id != user.id:
        raise ForbiddenError(f"user with ID {user.id} is not the owner of this job application")


def _check_company_owns_job(db: Session, employer: Employer, job_id: int) -> None:
    if job_store.get_company_id_of_job(db, job_id) != employer.company_id:
        raise ForbiddenError(
            f"employer with ID {employer.id} is not part of the company that created this job"
        )


def create_application(
    db: Session, user: User, job_id: int, message: str | None, cv: bytes
) -> JobApplication:
    """Store an application and record the confirmation email in the same transaction."""
    row = job_store.get_job_with_company_name(db, job_id)
    if row is None:
        raise NotFoundError(f"job with ID {job_id} does not exist")
    job, company_name = row

    with exec_tx(db):
        application = application_store.create_job_application(
            db, user_id=user.id, job_id=job_id, message=message or None, cv=cv
        )
        record_confirmation_email(
            db,
            email=user.email,
            full_name=user.full_name,
            position=job.title,
            company_name=company_name,
        )

    db.refresh(application)
    logger.info("User %s applied for job %s", user.id, job_id)
    return application


def get_application_for_user(db: Session, user: User, application_id: int) -> UserJobApplicationResponse:
    application, job_title, company_name = application_store.get_user_application_row(db, application_id)
    _check_applicant(user, application)
    return _user_view(application, job_title, company_name)


def get_application_for_employer(
    db: Session, employer: Employer, application_id: int
) -> EmployerJobApplicationResponse:
    """Employer view of an application.

    Opening an Applied application moves it to Seen; the change is committed
    before the response is built.
    """
    application, job_title, applicant = application_store.get_employer_application_row(db, application_id)
    _check_company_owns_job(db, employer, application.job_id)

    if application.status == ApplicationStatus.APPLIED:
        with exec_tx(db):
            application_store.set_job_application_status(db, application, ApplicationStatus.SEEN)

    return _employer_view(application, job_title, applicant)


def change_application_status(
    db: Session, employer: Employer, application_id: int, new_status: ApplicationStatus
) -> ChangeStatusResponse:
    application = application_store.get_job_application(db, application_id)
    _check_company_owns_job(db, employer, application.job_id)

    with exec_tx(db):
        application_store.set_job_application_status(db, application, new_status)

    return ChangeStatusResponse(
        application_id=application.id,
        status=application.status,
        message="Status updated successfully",
    )


def update_application(
    db: Session,
    user: User,
    application_id: int,
    message: str | None,
    cv_provided: bool,
    cv: bytes | None,
) -> UserJobApplicationResponse:
    application = application_store.get_job_application(db, application_id)
    if application.user_id != user.id:
        raise ForbiddenError(f"user with ID {user.id} is not the applicant of this job application")
    if application.status != ApplicationStatus.APPLIED:
        raise ForbiddenError(
            f"job application with ID {application_id} was seen by the employer and cannot be updated anymore"
        )

    values = {"message": message or None}
    if cv_provided:
        if not cv:
            raise InvalidRequestError("valid CV file is required")
        values["cv"] = cv

    with exec_tx(db):
        application_store.update_job_application(db, application, values)

    return get_application_for_user(db, user, application_id)


def delete_application(db: Session, user: User, application_id: int) -> None:
    application = application_store.get_job_application(db, application_id)
    _check_applicant(user, application)
    with exec_tx(db):
        application_store.delete_job_application(db, application)


def list_user_applications(
    db: Session,
    user: User,
    page: int,
    page_size: int,
    status: ApplicationStatus | None = None,
    sort: str | None = None,
) -> list[UserJobApplicationResponse]:
    rows = application_store.list_user_applications(
        db, user.id, limit=page_size, offset=(page - 1) * page_size, status=status, sort=sort
    )
    return [_user_view(application, title, company) for application, title, company in rows]


def list_employer_applications(
    db: Session,
    employer: Employer,
    job_id: int,
    page: int,
    page_size: int,
    status: ApplicationStatus | None = None,
    sort: str | None = None,
) -> list[EmployerJobApplicationResponse]:
    _check_company_owns_job(db, employer, job_id)
    rows = application_store.list_job_applications_for_job(
        db, job_id, limit=page_size, offset=(page - 1) * page_size, status=status, sort=sort
    )
    return [_employer_view(application, title, applicant) for application, title, applicant in rows]


def get_cv_for_user(db: Session, user: User, application_id: int) -> bytes:
    application = application_store.get_job_application(db, application_id)
    _check_applicant(user, application)
    return application.cv


def get_cv_for_employer(db: Session, employer: Employer, application_id: int) -> bytes:
    application = application_store.get_job_application(db, application_id)
    _check_company_owns_job(db, employer, application.job_id)
    return application.cv
