from sqlalchemy.orm import Session

from app.errors import NotFoundError
from app.models import ApplicationStatus, Company, Job, JobApplication, User
from app.store.common import flush_or_conflict

SORT_DATE_ASC = "date-asc"
SORT_DATE_DESC = "date-desc"


def create_job_application(
    db: Session, user_id: int, job_id: int, message: str | None, cv: bytes
) -> JobApplication:
    application = JobApplication(
        user_id=user_id,
        job_id=job_id,
        message=message,
        cv=cv,
        status=ApplicationStatus.APPLIED,
    )
    db.add(application)
    flush_or_conflict(db, f"user with ID {user_id} has already applied for this job")
    return application


def get_job_application(db: Session, application_id: int) -> JobApplication:
    application = db.query(JobApplication).filter(JobApplication.id == application_id).first()
    if application is None:
        raise NotFoundError(f"job application with ID {application_id} does not exist")
    return application


def update_job_application(db: Session, application: JobApplication, values: dict) -> JobApplication:
    for key, value in values.items():
        if value is not None:
            setattr(application, key, value)
    db.flush()
    return application


def set_job_application_status(
    db: Session, application: JobApplication, status: ApplicationStatus
) -> JobApplication:
    application.status = status
    db.flush()
    return application


def delete_job_application(db: Session, application: JobApplication) -> None:
    db.delete(application)
    db.flush()


def _apply_status_and_sort(query, status: ApplicationStatus | None, sort: str | None):
    if status is not None:
        query = query.filter(JobApplication.status == status)
    if sort == SORT_DATE_ASC:
        return query.order_by(JobApplication.applied_at.asc(), JobApplication.id.asc())
    if sort == SORT_DATE_DESC:
        return query.order_by(JobApplication.applied_at.desc(), JobApplication.id.desc())
    return query.order_by(JobApplication.id)


def get_user_application_row(db: Session, application_id: int) -> tuple[JobApplication, str, str]:
    """Application with the job title and company name, as the applicant sees it."""
    row = (
        db.query(JobApplication, Job.title, Company.name)
        .join(Job, JobApplication.job_id == Job.id)
        .join(Company, Job.company_id == Company.id)
        .filter(JobApplication.id == application_id)
        .first()
    )
    if row is None:
        raise NotFoundError(f"job application with ID {application_id} does not exist")
    return row[0], row[1], row[2]


def list_user_applications(
    db: Session,
    user_id: int,
    limit: int,
    offset: int,
    status: ApplicationStatus | None = None,
    sort: str | None = None,
) -> list[tuple[JobApplication, str, str]]:
    query = (
        db.query(JobApplication, Job.title, Company.name)
        .join(Job, JobApplication.job_id == Job.id)
        .join(Company, Job.company_id == Company.id)
        .filter(JobApplication.user_id == user_id)
    )
    query = _apply_status_and_sort(query, status, sort)
    return [tuple(row) for row in query.limit(limit).offset(offset).all()]


def get_employer_application_row(db: Session, application_id: int) -> tuple[JobApplication, str, User]:
    """Application with the job title and applicant, as the employer sees it."""
    row = (
        db.query(JobApplication, Job.title, User)
        .join(Job, JobApplication.job_id == Job.id)
        .join(User, JobApplication.user_id == User.id)
        .filter(JobApplication.id == application_id)
        .first()
    )
    if row is None:
        raise NotFoundError(f"job application with ID {application_id} does not exist")
    return row[0], row[1], row[2]


def list_job_applications_for_job(
    db: Session,
    job_id: int,
    limit: int,
    offset: int,
    status: ApplicationStatus | None = None,
    sort: str | None = None,
) -> list[tuple[JobApplication, str, User]]:
    query = (
        db.query(JobApplication, Job.title, User)
        .join(Job, JobApplication.job_id == Job.id)
        .join(User, JobApplication.user_id == User.id)
        .filter(JobApplication.job_id == job_id)
    )
    query = _apply_status_and_sort(query, status, sort)
    return [tuple(row) for row in query.limit(limit).offset(offset).all()]
