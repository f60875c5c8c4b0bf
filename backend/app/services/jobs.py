"""Job posting workflows and job listings."""

import logging

from elasticsearch import ApiError, TransportError
from sqlalchemy.orm import Session

from app.database import exec_tx
from app.errors import InternalError, InvalidRequestError, UnauthenticatedError
from app.models import Employer, Job, User
from app.schemas import (
    JobCreate,
    JobDetailsResponse,
    JobListItem,
    JobResponse,
    JobSkillResponse,
    JobUpdate,
    SearchJobResult,
)
from app.services.outbox import record_job_delete, record_job_upsert
from app.services.search import SearchIndex
from app.store import jobs as job_store
from app.store.jobs import JobFilter

logger = logging.getLogger(__name__)

SALARY_RANGE_ERROR = "salary min cannot be greater than salary max"


def _offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size


def _get_owned_job(db: Session, employer: Employer, job_id: int) -> Job:
    job = job_store.get_job(db, job_id)
    if job.company_id != employer.company_id:
        raise UnauthenticatedError("job does not belong to this employer")
    return job


def _job_response(db: Session, job: Job) -> JobResponse:
    return JobResponse.from_job(job, job_store.list_job_skills(db, job.id))


def create_job(db: Session, employer: Employer, data: JobCreate) -> JobResponse:
    with exec_tx(db):
        job = job_store.create_job(
            db,
            company_id=employer.company_id,
            title=data.title,
            industry=data.industry,
            description=data.description,
            location=data.location,
            salary_min=data.salary_min,
            salary_max=data.salary_max,
            requirements=data.requirements,
        )
        if data.required_skills:
            job_store.add_job_skills(db, job.id, data.required_skills)
        record_job_upsert(db, job.id)

    logger.info("Employer %s created job %s", employer.id, job.id)
    return _job_response(db, job)


def update_job(db: Session, employer: Employer, job_id: int, data: JobUpdate) -> JobResponse:
    job = _get_owned_job(db, employer, job_id)
    values = data.model_dump(
        exclude={"required_skills_to_add", "required_skill_ids_to_remove"}, exclude_none=True
    )

    salary_min = values.get("salary_min", job.salary_min)
    salary_max = values.get("salary_max", job.salary_max)
    if salary_min > salary_max:
        raise InvalidRequestError(SALARY_RANGE_ERROR)

    with exec_tx(db):
        job_store.update_job(db, job, values)
        job_store.delete_job_skills(db, job.id, data.required_skill_ids_to_remove)
        if data.required_skills_to_add:
            job_store.add_job_skills(db, job.id, data.required_skills_to_add)
        record_job_upsert(db, job.id)

    return _job_response(db, job)


def delete_job(db: Session, employer: Employer, job_id: int) -> None:
    job = _get_owned_job(db, employer, job_id)
    with exec_tx(db):
        job_store.delete_job(db, job)
        record_job_delete(db, job_id)
    logger.info("Employer %s deleted job %s", employer.id, job_id)


def get_job_details(db: Session, job_id: int) -> JobDetailsResponse:
    job, company, employer = job_store.get_job_details(db, job_id)
    return JobDetailsResponse(
        **JobListItem.from_row(job, company.name).model_dump(),
        company_location=company.location,
        company_industry=company.industry,
        employer_id=employer.id if employer else None,
        employer_email=employer.email if employer else None,
        employer_full_name=employer.full_name if employer else None,
        required_skills=[
            JobSkillResponse(id=s.id, skill=s.name) for s in job_store.list_job_skills(db, job.id)
        ],
    )


def list_jobs(db: Session, filters: JobFilter, page: int, page_size: int) -> list[JobListItem]:
    rows = job_store.list_jobs(db, filters, limit=page_size, offset=_offset(page, page_size))
    return [JobListItem.from_row(job, company_name) for job, company_name in rows]


def list_jobs_by_company(
    db: Session,
    page: int,
    page_size: int,
    company_id: int | None = None,
    name: str | None = None,
    name_contains: str | None = None,
) -> list[JobListItem]:
    """Jobs of one company, selected by exactly one of id, name or name fragment."""
    selectors = [s for s in (company_id, name, name_contains) if s not in (None, "")]
    if not selectors:
        raise InvalidRequestError("company id, name or name_contains is required")
    if len(selectors) > 1:
        raise InvalidRequestError("only one of company id, name or name_contains is allowed")

    limit, offset = page_size, _offset(page, page_size)
    if company_id:
        rows = job_store.list_jobs_by_company_id(db, company_id, limit, offset)
    elif name:
        rows = job_store.list_jobs_by_company_name(db, name, limit, offset)
    else:
        rows = job_store.list_jobs_by_company_name_contains(db, name_contains, limit, offset)
    return [JobListItem.from_row(job, company_name) for job, company_name in rows]


def list_employer_jobs(db: Session, employer: Employer, page: int, page_size: int) -> list[JobListItem]:
    rows = job_store.list_jobs_by_company_id(
        db, employer.company_id, page_size, _offset(page, page_size)
    )
    return [JobListItem.from_row(job, company_name) for job, company_name in rows]


def list_jobs_matching_skills(db: Session, user: User, page: int, page_size: int) -> list[JobListItem]:
    rows = job_store.list_jobs_matching_user_skills(db, user.id, page_size, _offset(page, page_size))
    return [JobListItem.from_row(job, company_name) for job, company_name in rows]


def search_jobs(search_index: SearchIndex, query: str, page: int, page_size: int) -> list[SearchJobResult]:
    try:
        documents = search_index.search(query, page, page_size)
    except (ApiError, TransportError) as e:
        logger.error(f"Job search failed for {query!r}: {e}")
        raise InternalError("job search is unavailable") from e
    return [SearchJobResult(**document) for document in documents]
