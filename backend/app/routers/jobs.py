from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import (
    get_current_employer,
    get_current_user,
    get_search_index,
    schedule_outbox_drain,
)
from app.models import Employer, User
from app.schemas import (
    JobCreate,
    JobDetailsResponse,
    JobListItem,
    JobResponse,
    JobUpdate,
    SearchJobResult,
)
from app.services import jobs as job_service
from app.services.search import SearchIndex
from app.store.jobs import JobFilter

router = APIRouter()

PAGE_SIZE_MIN = 5
PAGE_SIZE_MAX = 15


@router.post(
    "",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(schedule_outbox_drain)],
)
def create_job(
    data: JobCreate,
    employer: Employer = Depends(get_current_employer),
    db: Session = Depends(get_db),
):
    """Post a job for the employer's company. It becomes searchable once the outbox is drained."""
    return job_service.create_job(db, employer, data)


@router.get("", response_model=list[JobListItem])
def filter_and_list_jobs(
    page: int = Query(..., ge=1),
    page_size: int = Query(..., ge=PAGE_SIZE_MIN, le=PAGE_SIZE_MAX),
    title: str | None = Query(None, description="Case-insensitive substring of the title"),
    industry: str | None = Query(None),
    job_location: str | None = Query(None),
    salary_min: int | None = Query(None, ge=0, description="Lower bound on the job's minimum salary"),
    salary_max: int | None = Query(None, ge=0, description="Upper bound on the job's maximum salary"),
    db: Session = Depends(get_db),
):
    filters = JobFilter(
        title=title,
        location=job_location,
        industry=industry,
        salary_min=salary_min,
        salary_max=salary_max,
    )
    return job_service.list_jobs(db, filters, page, page_size)


@router.get("/company", response_model=list[JobListItem])
def list_jobs_by_company(
    page: int = Query(..., ge=1),
    page_size: int = Query(..., ge=PAGE_SIZE_MIN, le=PAGE_SIZE_MAX),
    id: int | None = Query(None, ge=1),
    name: str | None = Query(None),
    name_contains: str | None = Query(None),
    db: Session = Depends(get_db),
):
    return job_service.list_jobs_by_company(
        db, page, page_size, company_id=id, name=name, name_contains=name_contains
    )


@router.get("/search", response_model=list[SearchJobResult])
def search_jobs(
    page: int = Query(..., ge=1),
    page_size: int = Query(..., ge=PAGE_SIZE_MIN, le=PAGE_SIZE_MAX),
    search: str = Query(..., min_length=1),
    search_index: SearchIndex = Depends(get_search_index),
):
    """Full-text search over title, description, requirements, skills and location."""
    return job_service.search_jobs(search_index, search, page, page_size)


@router.get("/employer", response_model=list[JobListItem])
def list_employer_jobs(
    page: int = Query(..., ge=1),
    page_size: int = Query(..., ge=PAGE_SIZE_MIN, le=PAGE_SIZE_MAX),
    employer: Employer = Depends(get_current_employer),
    db: Session = Depends(get_db),
):
    return job_service.list_employer_jobs(db, employer, page, page_size)


@router.get("/match-skills", response_model=list[JobListItem])
def list_jobs_by_matching_skills(
    page: int = Query(..., ge=1),
    page_size: int = Query(..., ge=PAGE_SIZE_MIN, le=PAGE_SIZE_MAX),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return job_service.list_jobs_matching_skills(db, user, page, page_size)


@router.get("/{job_id}", response_model=JobDetailsResponse)
def get_job(job_id: int, db: Session = Depends(get_db)):
    return job_service.get_job_details(db, job_id)


@router.patch("/{job_id}", response_model=JobResponse, dependencies=[Depends(schedule_outbox_drain)])
def update_job(
    job_id: int,
    data: JobUpdate,
    employer: Employer = Depends(get_current_employer),
    db: Session = Depends(get_db),
):
    """Partial update. Empty strings and zeros keep the current value."""
    return job_service.update_job(db, employer, job_id, data)


@router.delete(
    "/{job_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(schedule_outbox_drain)],
)
def delete_job(
    job_id: int,
    employer: Employer = Depends(get_current_employer),
    db: Session = Depends(get_db),
):
    job_service.delete_job(db, employer, job_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
