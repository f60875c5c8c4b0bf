from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.errors import NotFoundError
from app.models import Company, Employer, Job, JobSkill, UserSkill


@dataclass
class JobFilter:
    title: str | None = None
    location: str | None = None
    industry: str | None = None
    salary_min: int | None = None
    salary_max: int | None = None


def create_job(db: Session, **fields) -> Job:
    job = Job(**fields)
    db.add(job)
    db.flush()
    return job


def get_job(db: Session, job_id: int) -> Job:
    job = db.query(Job).filter(Job.id == job_id).first()
    if job is None:
        raise NotFoundError(f"job with ID {job_id} does not exist")
    return job


def update_job(db: Session, job: Job, values: dict) -> Job:
    for key, value in values.items():
        if value is not None:
            setattr(job, key, value)
    db.flush()
    return job


def delete_job(db: Session, job: Job) -> None:
    """Delete a job. Skills and applications go with it through the FK cascade."""
    db.delete(job)
    db.flush()


def get_company_id_of_job(db: Session, job_id: int) -> int:
    company_id = db.query(Job.company_id).filter(Job.id == job_id).scalar()
    if company_id is None:
        raise NotFoundError(f"job with ID {job_id} does not exist")
    return company_id


def add_job_skills(db: Session, job_id: int, names: list[str]) -> list[JobSkill]:
    rows = [JobSkill(job_id=job_id, name=name) for name in names]
    db.add_all(rows)
    db.flush()
    return rows


def delete_job_skills(db: Session, job_id: int, skill_ids: list[int]) -> int:
    """Delete the given skills, restricted to those attached to the job."""
    if not skill_ids:
        return 0
    deleted = (
        db.query(JobSkill)
        .filter(JobSkill.job_id == job_id, JobSkill.id.in_(skill_ids))
        .delete(synchronize_session="fetch")
    )
    db.flush()
    return deleted


def list_job_skills(db: Session, job_id: int) -> list[JobSkill]:
    return db.query(JobSkill).filter(JobSkill.job_id == job_id).order_by(JobSkill.id).all()


def get_job_details(db: Session, job_id: int) -> tuple[Job, Company, Employer | None]:
    """Job joined with its company and the company's first employer."""
    row = (
        db.query(Job, Company, Employer)
        .join(Company, Job.company_id == Company.id)
        .outerjoin(Employer, Employer.company_id == Company.id)
        .filter(Job.id == job_id)
        .order_by(Employer.id)
        .first()
    )
    if row is None:
        raise NotFoundError(f"job with ID {job_id} does not exist")
    return row[0], row[1], row[2]


def _jobs_with_company_name(db: Session):
    return db.query(Job, Company.name).join(Company, Job.company_id == Company.id)


def list_jobs(db: Session, filters: JobFilter, limit: int, offset: int) -> list[tuple[Job, str]]:
    query = _jobs_with_company_name(db)
    if filters.title:
        query = query.filter(Job.title.ilike(f"%{filters.title}%"))
    if filters.location:
        query = query.filter(Job.location == filters.location)
    if filters.industry:
        query = query.filter(Job.industry == filters.industry)
    if filters.salary_min is not None:
        query = query.filter(Job.salary_min >= filters.salary_min)
    if filters.salary_max is not None:
        query = query.filter(Job.salary_max <= filters.salary_max)
    return query.order_by(Job.id).limit(limit).offset(offset).all()


def list_jobs_by_company_id(db: Session, company_id: int, limit: int, offset: int) -> list[tuple[Job, str]]:
    return (
        _jobs_with_company_name(db)
        .filter(Company.id == company_id)
        .order_by(Job.id)
        .limit(limit)
        .offset(offset)
        .all()
    )


def list_jobs_by_company_name(db: Session, name: str, limit: int, offset: int) -> list[tuple[Job, str]]:
    return (
        _jobs_with_company_name(db)
        .filter(Company.name == name)
        .order_by(Job.id)
        .limit(limit)
        .offset(offset)
        .all()
    )


def list_jobs_by_company_name_contains(
    db: Session, fragment: str, limit: int, offset: int
) -> list[tuple[Job, str]]:
    return (
        _jobs_with_company_name(db)
        .filter(Company.name.ilike(f"%{fragment}%"))
        .order_by(Job.id)
        .limit(limit)
        .offset(offset)
        .all()
    )


def list_jobs_matching_user_skills(db: Session, user_id: int, limit: int, offset: int) -> list[tuple[Job, str]]:
    """Jobs requiring at least one skill the user declared (names compared case-insensitively)."""
    user_skill_names = select(func.lower(UserSkill.name)).where(UserSkill.user_id == user_id)
    matching_job_ids = select(JobSkill.job_id).where(func.lower(JobSkill.name).in_(user_skill_names))
    return (
        _jobs_with_company_name(db)
        .filter(Job.id.in_(matching_job_ids))
        .order_by(Job.id)
        .limit(limit)
        .offset(offset)
        .all()
    )


def list_company_job_ids(db: Session, company_id: int) -> list[int]:
    return [job_id for (job_id,) in db.query(Job.id).filter(Job.company_id == company_id).order_by(Job.id)]


def list_all_job_ids(db: Session) -> list[int]:
    return [job_id for (job_id,) in db.query(Job.id).order_by(Job.id)]


def get_job_with_company_name(db: Session, job_id: int) -> tuple[Job, str] | None:
    return _jobs_with_company_name(db).filter(Job.id == job_id).first()
