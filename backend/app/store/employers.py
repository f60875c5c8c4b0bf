from sqlalchemy.orm import Session, joinedload

from app.errors import NotFoundError
from app.models import Employer
from app.store.common import flush_or_conflict

EMPLOYER_EXISTS = "employer with this email already exists"


def find_employer_by_email(db: Session, email: str) -> Employer | None:
    return (
        db.query(Employer)
        .options(joinedload(Employer.company))
        .filter(Employer.email == email)
        .first()
    )


def get_employer_by_email(db: Session, email: str) -> Employer:
    employer = find_employer_by_email(db, email)
    if employer is None:
        raise NotFoundError("employer with this email does not exist")
    return employer


def create_employer(db: Session, **fields) -> Employer:
    employer = Employer(**fields)
    db.add(employer)
    flush_or_conflict(db, EMPLOYER_EXISTS)
    return employer


def update_employer(db: Session, employer: Employer, values: dict) -> Employer:
    for key, value in values.items():
        if value is not None:
            setattr(employer, key, value)
    flush_or_conflict(db, EMPLOYER_EXISTS)
    return employer


def delete_employer(db: Session, employer: Employer) -> None:
    db.delete(employer)
    db.flush()
