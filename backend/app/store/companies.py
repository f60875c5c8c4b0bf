from sqlalchemy.orm import Session

from app.errors import NotFoundError
from app.models import Company, Employer
from app.store.common import flush_or_conflict

COMPANY_EXISTS = "company with this name already exists"


def get_company(db: Session, company_id: int) -> Company:
    company = db.query(Company).filter(Company.id == company_id).first()
    if company is None:
        raise NotFoundError("company with this id does not exist")
    return company


def create_company(db: Session, name: str, industry: str, location: str) -> Company:
    company = Company(name=name, industry=industry, location=location)
    db.add(company)
    flush_or_conflict(db, COMPANY_EXISTS)
    return company


def update_company(db: Session, company: Company, values: dict) -> Company:
    for key, value in values.items():
        if value is not None:
            setattr(company, key, value)
    flush_or_conflict(db, COMPANY_EXISTS)
    return company


def delete_company(db: Session, company: Company) -> None:
    db.delete(company)
    db.flush()


def count_company_employers(db: Session, company_id: int) -> int:
    return db.query(Employer).filter(Employer.company_id == company_id).count()
