"""Signup, login, verification and profile workflows for users and employers."""

import logging

from sqlalchemy.orm import Session

from app.database import exec_tx
from app.errors import ForbiddenError, InvalidRequestError, NotFoundError, UnauthenticatedError
from app.models import Employer, User
from app.schemas import (
    EmployerCreate,
    EmployerUpdate,
    LoginRequest,
    PasswordUpdate,
    UserCreate,
    UserUpdate,
)
from app.services.auth import TokenPayload, create_access_token, hash_password, verify_password
from app.services.outbox import record_job_delete, record_job_upsert, record_verification_email
from app.store import companies as company_store
from app.store import employers as employer_store
from app.store import jobs as job_store
from app.store import users as user_store
from app.store import verify_emails as verify_email_store

logger = logging.getLogger(__name__)

USER_EXISTS = "user with this email already exists"
EMPLOYER_EXISTS = "employer with this email already exists"
NOT_VERIFIED = "email not verified. Please verify your email before logging in"
INCORRECT_PASSWORD = "incorrect password"
INVALID_VERIFICATION = "invalid or expired verification code"


def find_account(db: Session, email: str) -> User | Employer | None:
    """Look an address up among users first, then employers."""
    return user_store.find_user_by_email(db, email) or employer_store.find_employer_by_email(db, email)


def _check_login(account: User | Employer, password: str) -> tuple[str, TokenPayload]:
    if not account.is_email_verified:
        raise ForbiddenError(NOT_VERIFIED)
    if not verify_password(password, account.hashed_password):
        raise UnauthenticatedError(INCORRECT_PASSWORD)
    return create_access_token(account.email)


def _check_password_change(account: User | Employer, data: PasswordUpdate) -> str:
    if not verify_password(data.old_password, account.hashed_password):
        raise UnauthenticatedError(INCORRECT_PASSWORD)
    return hash_password(data.new_password)


# Users


def create_user(db: Session, data: UserCreate) -> User:
    """Create a user, its skills and the verification email event atomically."""
    if employer_store.find_employer_by_email(db, data.email):
        raise ForbiddenError(USER_EXISTS)

    hashed_password = hash_password(data.password)
    with exec_tx(db):
        user = user_store.create_user(
            db,
            full_name=data.full_name,
            email=data.email,
            hashed_password=hashed_password,
            location=data.location,
            desired_job_title=data.desired_job_title,
            desired_industry=data.desired_industry,
            desired_salary_min=data.desired_salary_min,
            desired_salary_max=data.desired_salary_max,
            skills_description=data.skills_description,
            experience=data.experience,
        )
        if data.skills:
            user_store.add_user_skills(
                db, user.id, [(s.skill, s.years_of_experience) for s in data.skills]
            )
        record_verification_email(db, user.email)

    db.refresh(user)
    logger.info("Created user %s", user.id)
    return user


def login_user(db: Session, data: LoginRequest) -> tuple[str, TokenPayload, User]:
    user = user_store.get_user_by_email(db, data.email)
    token, payload = _check_login(user, data.password)
    return token, payload, user


def update_user(db: Session, user: User, data: UserUpdate) -> User:
    values = data.model_dump(exclude={"skills_to_add", "skill_ids_to_remove"}, exclude_none=True)

    salary_min = values.get("desired_salary_min", user.desired_salary_min)
    salary_max = values.get("desired_salary_max", user.desired_salary_max)
    if salary_min > salary_max:
        raise InvalidRequestError("desired salary min is greater than desired salary max")

    new_email = values.get("email")
    if new_email and new_email != user.email and employer_store.find_employer_by_email(db, new_email):
        raise ForbiddenError(USER_EXISTS)

    with exec_tx(db):
        user_store.update_user(db, user, values)
        user_store.delete_user_skills(db, user.id, data.skill_ids_to_remove)
        if data.skills_to_add:
            user_store.add_user_skills(
                db, user.id, [(s.skill, s.years_of_experience) for s in data.skills_to_add]
            )

    db.refresh(user)
    return user


def update_user_password(db: Session, user: User, data: PasswordUpdate) -> None:
    hashed_password = _check_password_change(user, data)
    with exec_tx(db):
        user_store.update_user(db, user, {"hashed_password": hashed_password})


def delete_user(db: Session, user: User) -> None:
    user_id = user.id
    with exec_tx(db):
        user_store.delete_user(db, user)
    logger.info("Deleted user %s", user_id)


def get_user_details(db: Session, email: str) -> User:
    user = user_store.find_user_by_email(db, email.lower())
    if user is None:
        raise NotFoundError(f"user with email {email} does not exist")
    return user


# Employers


def create_employer(db: Session, data: EmployerCreate) -> Employer:
    """Create the company, the employer and the verification email event atomically."""
    if user_store.find_user_by_email(db, data.email):
        raise ForbiddenError(EMPLOYER_EXISTS)

    hashed_password = hash_password(data.password)
    with exec_tx(db):
        company = company_store.create_company(
            db,
            name=data.company_name,
            industry=data.company_industry,
            location=data.company_location,
        )
        employer = employer_store.create_employer(
            db,
            company_id=company.id,
            full_name=data.full_name,
            email=data.email,
            hashed_password=hashed_password,
        )
        record_verification_email(db, employer.email)

    db.refresh(employer)
    logger.info("Created employer %s for company %s", employer.id, employer.company_id)
    return employer


def login_employer(db: Session, data: LoginRequest) -> tuple[str, TokenPayload, Employer]:
    employer = employer_store.get_employer_by_email(db, data.email)
    token, payload = _check_login(employer, data.password)
    return token, payload, employer


def update_employer(db: Session, employer: Employer, data: EmployerUpdate) -> Employer:
    employer_values = data.model_dump(include={"full_name", "email"}, exclude_none=True)
    company_values = {
        key: value
        for key, value in (
            ("name", data.company_name),
            ("industry", data.company_industry),
            ("location", data.company_location),
        )
        if value is not None
    }

    new_email = employer_values.get("email")
    if new_email and new_email != employer.email and user_store.find_user_by_email(db, new_email):
        raise ForbiddenError(EMPLOYER_EXISTS)

    company = employer.company
    renamed = "name" in company_values and company_values["name"] != company.name

    with exec_tx(db):
        employer_store.update_employer(db, employer, employer_values)
        if company_values:
            company_store.update_company(db, company, company_values)
        if renamed:
            # Search documents carry the company name.
            for job_id in job_store.list_company_job_ids(db, company.id):
                record_job_upsert(db, job_id)

    db.refresh(employer)
    return employer


def update_employer_password(db: Session, employer: Employer, data: PasswordUpdate) -> None:
    hashed_password = _check_password_change(employer, data)
    with exec_tx(db):
        employer_store.update_employer(db, employer, {"hashed_password": hashed_password})


def delete_employer(db: Session, employer: Employer) -> None:
    """Delete an employer, and its company too when no other employer remains."""
    employer_id = employer.id
    company_id = employer.company_id
    with exec_tx(db):
        if company_store.count_company_employers(db, company_id) <= 1:
            for job_id in job_store.list_company_job_ids(db, company_id):
                record_job_delete(db, job_id)
            company_store.delete_company(db, company_store.get_company(db, company_id))
        else:
            employer_store.delete_employer(db, employer)
    logger.info("Deleted employer %s", employer_id)


def get_employer_company_details(db: Session, email: str) -> Employer:
    return employer_store.get_employer_by_email(db, email.lower())


# Verification


def verify_email(db: Session, verify_email_id: int, secret_code: str) -> User | Employer:
    """Consume a verification row and mark its account verified in one transaction."""
    with exec_tx(db):
        row = verify_email_store.consume_verify_email(db, verify_email_id, secret_code)
        if row is None:
            raise InvalidRequestError(INVALID_VERIFICATION)
        account = find_account(db, row.email)
        if account is None:
            raise InvalidRequestError(INVALID_VERIFICATION)
        account.is_email_verified = True
        db.flush()
    return account


def resend_verification_email(db: Session, email: str) -> None:
    """Record a new verification email event for an unverified account.

    Unknown or already verified addresses are ignored so the caller learns
    nothing about which addresses are registered.
    """
    account = find_account(db, email.lower())
    if account is None or account.is_email_verified:
        return
    with exec_tx(db):
        record_verification_email(db, account.email)
