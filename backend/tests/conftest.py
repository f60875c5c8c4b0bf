"""Pytest configuration and fixtures for Go Job Search tests."""

import os
from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["DB_SOURCE"] = "sqlite:///:memory:"
os.environ["TOKEN_SYMMETRIC_KEY"] = "test-signing-key-0123456789abcde"
os.environ["SEARCH_BULK_LOAD_ON_STARTUP"] = "false"
os.environ["ENABLE_SCHEDULER"] = "false"
os.environ["APP_URL"] = "http://testserver"

from app.database import Base, get_db
from app.dependencies import get_outbox_dispatcher, get_search_index
from app.main import app
from app.models import Company, Employer, Job, JobSkill, User, UserSkill
from app.services.auth import create_access_token, hash_password
from app.services.outbox import OutboxDispatcher


# Use in-memory SQLite for tests
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Enable foreign key support for SQLite (required for ON DELETE CASCADE)
@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "secret123"
CV_BYTES = b"%PDF-1.4 test cv"


class FakeSearchIndex:
    """In-memory stand-in for the Elasticsearch index.

    A document matches when any query word occurs in one of the searched fields.
    """

    def __init__(self):
        self.documents = {}

    def ping(self):
        return True

    def ensure_index(self):
        pass

    def bulk_load(self, documents):
        for document in documents:
            self.documents[document["id"]] = document
        return len(documents)

    def upsert(self, job_id, document):
        self.documents[job_id] = document

    def delete(self, job_id):
        self.documents.pop(job_id, None)

    def search(self, query, page, page_size):
        words = [w.lower() for w in query.split()]
        hits = []
        for job_id in sorted(self.documents):
            document = self.documents[job_id]
            text = " ".join(
                [
                    document["title"],
                    document["description"],
                    document["requirements"],
                    document["location"],
                    " ".join(document["job_skills"]),
                ]
            ).lower()
            if any(word in text for word in words):
                hits.append(document)
        start = (page - 1) * page_size
        return hits[start:start + page_size]


class RecordingDistributor:
    """Collects the task payloads the outbox hands to the task queue."""

    def __init__(self):
        self.verification_payloads = []
        self.confirmation_payloads = []

    def distribute_send_verification_email(self, payload):
        self.verification_payloads.append(payload)
        return f"verify-{len(self.verification_payloads)}"

    def distribute_send_confirmation_email(self, payload):
        self.confirmation_payloads.append(payload)
        return f"confirm-{len(self.confirmation_payloads)}"


class RecordingMailer:
    def __init__(self):
        self.sent = []

    def send(self, message):
        self.sent.append(message)


@pytest.fixture
def db():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db):
    """Session factory that hands out the test session without closing it."""
    @contextmanager
    def scope():
        yield db

    return scope


@pytest.fixture
def search_index():
    return FakeSearchIndex()


@pytest.fixture
def distributor():
    return RecordingDistributor()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def dispatcher(session_factory, search_index, distributor):
    return OutboxDispatcher(session_factory, search_index, distributor, batch_size=100)


@pytest.fixture
def client(db, search_index, dispatcher):
    """Create a test client with database, search and outbox overrides."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_search_index] = lambda: search_index
    app.dependency_overrides[get_outbox_dispatcher] = lambda: dispatcher
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(email):
    token, _ = create_access_token(email)
    return {"Authorization": f"Bearer {token}"}


def create_user(db, email="jane@example.com", verified=True, skills=(), **fields):
    values = {
        "full_name": "Jane Doe",
        "location": "Berlin",
        "desired_job_title": "Backend Developer",
        "desired_industry": "Software",
        "desired_salary_min": 50000,
        "desired_salary_max": 80000,
        "skills_description": "Python and SQL",
        "experience": "5 years",
    }
    values.update(fields)
    user = User(
        email=email,
        hashed_password=hash_password(PASSWORD),
        is_email_verified=verified,
        **values,
    )
    db.add(user)
    db.flush()
    for name, years in skills:
        db.add(UserSkill(user_id=user.id, name=name, experience_years=years))
    db.commit()
    db.refresh(user)
    return user


def create_employer(db, email="boss@acme.com", company_name="Acme", verified=True, company=None):
    if company is None:
        company = Company(name=company_name, industry="Software", location="Berlin")
        db.add(company)
        db.flush()
    employer = Employer(
        company_id=company.id,
        full_name="Bob Boss",
        email=email,
        hashed_password=hash_password(PASSWORD),
        is_email_verified=verified,
    )
    db.add(employer)
    db.commit()
    db.refresh(employer)
    return employer


def create_job(db, company_id, title="Python Developer", skills=(), **fields):
    values = {
        "industry": "Software",
        "description": "Build APIs",
        "location": "Berlin",
        "salary_min": 60000,
        "salary_max": 90000,
        "requirements": "3 years of experience",
    }
    values.update(fields)
    job = Job(company_id=company_id, title=title, **values)
    db.add(job)
    db.flush()
    for name in skills:
        db.add(JobSkill(job_id=job.id, name=name))
    db.commit()
    db.refresh(job)
    return job


@pytest.fixture
def user(db):
    """A verified job seeker with two skills."""
    return create_user(db, skills=[("Python", 5), ("SQL", 3)])


@pytest.fixture
def employer(db):
    """A verified employer of the Acme company."""
    return create_employer(db)


@pytest.fixture
def other_employer(db):
    """A verified employer of a different company."""
    return create_employer(db, email="rival@globex.com", company_name="Globex")


@pytest.fixture
def job(db, employer):
    """A job posted by Acme requiring Python and Docker."""
    return create_job(db, employer.company_id, skills=["Python", "Docker"])


@pytest.fixture
def user_headers(user):
    return auth_headers(user.email)


@pytest.fixture
def employer_headers(employer):
    return auth_headers(employer.email)


@pytest.fixture
def other_employer_headers(other_employer):
    return auth_headers(other_employer.email)
