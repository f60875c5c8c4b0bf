"""Tests for the /api/v1/employers endpoints."""

from app.config import get_settings
from app.models import Company, Employer, Job, OutboxEvent
from worker.processor import process_send_verification_email

from conftest import PASSWORD, auth_headers, create_employer, create_job, create_user

EMPLOYERS_URL = "/api/v1/employers"


def employer_payload(**overrides):
    payload = {
        "full_name": "Bob Boss",
        "email": "boss@acme.com",
        "password": PASSWORD,
        "company_name": "Acme",
        "company_industry": "Software",
        "company_location": "Berlin",
    }
    payload.update(overrides)
    return payload


class TestCreateEmployer:
    """Tests for employer registration."""

    def test_create_employer_success(self, client, db, distributor):
        response = client.post(EMPLOYERS_URL, json=employer_payload())
        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "boss@acme.com"
        assert data["company_name"] == "Acme"
        assert data["company_location"] == "Berlin"

        company = db.query(Company).filter(Company.name == "Acme").one()
        assert company.id == data["company_id"]
        assert distributor.verification_payloads == [{"email": "boss@acme.com"}]

    def test_create_employer_company_name_taken(self, client, db):
        create_employer(db, email="first@acme.com", company_name="Acme")

        response = client.post(EMPLOYERS_URL, json=employer_payload())
        assert response.status_code == 403
        assert response.json()["detail"] == "company with this name already exists"
        assert db.query(Employer).count() == 1

    def test_create_employer_email_taken(self, client, db):
        create_employer(db, email="boss@acme.com", company_name="Other")

        response = client.post(EMPLOYERS_URL, json=employer_payload())
        assert response.status_code == 403
        # The company insert was rolled back with the employer
        assert db.query(Company).filter(Company.name == "Acme").count() == 0

    def test_create_employer_email_taken_by_user(self, client, db):
        create_user(db, email="boss@acme.com")

        response = client.post(EMPLOYERS_URL, json=employer_payload())
        assert response.status_code == 403
        assert response.json()["detail"] == "employer with this email already exists"

    def test_create_employer_missing_company(self, client):
        response = client.post(EMPLOYERS_URL, json=employer_payload(company_name=""))
        assert response.status_code == 400


class TestLoginEmployer:
    """Tests for employer login and verification."""

    def test_login_success(self, client, employer):
        response = client.post(
            f"{EMPLOYERS_URL}/login", json={"email": employer.email, "password": PASSWORD}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["access_token"]
        assert data["employer"]["company_name"] == "Acme"

    def test_login_unverified(self, client, db):
        create_employer(db, email="new@acme.com", verified=False)

        response = client.post(
            f"{EMPLOYERS_URL}/login", json={"email": "new@acme.com", "password": PASSWORD}
        )
        assert response.status_code == 403

    def test_login_unknown(self, client, db):
        response = client.post(
            f"{EMPLOYERS_URL}/login", json={"email": "ghost@acme.com", "password": PASSWORD}
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "employer with this email does not exist"

    def test_verify_employer_email(self, client, db, distributor, mailer):
        client.post(EMPLOYERS_URL, json=employer_payload())
        verify_email = process_send_verification_email(
            db, mailer, distributor.verification_payloads[0], get_settings()
        )
        assert "/api/v1/employers/verify-email" in mailer.sent[0].text_body

        response = client.get(
            f"{EMPLOYERS_URL}/verify-email",
            params={"id": verify_email.id, "code": verify_email.secret_code},
        )
        assert response.status_code == 200

        employer = db.query(Employer).filter(Employer.email == "boss@acme.com").one()
        assert employer.is_email_verified is True


class TestEmployerProfile:
    """Tests for reading, updating and deleting the caller's employer account."""

    def test_get_employer(self, client, employer, employer_headers):
        response = client.get(EMPLOYERS_URL, headers=employer_headers)
        assert response.status_code == 200
        assert response.json()["employer_id"] == employer.id

    def test_get_employer_rejects_user_token(self, client, user_headers):
        response = client.get(EMPLOYERS_URL, headers=user_headers)
        assert response.status_code == 401
        assert response.json()["detail"] == "only employers can access this endpoint"

    def test_update_employer_and_company(self, client, employer, employer_headers):
        response = client.patch(
            EMPLOYERS_URL,
            headers=employer_headers,
            json={"full_name": "Robert Boss", "company_location": "Hamburg", "company_name": ""},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["full_name"] == "Robert Boss"
        assert data["company_location"] == "Hamburg"
        assert data["company_name"] == "Acme"

    def test_company_rename_reindexes_jobs(self, client, db, employer, employer_headers, search_index):
        job = create_job(db, employer.company_id)

        response = client.patch(
            EMPLOYERS_URL, headers=employer_headers, json={"company_name": "Acme Labs"}
        )
        assert response.status_code == 200
        assert search_index.documents[job.id]["company_name"] == "Acme Labs"

    def test_rename_to_taken_company_name(self, client, employer, other_employer, employer_headers):
        response = client.patch(
            EMPLOYERS_URL, headers=employer_headers, json={"company_name": "Globex"}
        )
        assert response.status_code == 403

    def test_update_password(self, client, employer, employer_headers):
        response = client.patch(
            f"{EMPLOYERS_URL}/password",
            headers=employer_headers,
            json={"old_password": PASSWORD, "new_password": "newsecret456"},
        )
        assert response.status_code == 200

        login = client.post(
            f"{EMPLOYERS_URL}/login", json={"email": employer.email, "password": "newsecret456"}
        )
        assert login.status_code == 200

    def test_delete_last_employer_removes_company(
        self, client, db, employer, employer_headers, search_index
    ):
        job_id = create_job(db, employer.company_id).id
        search_index.upsert(job_id, {"id": job_id})

        response = client.delete(EMPLOYERS_URL, headers=employer_headers)
        assert response.status_code == 204
        assert db.query(Company).count() == 0
        assert db.query(Employer).count() == 0
        assert db.query(Job).count() == 0
        assert job_id not in search_index.documents

    def test_delete_employer_keeps_shared_company(self, client, db, employer):
        company = db.query(Company).filter(Company.id == employer.company_id).one()
        colleague = create_employer(db, email="colleague@acme.com", company=company)
        create_job(db, company.id)

        response = client.delete(EMPLOYERS_URL, headers=auth_headers(colleague.email))
        assert response.status_code == 204
        assert db.query(Company).count() == 1
        assert db.query(Employer).count() == 1
        assert db.query(Job).count() == 1
        assert db.query(OutboxEvent).count() == 0

    def test_company_details_route(self, client, employer):
        response = client.get(f"{EMPLOYERS_URL}/employer-company-details/{employer.email}")
        assert response.status_code == 200
        assert response.json()["company_industry"] == "Software"


class TestUserDetails:
    """Tests for an employer reading an applicant profile."""

    def test_employer_reads_user(self, client, user, employer_headers):
        response = client.get(f"{EMPLOYERS_URL}/user-details/{user.email}", headers=employer_headers)
        assert response.status_code == 200
        assert response.json()["desired_job_title"] == "Backend Developer"

    def test_user_cannot_read_user_details(self, client, user, user_headers):
        response = client.get(f"{EMPLOYERS_URL}/user-details/{user.email}", headers=user_headers)
        assert response.status_code == 401

    def test_unknown_user(self, client, employer_headers):
        response = client.get(
            f"{EMPLOYERS_URL}/user-details/ghost@example.com", headers=employer_headers
        )
        assert response.status_code == 404
