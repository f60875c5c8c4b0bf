"""Tests for the /api/v1/job-applications and CV asset endpoints."""

from datetime import datetime, timedelta

import pytest

from app.models import ApplicationStatus, JobApplication

from conftest import CV_BYTES, auth_headers, create_job, create_user

APPLICATIONS_URL = "/api/v1/job-applications"


def apply(client, headers, job_id, message="I am a great fit", cv=CV_BYTES):
    return client.post(
        APPLICATIONS_URL,
        headers=headers,
        data={"job_id": str(job_id), "message": message},
        files={"cv": ("cv.pdf", cv, "application/pdf")},
    )


@pytest.fixture
def application(db, user, job):
    """An application by the default user to the Acme job, still Applied."""
    application = JobApplication(user_id=user.id, job_id=job.id, message="Hello", cv=CV_BYTES)
    db.add(application)
    db.commit()
    db.refresh(application)
    return application


class TestApply:
    """Tests for submitting applications."""

    def test_apply_success(self, client, db, user, job, user_headers, distributor):
        response = apply(client, user_headers, job.id)
        assert response.status_code == 201
        data = response.json()
        assert data["job_id"] == job.id
        assert data["status"] == "Applied"
        assert data["message"] == "I am a great fit"

        stored = db.query(JobApplication).one()
        assert stored.cv == CV_BYTES

        # Confirmation email handed to the task queue after the response
        assert distributor.confirmation_payloads == [
            {
                "email": user.email,
                "full_name": "Jane Doe",
                "position": "Python Developer",
                "company_name": "Acme",
            }
        ]

    def test_apply_twice(self, client, db, user, job, user_headers, distributor):
        assert apply(client, user_headers, job.id).status_code == 201

        response = apply(client, user_headers, job.id)
        assert response.status_code == 403
        assert response.json()["detail"] == f"user with ID {user.id} has already applied for this job"
        assert db.query(JobApplication).count() == 1
        assert len(distributor.confirmation_payloads) == 1

    def test_apply_missing_job(self, client, user_headers):
        response = apply(client, user_headers, 999)
        assert response.status_code == 404

    def test_apply_without_cv(self, client, job, user_headers):
        response = client.post(
            APPLICATIONS_URL, headers=user_headers, data={"job_id": str(job.id)}
        )
        assert response.status_code == 400

    def test_apply_with_empty_cv(self, client, job, user_headers):
        response = apply(client, user_headers, job.id, cv=b"")
        assert response.status_code == 400

    def test_employer_cannot_apply(self, client, job, employer_headers):
        response = apply(client, employer_headers, job.id)
        assert response.status_code == 401


class TestUserApplications:
    """Tests for the applicant's view of applications."""

    def test_get_own_application(self, client, application, user_headers):
        response = client.get(f"{APPLICATIONS_URL}/user/{application.id}", headers=user_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["job_title"] == "Python Developer"
        assert data["company_name"] == "Acme"
        assert data["application_status"] == "Applied"
        assert data["cv_link"] == f"http://testserver/api/v1/assets/cvs/{application.id}.pdf"

    def test_get_other_users_application(self, client, db, application):
        other = create_user(db, email="other@example.com")

        response = client.get(
            f"{APPLICATIONS_URL}/user/{application.id}", headers=auth_headers(other.email)
        )
        assert response.status_code == 403

    def test_get_missing_application(self, client, user_headers):
        response = client.get(f"{APPLICATIONS_URL}/user/999", headers=user_headers)
        assert response.status_code == 404

    def test_update_message_and_cv(self, client, db, application, user_headers):
        response = client.patch(
            f"{APPLICATIONS_URL}/user/{application.id}",
            headers=user_headers,
            data={"message": "Updated", "cv_provided": "true"},
            files={"cv": ("cv.pdf", b"%PDF-1.4 new cv", "application/pdf")},
        )
        assert response.status_code == 200
        assert response.json()["application_message"] == "Updated"

        db.refresh(application)
        assert application.cv == b"%PDF-1.4 new cv"

    def test_update_message_keeps_cv(self, client, db, application, user_headers):
        response = client.patch(
            f"{APPLICATIONS_URL}/user/{application.id}",
            headers=user_headers,
            data={"message": "Only the message"},
        )
        assert response.status_code == 200

        db.refresh(application)
        assert application.cv == CV_BYTES

    def test_update_cv_provided_without_file(self, client, application, user_headers):
        response = client.patch(
            f"{APPLICATIONS_URL}/user/{application.id}",
            headers=user_headers,
            data={"cv_provided": "true"},
        )
        assert response.status_code == 400

    def test_update_after_employer_opened_it(
        self, client, application, user_headers, employer_headers
    ):
        client.get(f"{APPLICATIONS_URL}/employer/{application.id}", headers=employer_headers)

        response = client.patch(
            f"{APPLICATIONS_URL}/user/{application.id}",
            headers=user_headers,
            data={"message": "Too late"},
        )
        assert response.status_code == 403
        assert "cannot be updated anymore" in response.json()["detail"]

    def test_update_by_other_user(self, client, db, application):
        other = create_user(db, email="other@example.com")

        response = client.patch(
            f"{APPLICATIONS_URL}/user/{application.id}",
            headers=auth_headers(other.email),
            data={"message": "Mine now"},
        )
        assert response.status_code == 403

    def test_delete_application(self, client, db, application, user_headers):
        application_id = application.id

        response = client.delete(f"{APPLICATIONS_URL}/user/{application_id}", headers=user_headers)
        assert response.status_code == 204
        assert db.query(JobApplication).filter(JobApplication.id == application_id).count() == 0

    def test_delete_by_other_user(self, client, db, application):
        other = create_user(db, email="other@example.com")

        response = client.delete(
            f"{APPLICATIONS_URL}/user/{application.id}", headers=auth_headers(other.email)
        )
        assert response.status_code == 403
        assert db.query(JobApplication).count() == 1


class TestListUserApplications:
    """Tests for listing the applicant's applications."""

    @pytest.fixture
    def applications(self, db, user, employer):
        now = datetime.utcnow()
        rows = []
        for i, status in enumerate(
            [ApplicationStatus.APPLIED, ApplicationStatus.REJECTED, ApplicationStatus.APPLIED]
        ):
            job = create_job(db, employer.company_id, title=f"Job {i}")
            rows.append(
                JobApplication(
                    user_id=user.id,
                    job_id=job.id,
                    cv=CV_BYTES,
                    status=status,
                    applied_at=now - timedelta(days=3 - i),
                )
            )
        db.add_all(rows)
        db.commit()

    def test_list_all(self, client, applications, user_headers):
        response = client.get(
            f"{APPLICATIONS_URL}/user", params={"page": 1, "page_size": 5}, headers=user_headers
        )
        assert response.status_code == 200
        assert [a["job_title"] for a in response.json()] == ["Job 0", "Job 1", "Job 2"]

    def test_filter_by_status(self, client, applications, user_headers):
        response = client.get(
            f"{APPLICATIONS_URL}/user",
            params={"page": 1, "page_size": 5, "status": "Applied"},
            headers=user_headers,
        )
        assert [a["job_title"] for a in response.json()] == ["Job 0", "Job 2"]

    def test_sort_newest_first(self, client, applications, user_headers):
        response = client.get(
            f"{APPLICATIONS_URL}/user",
            params={"page": 1, "page_size": 5, "sort": "date-desc"},
            headers=user_headers,
        )
        assert [a["job_title"] for a in response.json()] == ["Job 2", "Job 1", "Job 0"]

    def test_unknown_status(self, client, applications, user_headers):
        response = client.get(
            f"{APPLICATIONS_URL}/user",
            params={"page": 1, "page_size": 5, "status": "Hired"},
            headers=user_headers,
        )
        assert response.status_code == 400


class TestEmployerApplications:
    """Tests for the employer's view and status changes."""

    def test_opening_marks_seen(self, client, db, application, user, employer_headers):
        response = client.get(
            f"{APPLICATIONS_URL}/employer/{application.id}", headers=employer_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["application_status"] == "Seen"
        assert data["user_email"] == user.email
        assert data["user_full_name"] == "Jane Doe"

        db.refresh(application)
        assert application.status == ApplicationStatus.SEEN

    def test_opening_keeps_later_status(self, client, db, application, employer_headers):
        application.status = ApplicationStatus.INTERVIEWING
        db.commit()

        response = client.get(
            f"{APPLICATIONS_URL}/employer/{application.id}", headers=employer_headers
        )
        assert response.json()["application_status"] == "Interviewing"

    def test_other_company_cannot_open(self, client, db, application, other_employer_headers):
        response = client.get(
            f"{APPLICATIONS_URL}/employer/{application.id}", headers=other_employer_headers
        )
        assert response.status_code == 403
        assert "is not part of the company that created this job" in response.json()["detail"]

        db.refresh(application)
        assert application.status == ApplicationStatus.APPLIED

    def test_change_status(self, client, db, application, employer_headers):
        response = client.patch(
            f"{APPLICATIONS_URL}/employer/{application.id}/status",
            headers=employer_headers,
            json={"new_status": "Interviewing"},
        )
        assert response.status_code == 200
        assert response.json() == {
            "application_id": application.id,
            "status": "Interviewing",
            "message": "Status updated successfully",
        }

    @pytest.mark.parametrize("new_status", ["Applied", "Seen", "Hired"])
    def test_change_status_rejects_other_values(self, client, application, employer_headers, new_status):
        response = client.patch(
            f"{APPLICATIONS_URL}/employer/{application.id}/status",
            headers=employer_headers,
            json={"new_status": new_status},
        )
        assert response.status_code == 400

    def test_change_status_other_company(self, client, application, other_employer_headers):
        response = client.patch(
            f"{APPLICATIONS_URL}/employer/{application.id}/status",
            headers=other_employer_headers,
            json={"new_status": "Rejected"},
        )
        assert response.status_code == 403

    def test_list_for_job(self, client, db, job, application, employer_headers):
        second = create_user(db, email="second@example.com")
        db.add(JobApplication(user_id=second.id, job_id=job.id, cv=CV_BYTES,
                              status=ApplicationStatus.REJECTED))
        db.commit()

        response = client.get(
            f"{APPLICATIONS_URL}/employer",
            params={"job_id": job.id, "page": 1, "page_size": 5, "status": "Rejected"},
            headers=employer_headers,
        )
        assert response.status_code == 200
        assert [a["user_email"] for a in response.json()] == ["second@example.com"]

    def test_list_for_job_of_other_company(self, client, job, application, other_employer_headers):
        response = client.get(
            f"{APPLICATIONS_URL}/employer",
            params={"job_id": job.id, "page": 1, "page_size": 5},
            headers=other_employer_headers,
        )
        assert response.status_code == 403


class TestCvAsset:
    """Tests for downloading a CV through its link."""

    def test_applicant_downloads_cv(self, client, application, user_headers):
        response = client.get(f"/api/v1/assets/cvs/{application.id}.pdf", headers=user_headers)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content == CV_BYTES

    def test_employer_downloads_cv(self, client, application, employer_headers):
        response = client.get(f"/api/v1/assets/cvs/{application.id}.pdf", headers=employer_headers)
        assert response.status_code == 200
        assert response.content == CV_BYTES

    def test_other_employer_forbidden(self, client, application, other_employer_headers):
        response = client.get(
            f"/api/v1/assets/cvs/{application.id}.pdf", headers=other_employer_headers
        )
        assert response.status_code == 403

    def test_other_user_forbidden(self, client, db, application):
        other = create_user(db, email="other@example.com")

        response = client.get(
            f"/api/v1/assets/cvs/{application.id}.pdf", headers=auth_headers(other.email)
        )
        assert response.status_code == 403

    def test_anonymous_rejected(self, client, application):
        response = client.get(f"/api/v1/assets/cvs/{application.id}.pdf")
        assert response.status_code == 401
