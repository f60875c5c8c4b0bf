from datetime import datetime

from pydantic import BaseModel, field_validator

from app.models.job_application import ApplicationStatus, EMPLOYER_SETTABLE_STATUSES


class JobApplicationResponse(BaseModel):
    id: int
    job_id: int
    message: str | None = None
    status: ApplicationStatus
    applied_at: datetime

    class Config:
        from_attributes = True


class UserJobApplicationResponse(BaseModel):
    application_id: int
    job_id: int
    job_title: str
    company_name: str
    application_status: ApplicationStatus
    application_date: datetime
    application_message: str | None = None
    cv_link: str
    user_id: int


class EmployerJobApplicationResponse(BaseModel):
    application_id: int
    job_title: str
    job_id: int
    application_status: ApplicationStatus
    application_date: datetime
    application_message: str | None = None
    user_id: int
    user_email: str
    user_full_name: str
    user_location: str
    cv_link: str


class ChangeStatusRequest(BaseModel):
    new_status: ApplicationStatus

    @field_validator("new_status")
    @classmethod
    def validate_new_status(cls, v: ApplicationStatus) -> ApplicationStatus:
        if v not in EMPLOYER_SETTABLE_STATUSES:
            allowed = ", ".join(s.value for s in EMPLOYER_SETTABLE_STATUSES)
            raise ValueError(f"new_status must be one of: {allowed}")
        return v


class ChangeStatusResponse(BaseModel):
    application_id: int
    status: ApplicationStatus
    message: str
