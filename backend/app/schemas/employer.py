from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.common import PatchModel, validate_password_length


class EmployerCreate(BaseModel):
    full_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str
    company_name: str = Field(min_length=1, max_length=255)
    company_industry: str = Field(min_length=1, max_length=255)
    company_location: str = Field(min_length=1, max_length=255)

    @field_validator("email")
    @classmethod
    def fold_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_length(v)


class EmployerUpdate(PatchModel):
    full_name: str | None = None
    email: EmailStr | None = None
    company_name: str | None = None
    company_industry: str | None = None
    company_location: str | None = None

    @field_validator("email")
    @classmethod
    def fold_email(cls, v: str | None) -> str | None:
        return v.lower() if v else v


class EmployerResponse(BaseModel):
    employer_id: int
    full_name: str
    email: str
    employer_created_at: datetime | None = None
    company_id: int
    company_name: str
    company_industry: str
    company_location: str

    @classmethod
    def from_employer(cls, employer) -> "EmployerResponse":
        company = employer.company
        return cls(
            employer_id=employer.id,
            full_name=employer.full_name,
            email=employer.email,
            employer_created_at=employer.created_at,
            company_id=company.id,
            company_name=company.name,
            company_industry=company.industry,
            company_location=company.location,
        )


class LoginEmployerResponse(BaseModel):
    access_token: str
    access_token_expires_at: datetime
    employer: EmployerResponse
