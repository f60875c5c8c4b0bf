from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from app.schemas.common import PatchModel, validate_password_length


class UserSkillCreate(BaseModel):
    skill: str = Field(min_length=1, max_length=255)
    years_of_experience: int = Field(ge=0)


class UserSkillResponse(BaseModel):
    id: int
    skill: str
    years_of_experience: int


class UserCreate(BaseModel):
    full_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str
    location: str = Field(min_length=1, max_length=255)
    desired_job_title: str = Field(min_length=1, max_length=255)
    desired_industry: str = Field(min_length=1, max_length=255)
    desired_salary_min: int = Field(ge=0)
    desired_salary_max: int = Field(ge=0)
    skills_description: str = ""
    experience: str = ""
    skills: list[UserSkillCreate] = []

    @field_validator("email")
    @classmethod
    def fold_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_length(v)

    @model_validator(mode="after")
    def validate_salary_range(self) -> "UserCreate":
        if self.desired_salary_min > self.desired_salary_max:
            raise ValueError("desired salary min is greater than desired salary max")
        return self


class UserUpdate(PatchModel):
    full_name: str | None = None
    email: EmailStr | None = None
    location: str | None = None
    desired_job_title: str | None = None
    desired_industry: str | None = None
    desired_salary_min: int | None = Field(default=None, ge=0)
    desired_salary_max: int | None = Field(default=None, ge=0)
    skills_description: str | None = None
    experience: str | None = None
    skills_to_add: list[UserSkillCreate] = []
    skill_ids_to_remove: list[int] = []

    @field_validator("email")
    @classmethod
    def fold_email(cls, v: str | None) -> str | None:
        return v.lower() if v else v


class UserResponse(BaseModel):
    id: int
    email: str
    full_name: str
    location: str
    desired_job_title: str
    desired_industry: str
    desired_salary_min: int
    desired_salary_max: int
    skills_description: str | None = None
    experience: str | None = None
    skills: list[UserSkillResponse] = []
    created_at: datetime | None = None

    @classmethod
    def from_user(cls, user, skills=None) -> "UserResponse":
        skills = user.skills if skills is None else skills
        return cls(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            location=user.location,
            desired_job_title=user.desired_job_title,
            desired_industry=user.desired_industry,
            desired_salary_min=user.desired_salary_min,
            desired_salary_max=user.desired_salary_max,
            skills_description=user.skills_description,
            experience=user.experience,
            skills=[
                UserSkillResponse(id=s.id, skill=s.name, years_of_experience=s.experience_years)
                for s in skills
            ],
            created_at=user.created_at,
        )


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def fold_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_length(v)


class PasswordUpdate(BaseModel):
    old_password: str
    new_password: str

    @field_validator("old_password", "new_password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_length(v)


class LoginUserResponse(BaseModel):
    access_token: str
    access_token_expires_at: datetime
    user: UserResponse
