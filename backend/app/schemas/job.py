from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from app.schemas.common import PatchModel


class JobCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    description: str = Field(min_length=1)
    industry: str = Field(min_length=1, max_length=255)
    location: str = Field(min_length=1, max_length=255)
    salary_min: int = Field(ge=0)
    salary_max: int = Field(ge=0)
    requirements: str = Field(min_length=1)
    required_skills: list[str] = []

    @model_validator(mode="after")
    def validate_salary_range(self) -> "JobCreate":
        if self.salary_min > self.salary_max:
            raise ValueError("salary min cannot be greater than salary max")
        return self


class JobUpdate(PatchModel):
    title: str | None = None
    description: str | None = None
    industry: str | None = None
    location: str | None = None
    salary_min: int | None = Field(default=None, ge=0)
    salary_max: int | None = Field(default=None, ge=0)
    requirements: str | None = None
    required_skills_to_add: list[str] = []
    required_skill_ids_to_remove: list[int] = []


class JobSkillResponse(BaseModel):
    id: int
    skill: str


class JobBase(BaseModel):
    id: int
    title: str
    industry: str
    company_id: int
    description: str
    location: str
    salary_min: int
    salary_max: int
    requirements: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class JobResponse(JobBase):
    required_skills: list[JobSkillResponse] = []

    @classmethod
    def from_job(cls, job, skills) -> "JobResponse":
        response = cls.model_validate(job)
        response.required_skills = [JobSkillResponse(id=s.id, skill=s.name) for s in skills]
        return response


class JobListItem(JobBase):
    company_name: str

    @classmethod
    def from_row(cls, job, company_name: str) -> "JobListItem":
        return cls(**JobBase.model_validate(job).model_dump(), company_name=company_name)


class JobDetailsResponse(JobBase):
    company_name: str
    company_location: str
    company_industry: str
    employer_id: int | None = None
    employer_email: str | None = None
    employer_full_name: str | None = None
    required_skills: list[JobSkillResponse] = []


class SearchJobResult(BaseModel):
    id: int
    title: str
    industry: str
    company_name: str
    description: str
    location: str
    salary_min: int
    salary_max: int
    requirements: str
    job_skills: list[str] = []
