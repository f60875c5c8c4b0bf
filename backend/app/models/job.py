from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(
        Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(500), nullable=False)
    industry = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    location = Column(String(255), nullable=False)
    salary_min = Column(Integer, nullable=False, default=0)
    salary_max = Column(Integer, nullable=False, default=0)
    requirements = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    company = relationship("Company", back_populates="jobs")
    skills = relationship(
        "JobSkill",
        back_populates="job",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="JobSkill.id",
    )
    applications = relationship(
        "JobApplication", back_populates="job", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("salary_min >= 0", name="ck_jobs_salary_min_positive"),
        CheckConstraint("salary_min <= salary_max", name="ck_jobs_salary_range"),
        Index("ix_jobs_location", "location"),
        Index("ix_jobs_industry", "industry"),
    )


class JobSkill(Base):
    __tablename__ = "job_skills"

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)

    job = relationship("Job", back_populates="skills")
