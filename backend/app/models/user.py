from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False, default="")
    desired_job_title = Column(String(255), nullable=False, default="")
    desired_industry = Column(String(255), nullable=False, default="")
    desired_salary_min = Column(Integer, nullable=False, default=0)
    desired_salary_max = Column(Integer, nullable=False, default=0)
    skills_description = Column(Text, nullable=True)
    experience = Column(Text, nullable=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())

    skills = relationship(
        "UserSkill",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="UserSkill.id",
    )
    applications = relationship(
        "JobApplication", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("desired_salary_min >= 0", name="ck_users_salary_min_positive"),
        CheckConstraint(
            "desired_salary_min <= desired_salary_max", name="ck_users_salary_range"
        ),
    )


class UserSkill(Base):
    __tablename__ = "user_skills"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False, index=True)
    experience_years = Column(Integer, nullable=False, default=0)

    user = relationship("User", back_populates="skills")

    __table_args__ = (
        CheckConstraint("experience_years >= 0", name="ck_user_skills_experience_positive"),
    )
