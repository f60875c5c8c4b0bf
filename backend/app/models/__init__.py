from app.models.company import Company
from app.models.employer import Employer
from app.models.user import User, UserSkill
from app.models.job import Job, JobSkill
from app.models.job_application import ApplicationStatus, JobApplication
from app.models.verify_email import VerifyEmail
from app.models.outbox import OutboxEvent

__all__ = [
    "Company",
    "Employer",
    "User",
    "UserSkill",
    "Job",
    "JobSkill",
    "ApplicationStatus",
    "JobApplication",
    "VerifyEmail",
    "OutboxEvent",
]
