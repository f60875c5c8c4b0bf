from app.schemas.common import MessageResponse, PatchModel
from app.schemas.user import (
    UserCreate,
    UserUpdate,
    UserResponse,
    UserSkillCreate,
    UserSkillResponse,
    LoginRequest,
    LoginUserResponse,
    PasswordUpdate,
)
from app.schemas.employer import (
    EmployerCreate,
    EmployerUpdate,
    EmployerResponse,
    LoginEmployerResponse,
)
from app.schemas.job import (
    JobCreate,
    JobUpdate,
    JobResponse,
    JobListItem,
    JobDetailsResponse,
    JobSkillResponse,
    SearchJobResult,
)
from app.schemas.job_application import (
    JobApplicationResponse,
    UserJobApplicationResponse,
    EmployerJobApplicationResponse,
    ChangeStatusRequest,
    ChangeStatusResponse,
)

__all__ = [
    "MessageResponse",
    "PatchModel",
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "UserSkillCreate",
    "UserSkillResponse",
    "LoginRequest",
    "LoginUserResponse",
    "PasswordUpdate",
    "EmployerCreate",
    "EmployerUpdate",
    "EmployerResponse",
    "LoginEmployerResponse",
    "JobCreate",
    "JobUpdate",
    "JobResponse",
    "JobListItem",
    "JobDetailsResponse",
    "JobSkillResponse",
    "SearchJobResult",
    "JobApplicationResponse",
    "UserJobApplicationResponse",
    "EmployerJobApplicationResponse",
    "ChangeStatusRequest",
    "ChangeStatusResponse",
]
