from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import Principal, get_principal
from app.services import applications as application_service

router = APIRouter()


@router.get("/cvs/{application_id}.pdf")
def download_cv(
    application_id: int,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    """Stream an application's CV to its applicant or to the employer that owns the job."""
    if principal.is_user:
        cv = application_service.get_cv_for_user(db, principal.user, application_id)
    else:
        cv = application_service.get_cv_for_employer(db, principal.employer, application_id)

    return Response(
        content=cv,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="cv_{application_id}.pdf"'},
    )
