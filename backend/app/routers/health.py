from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text

from app.database import get_db
from app.dependencies import get_search_index
from app.services.outbox import count_pending_events
from app.services.search import SearchIndex

router = APIRouter()


@router.get("/health")
def health_check(
    db: Session = Depends(get_db),
    search_index: SearchIndex = Depends(get_search_index),
):
    """Health check endpoint that verifies database and search connectivity.

    Also reports how many outbox events are waiting to be dispatched.

    Note: This is a sync function because we use synchronous SQLAlchemy.
    FastAPI will run it in a threadpool automatically.
    """
    outbox_pending = None
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
        outbox_pending = count_pending_events(db)
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"

    try:
        search_status = "healthy" if search_index.ping() else "unreachable"
    except Exception as e:
        search_status = f"unhealthy: {str(e)}"

    healthy = db_status == "healthy" and search_status == "healthy"
    return {
        "status": "ok" if healthy else "degraded",
        "database": db_status,
        "search": search_status,
        "outbox_pending": outbox_pending,
    }
