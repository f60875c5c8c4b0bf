import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.errors import ServiceError
from app.routers import assets, employers, health, job_applications, jobs, users

logger = logging.getLogger(__name__)

settings = get_settings()

API_PREFIX = "/api/v1"


def load_search_index():
    """Populate the search index from the database. Failures are logged, not fatal."""
    from app.database import session_scope
    from app.dependencies import get_search_index
    from app.services.search import load_job_documents

    try:
        documents = load_job_documents(session_scope)
        get_search_index().bulk_load(documents)
    except Exception:
        logger.exception("Initial search index load failed; search results may be stale")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.search_bulk_load_on_startup:
        load_search_index()
    # Only start scheduler in production or if explicitly enabled
    # This prevents duplicate schedulers during development with --reload
    if settings.scheduler_enabled:
        from worker.scheduler import start_scheduler
        start_scheduler()
    yield
    if settings.scheduler_enabled:
        from worker.scheduler import shutdown_scheduler
        shutdown_scheduler()


app = FastAPI(
    title="Go Job Search",
    description="Job marketplace API for job seekers and employers",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["Authorization", "Content-Type"],
)

# Include routers
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(users.router, prefix=f"{API_PREFIX}/users", tags=["users"])
app.include_router(employers.router, prefix=f"{API_PREFIX}/employers", tags=["employers"])
app.include_router(jobs.router, prefix=f"{API_PREFIX}/jobs", tags=["jobs"])
app.include_router(
    job_applications.router, prefix=f"{API_PREFIX}/job-applications", tags=["job-applications"]
)
app.include_router(assets.router, prefix=f"{API_PREFIX}/assets", tags=["assets"])


# Error handlers
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Invalid bodies, query strings and forms are reported as 400."""
    # Raw input is left out; for uploads it is the file content.
    errors = [{k: v for k, v in error.items() if k != "input"} for error in exc.errors()]
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(errors)})


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with a JSON 500."""
    # Log the exception with request context for debugging
    logger.exception(
        "Unhandled exception: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
