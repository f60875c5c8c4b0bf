from dataclasses import dataclass
from functools import lru_cache

from fastapi import BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db, session_scope
from app.errors import UnauthenticatedError
from app.models import Employer, User
from app.services.auth import TokenPayload, decode_access_token
from app.services.outbox import OutboxDispatcher, drain_outbox
from app.services.search import SearchIndex, create_search_index
from app.store import employers as employer_store
from app.store import users as user_store

AUTHORIZATION_HEADER = "authorization"
AUTHORIZATION_TYPE_BEARER = "bearer"


@dataclass
class Principal:
    """The authenticated caller: exactly one of ``user`` or ``employer`` is set."""

    payload: TokenPayload
    user: User | None = None
    employer: Employer | None = None

    @property
    def is_user(self) -> bool:
        return self.user is not None

    @property
    def is_employer(self) -> bool:
        return self.employer is not None


def get_token_payload(request: Request) -> TokenPayload:
    """Verify the bearer token in the Authorization header."""
    header = request.headers.get(AUTHORIZATION_HEADER)
    if not header:
        raise UnauthenticatedError("authorization header is not provided")

    fields = header.split()
    if len(fields) != 2:
        raise UnauthenticatedError("invalid authorization header format")

    scheme, token = fields
    if scheme.lower() != AUTHORIZATION_TYPE_BEARER:
        raise UnauthenticatedError(f"unsupported authorization type {scheme}")

    return decode_access_token(token)


def get_principal(
    payload: TokenPayload = Depends(get_token_payload),
    db: Session = Depends(get_db),
) -> Principal:
    """Resolve the token email to a user or, failing that, an employer."""
    user = user_store.find_user_by_email(db, payload.email)
    if user is not None:
        return Principal(payload=payload, user=user)

    employer = employer_store.find_employer_by_email(db, payload.email)
    if employer is not None:
        return Principal(payload=payload, employer=employer)

    raise UnauthenticatedError("account for this token no longer exists")


def get_current_user(principal: Principal = Depends(get_principal)) -> User:
    if not principal.is_user:
        raise UnauthenticatedError("only users can access this endpoint")
    return principal.user


def get_current_employer(principal: Principal = Depends(get_principal)) -> Employer:
    if not principal.is_employer:
        raise UnauthenticatedError("only employers can access this endpoint")
    return principal.employer


@lru_cache
def get_search_index() -> SearchIndex:
    return create_search_index(get_settings())


@lru_cache
def get_task_distributor():
    from worker.distributor import TaskDistributor

    return TaskDistributor()


def get_outbox_dispatcher() -> OutboxDispatcher:
    return OutboxDispatcher(
        session_scope,
        get_search_index(),
        get_task_distributor(),
        batch_size=get_settings().outbox_batch_size,
        max_attempts=get_settings().outbox_max_attempts,
    )


def schedule_outbox_drain(
    background_tasks: BackgroundTasks,
    dispatcher: OutboxDispatcher = Depends(get_outbox_dispatcher),
) -> None:
    """Drain the outbox right after the response instead of waiting for the scheduler."""
    background_tasks.add_task(drain_outbox, dispatcher)
