from sqlalchemy.orm import Session

from app.errors import NotFoundError
from app.models import User, UserSkill
from app.store.common import flush_or_conflict


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def get_user_by_email(db: Session, email: str) -> User:
    user = find_user_by_email(db, email)
    if user is None:
        raise NotFoundError("user with this email does not exist")
    return user


def create_user(db: Session, **fields) -> User:
    user = User(**fields)
    db.add(user)
    flush_or_conflict(db, "user with this email already exists")
    return user


def update_user(db: Session, user: User, values: dict) -> User:
    """Apply column values to a user. Keys whose value is None are skipped."""
    for key, value in values.items():
        if value is not None:
            setattr(user, key, value)
    flush_or_conflict(db, "user with this email already exists")
    return user


def delete_user(db: Session, user: User) -> None:
    db.delete(user)
    db.flush()


def add_user_skills(db: Session, user_id: int, skills: list[tuple[str, int]]) -> list[UserSkill]:
    rows = [UserSkill(user_id=user_id, name=name, experience_years=years) for name, years in skills]
    db.add_all(rows)
    db.flush()
    return rows


def delete_user_skills(db: Session, user_id: int, skill_ids: list[int]) -> int:
    """Delete the given skills, restricted to those owned by the user."""
    if not skill_ids:
        return 0
    deleted = (
        db.query(UserSkill)
        .filter(UserSkill.user_id == user_id, UserSkill.id.in_(skill_ids))
        .delete(synchronize_session="fetch")
    )
    db.flush()
    return deleted
