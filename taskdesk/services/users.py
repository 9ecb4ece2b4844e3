import logging
from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskdesk.core.errors import DuplicateEmail, InvalidInput, NotFound
from taskdesk.core.security import get_password_hash
from taskdesk.models.user import ROLE_EMPLOYEE, ROLES, User
from taskdesk.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _require_text(value: str | None, field: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidInput(f"{field} is required")
    return str(value).strip()


def _check_role(role: str) -> str:
    if role not in ROLES:
        raise InvalidInput(f"role must be one of: {', '.join(ROLES)}")
    return role


def find_by_email(db: Session, email: str) -> User | None:
    return db.scalars(select(User).where(User.email == normalize_email(email))).first()


def _commit_unique(db: Session, user: User) -> None:
    # The unique index is the final word on concurrent inserts with the same email
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateEmail()
    db.refresh(user)


def create_user(db: Session, data: UserCreate) -> User:
    name = _require_text(data.name, "name")
    email = normalize_email(_require_text(data.email, "email"))
    password = data.password
    if not password:
        raise InvalidInput("password is required")
    role = _check_role(data.role or ROLE_EMPLOYEE)
    if find_by_email(db, email):
        raise DuplicateEmail()

    user = User(name=name, email=email, hashed_password=get_password_hash(password), role=role)
    db.add(user)
    _commit_unique(db, user)
    logger.info("Created user id=%s role=%s", user.id, user.role)
    return user


def list_users(db: Session) -> Sequence[User]:
    return db.scalars(select(User).order_by(User.id)).all()


def list_employees(db: Session) -> Sequence[User]:
    return db.scalars(select(User).where(User.role == ROLE_EMPLOYEE).order_by(User.id)).all()


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def update_user(db: Session, user_id: int, data: UserUpdate) -> User:
    """Partial update; the password is re-hashed only when a new one is sent."""
    user = get_user(db, user_id)
    changes: dict[str, Any] = data.model_dump(exclude_unset=True, exclude_none=True)

    if "name" in changes:
        user.name = _require_text(changes["name"], "name")
    if "email" in changes:
        email = normalize_email(_require_text(changes["email"], "email"))
        other = find_by_email(db, email)
        if other and other.id != user.id:
            raise DuplicateEmail()
        user.email = email
    if "role" in changes:
        user.role = _check_role(changes["role"])
    if changes.get("password"):
        user.hashed_password = get_password_hash(changes["password"])

    _commit_unique(db, user)
    logger.info("Updated user id=%s fields=%s", user.id, sorted(changes))
    return user


def delete_user(db: Session, user_id: int) -> None:
    """Delete a user. Tasks that reference it are left as they are."""
    user = get_user(db, user_id)
    db.delete(user)
    db.commit()
    logger.info("Deleted user id=%s", user_id)
