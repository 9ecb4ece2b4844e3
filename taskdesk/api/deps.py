from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from taskdesk.core.config import settings
from taskdesk.core.errors import Forbidden, Unauthenticated
from taskdesk.db.session import get_db
from taskdesk.models.user import User
from taskdesk.schemas.auth import Identity
from taskdesk.services import auth as auth_service

# auto_error=False: a missing header is reported as Unauthenticated like any other bad token
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_prefix}/users/token", auto_error=False)

def get_current_identity(token: Optional[str] = Depends(oauth2_scheme)) -> Identity:
    return auth_service.verify(token)

def get_optional_identity(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[Identity]:
    """Identity when a token is sent; None otherwise. A bad token is still rejected."""
    if not token:
        return None
    return auth_service.verify(token)

def refresh_identity(db: Session, identity: Identity) -> Identity:
    """Re-read the caller's role from the store.

    A token keeps its role claim until it expires; a deleted or demoted user
    must not keep the rights the token was issued with.
    """
    user = db.get(User, identity.id)
    if user is None:
        raise Unauthenticated("User no longer exists")
    if user.role != identity.role:
        return Identity(id=user.id, role=user.role)
    return identity


class Access:
    """Role checks for the task and user CRUD routes.

    With OPEN_CRUD_ROUTES enabled no check is enforced and ``identity`` may be None.
    """

    def __init__(self, identity: Optional[Identity], enforced: bool):
        self.identity = identity
        self.enforced = enforced

    @property
    def is_admin(self) -> bool:
        return self.identity is not None and self.identity.is_admin

    def require_admin(self) -> None:
        if self.enforced and not self.is_admin:
            raise Forbidden("Admin role required")

    def require_admin_or_self(self, user_id: int) -> None:
        if self.enforced and not self.is_admin and self.identity.id != user_id:
            raise Forbidden()

    def require_admin_or_assignee(self, assigned_to: int) -> None:
        if self.enforced and not self.is_admin and self.identity.id != assigned_to:
            raise Forbidden("Task is not assigned to you")


def get_access(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> Access:
    # read per request: the mode can change at runtime
    if settings.open_crud_routes:
        return Access(get_optional_identity(token), enforced=False)
    return Access(refresh_identity(db, get_current_identity(token)), enforced=True)


def may_choose_role(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> bool:
    """Whether a registration may pick a role other than employee."""
    if settings.open_crud_routes:
        return True
    identity = get_optional_identity(token)
    return identity is not None and refresh_identity(db, identity).is_admin
