"""Credential checks and access tokens.

``register`` and ``login`` work against the users table; ``verify`` is
stateless and only needs the signing secret from settings.
"""
import logging

import jwt
from pydantic import ValidationError
from sqlalchemy.orm import Session

from taskdesk.core.errors import Forbidden, InvalidCredentials, Unauthenticated
from taskdesk.core.security import create_access_token, decode_access_token, verify_password
from taskdesk.models.user import ROLE_EMPLOYEE, User
from taskdesk.schemas.auth import Identity, LoginOut, UserRegister
from taskdesk.schemas.user import UserCreate
from taskdesk.services import users as user_service

logger = logging.getLogger(__name__)


def register(db: Session, payload: UserRegister, allow_role: bool = False) -> User:
    """Create a user from the public registration form.

    The role is forced to employee unless ``allow_role`` is set; asking for
    another role without it raises Forbidden.
    """
    if payload.role not in (None, ROLE_EMPLOYEE) and not allow_role:
        raise Forbidden("Only an admin can register a non-employee account")
    data = UserCreate(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.role or ROLE_EMPLOYEE,
    )
    user = user_service.create_user(db, data)
    logger.info("Registered user id=%s email=%s role=%s", user.id, user.email, user.role)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """Return the user for a matching email/password pair.

    Unknown email and wrong password raise the same InvalidCredentials.
    """
    user = user_service.find_by_email(db, email)
    if not user or not password or not verify_password(password, user.hashed_password):
        logger.info("Failed login for email=%s", (email or "").strip().lower())
        raise InvalidCredentials()
    return user


def login(db: Session, email: str, password: str) -> LoginOut:
    user = authenticate(db, email, password)
    token = create_access_token(subject=user.id, role=user.role)
    logger.info("User id=%s logged in", user.id)
    return LoginOut(token=token, role=user.role, id=user.id, name=user.name)


def verify(token: str | None) -> Identity:
    """Decode a bearer token into the caller's identity.

    Raises Unauthenticated for a missing, malformed, expired or badly signed token.
    """
    if not token:
        raise Unauthenticated()
    try:
        payload = decode_access_token(token)
        return Identity(id=int(payload["sub"]), role=payload.get("role"))
    except jwt.ExpiredSignatureError:
        logger.debug("Rejected expired token")
        raise Unauthenticated("Token expired")
    except (jwt.PyJWTError, KeyError, ValueError, TypeError, ValidationError) as exc:
        logger.debug("Rejected token: %s", exc)
        raise Unauthenticated("Invalid token")
