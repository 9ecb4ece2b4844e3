import logging

from sqlalchemy import select

from taskdesk.db.session import engine, SessionLocal
from taskdesk.models import task  # noqa: F401
from taskdesk.models import user  # noqa: F401
from taskdesk.models.base import Base
from taskdesk.models.user import ROLE_ADMIN, User
from taskdesk.core.config import settings
from taskdesk.core.security import get_password_hash

logger = logging.getLogger(__name__)

def create_tables():
    Base.metadata.create_all(bind=engine)

def seed_admin() -> User:
    """Ensure the configured admin account exists (idempotent)."""
    admin_email = (settings.seed_admin_email or "admin@example.com").strip().lower()
    admin_pwd = settings.seed_admin_password or "Admin1234!"
    db = SessionLocal()
    try:
        admin = db.scalars(select(User).where(User.email == admin_email)).first()
        if not admin:
            admin = User(
                name=settings.seed_admin_name,
                email=admin_email,
                hashed_password=get_password_hash(admin_pwd),
                role=ROLE_ADMIN,
            )
            db.add(admin)
            db.commit()
            db.refresh(admin)
            logger.info("[seed] Created admin %s", admin_email)
        return admin
    finally:
        db.close()
