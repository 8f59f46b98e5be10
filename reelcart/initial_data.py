import logging
from typing import Optional
from sqlalchemy.orm import Session
from .database import SessionLocal, init_db
from .models.user import User, UserRole
from .utils.security import get_password_hash
from .config import settings

logger = logging.getLogger(__name__)

def create_first_admin(db: Session) -> Optional[User]:
    """Create the first ADMIN account from FIRST_SUPERUSER_* settings"""
    if not settings.FIRST_SUPERUSER_EMAIL or not settings.FIRST_SUPERUSER_PASSWORD:
        logger.warning("⚠️ FIRST_SUPERUSER_EMAIL / FIRST_SUPERUSER_PASSWORD not set, skipping admin creation")
        return None

    email = settings.FIRST_SUPERUSER_EMAIL.lower().strip()

    # Check if admin already exists
    user = db.query(User).filter(User.email == email).first()
    if not user:
        user = User(
            name="Admin",
            email=email,
            password=get_password_hash(settings.FIRST_SUPERUSER_PASSWORD),
            role=UserRole.ADMIN,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"✅ Admin created: {email}")
    else:
        logger.info("Admin already exists")
    return user

def main() -> None:
    """Create tables if needed, then the first admin"""
    logging.basicConfig(level=logging.INFO)
    logger.info("Creating initial data")
    init_db()
    db = SessionLocal()
    try:
        create_first_admin(db)
    finally:
        db.close()
    logger.info("Initial data created")

if __name__ == "__main__":
    main()
