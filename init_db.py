"""
Database initialization script.
Run this to create all database tables and an optional demo account.
"""
import argparse
import logging

from posturepal.core.database import engine, Base, SessionLocal
from posturepal.core.logging import configure_logging
from posturepal.models import User, UserProfile
from posturepal.utils import get_password_hash

logger = logging.getLogger("init_db")

DEMO_EMAIL = "demo@posturepal.app"
DEMO_PASSWORD = "demo1234"


def init_db():
    """Initialize database tables."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


def create_demo_user():
    """Create a demo account if it does not exist."""
    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == DEMO_EMAIL).first():
            logger.warning(f"Demo user already exists: {DEMO_EMAIL}")
            return

        demo_user = User(
            name="Demo User",
            email=DEMO_EMAIL,
            hashed_password=get_password_hash(DEMO_PASSWORD),
        )
        demo_user.profile = UserProfile(name="Demo User", fitness_goal="posture_correction")

        db.add(demo_user)
        db.commit()

        logger.info(f"Demo user created: {DEMO_EMAIL} / {DEMO_PASSWORD}")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Initialize the PosturePal database")
    parser.add_argument("--demo-user", action="store_true", help="also create a demo account")
    args = parser.parse_args()

    configure_logging("INFO")
    init_db()
    if args.demo_user:
        create_demo_user()
