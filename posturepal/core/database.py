from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from posturepal.core.config import settings

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # FastAPI serves sync routes from a thread pool
    connect_args["check_same_thread"] = False

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    Dependency that yields a database session per request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
