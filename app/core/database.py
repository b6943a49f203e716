from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.core.config import settings


def _engine_kwargs(url: str) -> dict:
    # SQLite (local/dev) has no connection pool sizing and is single-threaded by default
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # Verify connections before using them
        "pool_size": 10,  # Connection pool size
        "max_overflow": 20,  # Allow up to 20 connections beyond pool_size
    }


# Create SQLAlchemy engine
engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create Base class for models
Base = declarative_base()


def get_db():
    """
    Dependency function to get database session.
    Used in FastAPI endpoints with Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """
    Initialize database.

    Alembic owns table creation; this only imports the models so that they are
    registered on Base.metadata. SQLite databases (local development) are
    created directly since they are not migrated.
    """
    from app.models import skill, job, job_seeker  # noqa: F401  Import models to register them
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
