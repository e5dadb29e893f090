from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from cems.core.config import settings


def _engine_kwargs() -> dict:
    if settings.is_sqlite:
        # SQLite connections are handed across the threadpool FastAPI runs sync endpoints on.
        return {"connect_args": {"check_same_thread": False}}
    # Bounded pool: once pool_size + max_overflow connections are checked out,
    # further requests wait for one to be returned.
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
    }


# The engine is the entry point to the database. It's configured with the
# database URL and handles the connection pooling.
engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, **_engine_kwargs())

# SessionLocal is a factory for creating new Session objects.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        # Runs after the endpoint has finished, even if it raised.
        db.close()
