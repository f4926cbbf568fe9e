# app/config/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from .settings import settings

engine_kwargs = {
    "pool_pre_ping": True,
    "echo": settings.debug
}

if settings.is_sqlite:
    # SQLite needs the connection shared across the threadpool
    engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    engine_kwargs["pool_recycle"] = 300
    if "render" in settings.database_url:
        engine_kwargs["connect_args"] = {"sslmode": "require"}

# Create engine
engine = create_engine(
    settings.database_url_with_ssl,
    **engine_kwargs
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()

def init_db():
    """Create tables for every registered model"""
    # Register models on Base.metadata
    from app.shared.database import models  # noqa: F401
    Base.metadata.create_all(bind=engine)

# Database dependency
def get_db():
    """Database dependency for FastAPI"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
