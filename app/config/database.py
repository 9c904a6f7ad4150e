# app/config/database.py

from sqlalchemy import create_engine, pool
from sqlalchemy.orm import declarative_base, sessionmaker
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    database_url: str = "sqlite:///./scheduling.db"

    api_version: str = "1.0.0"
    api_title: str = "Medical Appointment Scheduling System"
    debug: bool = True
    log_level: str = "info"

    default_slot_duration: int = 30
    min_slot_duration: int = 15
    max_slot_duration: int = 120

    notification_backend: str = "redis"  # redis | memory
    notification_workers: int = 2

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra='ignore'
    )

settings = Settings()


def build_engine(database_url: str):
    """Create an engine for the given URL.

    SQLite connections are shared across request threads, so the
    same-thread check is disabled there.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": 30},
            pool_pre_ping=True,
            echo=False
        )

    return create_engine(
        database_url,
        poolclass=pool.QueuePool,
        pool_size=20,
        max_overflow=40,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=False
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
