import os

import structlog
from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

logger = structlog.get_logger(__name__)


def _build_database_url() -> str:
    """Determine the SQLAlchemy DB URL using env vars with sensible fallbacks."""
    env_url = os.getenv("DATABASE_URL")
    if env_url:
        return env_url

    host = os.getenv("DB_HOST")
    if host:
        user = os.getenv("DB_USER", "postgres")
        password = os.getenv("DB_PASSWORD", "postgres")
        port = os.getenv("DB_PORT", "5432")
        name = os.getenv("DB_NAME", "company_registration")
        return f"postgresql://{user}:{password}@{host}:{port}/{name}"

    # Default to local SQLite file for simple local development
    return "sqlite:///./company_registration.db"


def set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.execute("PRAGMA journal_mode=WAL;")
        cursor.execute("PRAGMA busy_timeout = 5000")
    finally:
        cursor.close()


def log_statement_error(context) -> None:
    """Log a failing statement and let the original exception propagate."""
    logger.error(
        "Database query error",
        error=str(context.original_exception),
        statement=context.statement,
    )


def make_engine(url: str):
    # Configure SQLAlchemy engine – extra connect args only relevant for SQLite
    if url.startswith("sqlite"):
        db_engine = create_engine(
            url,
            connect_args={
                "check_same_thread": False,
                "timeout": 15,
            },
            pool_pre_ping=True,
        )
        event.listen(db_engine, "connect", set_sqlite_pragma)
    else:
        db_engine = create_engine(url, pool_pre_ping=True)

    event.listen(db_engine, "handle_error", log_statement_error)
    return db_engine


SQLALCHEMY_DATABASE_URL = _build_database_url()

engine = make_engine(SQLALCHEMY_DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def create_db_and_tables():
    Base.metadata.create_all(bind=engine)


def check_connection() -> bool:
    """Probe the database once; the app keeps running when it is unreachable."""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning(
            "Database connection error; database features will be unavailable",
            error=str(exc),
        )
        return False
    logger.info("Database connected successfully")
    return True


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
