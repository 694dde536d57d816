import os
import uuid

import pytest
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

# --- Alembic Imports ---
from alembic.config import Config
from alembic import command
# --- End Alembic Imports ---

# Import app and DB dependency function first
from main import app, get_db

# Import database components needed for setup
from database import Base, make_engine

import crud
import models
import schemas
from security import create_access_token

TEST_DATABASE_URL = "sqlite:///./company-registration-test.db"
TEST_PASSWORD = "s3cret-pass"

test_engine = make_engine(TEST_DATABASE_URL)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def _remove_db_files(db_path: str) -> None:
    for path in (db_path, f"{db_path}-wal", f"{db_path}-shm"):
        if os.path.exists(path):
            try:
                os.unlink(path)
            except OSError as e:
                print(f"Error removing test database file {path}: {e}")


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create the test database from models and stamp with Alembic head."""
    db_path = TEST_DATABASE_URL.split("///")[-1]
    _remove_db_files(db_path)

    # --- Create schema directly from models --- #
    Base.metadata.create_all(bind=test_engine)

    # --- Stamp the database with the latest Alembic revision --- #
    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", TEST_DATABASE_URL)
    command.stamp(alembic_cfg, "head")

    yield  # Tests run here

    test_engine.dispose()
    _remove_db_files(db_path)


@pytest.fixture(scope="function")
def db_session(setup_test_database):
    """Yields a SQLAlchemy session directly from the test factory."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def override_get_db():
    """Point the get_db dependency at the test database, one session per request."""

    def _override_get_db():
        db = TestSessionLocal()
        try:
            yield db
        finally:
            db.close()

    original = app.dependency_overrides.get(get_db)
    app.dependency_overrides[get_db] = _override_get_db

    yield

    if original:
        app.dependency_overrides[get_db] = original
    else:
        del app.dependency_overrides[get_db]


@pytest.fixture(scope="function")
def test_client(override_get_db):
    """Provides a test client configured with our test database session."""
    return TestClient(app)


# --- Data helpers --- #
def unique_email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10]}@example.com"


def create_test_user(db, email: str = None, password: str = TEST_PASSWORD, **overrides) -> models.User:
    """Insert a user through the entity layer so the password is hashed."""
    fields = {
        "email": email or unique_email(),
        "password": password,
        "full_name": "Test User",
        "gender": "o",
        "mobile_no": "9876543210",
    }
    fields.update(overrides)
    return crud.create_user(db, schemas.UserCreate(**fields))


def create_test_company(db, owner: models.User, **overrides) -> models.Company:
    fields = {
        "company_name": "Acme Corp",
        "city": "Pune",
        "country": "India",
        "industry": "Software",
        "social_links": [{"platform": "linkedin", "url": "https://linkedin.com/company/acme"}],
    }
    fields.update(overrides)
    return crud.create_company(db, schemas.CompanyCreate(**fields), owner_id=owner.id)


def create_test_job(db, company: models.Company, **overrides) -> models.Job:
    fields = {
        "title": "Backend Engineer",
        "location": "Remote",
        "employmentType": "full-time",
        "description": "Build and run the API.",
        "skills": ["python", "sql"],
    }
    fields.update(overrides)
    return crud.create_job(db, schemas.JobCreate(**fields), company_id=company.id)


def auth_headers(user: models.User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
