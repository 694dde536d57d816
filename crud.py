import json
from typing import Any, Mapping, Optional

import structlog
from sqlalchemy import func, update
from sqlalchemy.exc import DataError
from sqlalchemy.orm import Session

import models
import schemas
from security import get_password_hash
from settings import get_settings

logger = structlog.get_logger(__name__)


# Columns a partial update may write. Anything else in the incoming mapping is dropped.
USER_UPDATABLE_FIELDS = frozenset(
    {
        "email",
        "password",
        "full_name",
        "gender",
        "mobile_no",
        "signup_type",
        "is_mobile_verified",
        "is_email_verified",
    }
)

COMPANY_UPDATABLE_FIELDS = frozenset(
    {
        "company_name",
        "address",
        "city",
        "state",
        "country",
        "postal_code",
        "website",
        "logo_url",
        "logo_public_id",
        "banner_url",
        "banner_public_id",
        "industry",
        "founded_date",
        "description",
        "social_links",
    }
)

# No applicants_count: only increment_applicants_count writes it
JOB_UPDATABLE_FIELDS = frozenset(
    {
        "title",
        "department",
        "location",
        "employment_type",
        "experience_level",
        "salary_min",
        "salary_max",
        "description",
        "requirements",
        "responsibilities",
        "skills",
        "is_remote",
        "is_urgent",
        "status",
    }
)


class InvalidFieldValue(ValueError):
    """A value was rejected by the database or by field normalization."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidJSONField(InvalidFieldValue):
    """A structured field was given a string that is not valid JSON."""


def to_json_text(value: Any, field: str, strict: bool = False) -> Optional[str]:
    """Normalize a structured field (social_links, skills) to its stored JSON text.

    Lists and dicts are serialized. Strings are parsed and re-serialized; a string
    that does not parse is stored as-is unless ``strict`` is set. Values that
    cannot be serialized become ``None``.
    """
    if value is None:
        return None
    if isinstance(value, str):
        try:
            return json.dumps(json.loads(value))
        except ValueError:
            if strict:
                raise InvalidJSONField(f"{field} is not valid JSON", field=field)
            return value
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        logger.warning("Unserializable structured field, storing null", field=field)
        return None


def _filter_fields(data: Mapping[str, Any], allowed: frozenset) -> dict:
    return {key: value for key, value in data.items() if key in allowed}


def _apply_update(db: Session, model, row_id: int, fields: dict):
    """Run ``UPDATE ... SET <fields>, updated_at = now() WHERE id = :id RETURNING *``."""
    stmt = (
        update(model)
        .where(model.id == row_id)
        .values(**fields, updated_at=func.now())
        .returning(model)
    )
    try:
        row = db.execute(stmt).scalar_one_or_none()
        db.commit()
    except DataError as exc:
        db.rollback()
        raise InvalidFieldValue(str(exc.orig)) from exc
    if row is None:
        return None
    db.refresh(row)
    return row


def _insert(db: Session, row):
    """Add and commit a new row, mapping database value errors to InvalidFieldValue."""
    db.add(row)
    try:
        db.commit()
    except DataError as exc:
        db.rollback()
        raise InvalidFieldValue(str(exc.orig)) from exc
    db.refresh(row)
    return row


# --- User CRUD ---
def get_all_users(db: Session):
    return db.query(models.User).order_by(models.User.id).all()


def get_user_by_id(db: Session, user_id: int):
    """Get a user by their primary key ID."""
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str):
    return db.query(models.User).filter(models.User.email == email.lower()).first()


def create_user(db: Session, user: schemas.UserCreate):
    db_user = models.User(
        email=user.email,
        password=get_password_hash(user.password),
        full_name=user.full_name,
        gender=user.gender,
        mobile_no=user.mobile_no,
        signup_type=user.signup_type or "e",
        is_mobile_verified=user.is_mobile_verified,
        is_email_verified=user.is_email_verified,
    )
    _insert(db, db_user)
    logger.info("User created", user_id=db_user.id)
    return db_user


def update_user(db: Session, user_id: int, user_data: Mapping[str, Any]):
    fields = _filter_fields(user_data, USER_UPDATABLE_FIELDS)
    if not fields:
        return get_user_by_id(db, user_id)

    if "password" in fields:
        fields["password"] = get_password_hash(fields["password"])
    if fields.get("email"):
        fields["email"] = fields["email"].lower()

    return _apply_update(db, models.User, user_id, fields)


def delete_user(db: Session, user_id: int):
    """Delete a user; the ORM cascade removes their company and its jobs."""
    db_user = get_user_by_id(db, user_id)
    if not db_user:
        return None
    db.delete(db_user)
    db.commit()
    logger.info("User deleted", user_id=user_id)
    return db_user


# --- Company CRUD ---
def get_all_companies(db: Session):
    return db.query(models.Company).order_by(models.Company.id).all()


def get_company_by_id(db: Session, company_id: int):
    return db.query(models.Company).filter(models.Company.id == company_id).first()


def get_company_by_owner_id(db: Session, owner_id: int):
    return db.query(models.Company).filter(models.Company.owner_id == owner_id).first()


def create_company(db: Session, company: schemas.CompanyCreate, owner_id: int):
    data = company.model_dump()
    data["social_links"] = to_json_text(
        data.get("social_links"), "social_links", get_settings().strict_json_fields
    )
    db_company = models.Company(owner_id=owner_id, **data)
    _insert(db, db_company)
    logger.info("Company created", company_id=db_company.id, owner_id=owner_id)
    return db_company


def update_company(db: Session, company_id: int, company_data: Mapping[str, Any]):
    fields = _filter_fields(company_data, COMPANY_UPDATABLE_FIELDS)
    if not fields:
        return get_company_by_id(db, company_id)

    if "social_links" in fields:
        fields["social_links"] = to_json_text(
            fields["social_links"], "social_links", get_settings().strict_json_fields
        )

    return _apply_update(db, models.Company, company_id, fields)


def delete_company(db: Session, company_id: int):
    db_company = get_company_by_id(db, company_id)
    if not db_company:
        return None
    db.delete(db_company)
    db.commit()
    logger.info("Company deleted", company_id=company_id)
    return db_company


# --- Job CRUD ---
def create_job(db: Session, job: schemas.JobCreate, company_id: int):
    data = job.model_dump()
    data["skills"] = to_json_text(data.get("skills"), "skills", get_settings().strict_json_fields)
    db_job = models.Job(company_id=company_id, status="pending", applicants_count=0, **data)
    _insert(db, db_job)
    logger.info("Job created", job_id=db_job.id, company_id=company_id)
    return db_job


def get_jobs_by_company_id(db: Session, company_id: int, limit: Optional[int] = None):
    query = (
        db.query(models.Job)
        .filter(models.Job.company_id == company_id)
        .order_by(models.Job.created_at.desc(), models.Job.id.desc())
    )
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def get_recent_jobs(db: Session, company_id: int, limit: int = 5):
    """Newest postings for the dashboard overview."""
    return get_jobs_by_company_id(db, company_id, limit=limit)


def get_job(db: Session, job_id: int):
    return db.query(models.Job).filter(models.Job.id == job_id).first()


def update_job(db: Session, job_id: int, job_data: Mapping[str, Any]):
    fields = _filter_fields(job_data, JOB_UPDATABLE_FIELDS)
    if not fields:
        return get_job(db, job_id)

    if "skills" in fields:
        fields["skills"] = to_json_text(fields["skills"], "skills", get_settings().strict_json_fields)

    return _apply_update(db, models.Job, job_id, fields)


def update_job_status(db: Session, job_id: int, status: str):
    return update_job(db, job_id, {"status": status})


def increment_applicants_count(db: Session, job_id: int):
    stmt = (
        update(models.Job)
        .where(models.Job.id == job_id)
        .values(
            applicants_count=models.Job.applicants_count + 1,
            updated_at=func.now(),
        )
        .returning(models.Job)
    )
    db_job = db.execute(stmt).scalar_one_or_none()
    db.commit()
    if db_job is None:
        return None
    db.refresh(db_job)
    return db_job


def delete_job(db: Session, job_id: int):
    db_job = get_job(db, job_id)
    if not db_job:
        return None
    db.delete(db_job)
    db.commit()
    logger.info("Job deleted", job_id=job_id)
    return db_job
