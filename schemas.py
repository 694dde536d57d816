import json
import re
from datetime import date, datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")

EMAIL_PATTERN = r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$"

GENDER_CODES = {"m": "m", "male": "m", "f": "f", "female": "f", "o": "o", "other": "o"}

JOB_STATUSES = ("pending", "active", "closed")

# Salaries are stored in a 32-bit INTEGER column
MAX_SALARY = 2**31 - 1


def normalize_gender(value: Optional[str]) -> Optional[str]:
    """Map free-form gender input ("Male", "f", "other") onto the m/f/o codes."""
    if value is None:
        return None
    code = GENDER_CODES.get(value.strip().lower())
    if code is None:
        raise ValueError("Gender must be one of: m, f, o")
    return code


def parse_json_text(value: Any) -> Any:
    """Decode a JSON text column for output, leaving non-JSON strings untouched."""
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


# --- Envelope ---
class APIResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None


# --- Users ---
class UserCreate(BaseModel):
    """Internal payload for inserting a user row; the password is still plaintext here."""

    email: str
    password: str
    full_name: str
    gender: str
    mobile_no: Optional[str] = None
    signup_type: str = "e"
    is_mobile_verified: bool = False
    is_email_verified: bool = False

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not re.match(EMAIL_PATTERN, v):
            raise ValueError("Invalid email format")
        return v.lower()

    @field_validator("gender")
    @classmethod
    def validate_gender(cls, v: str) -> str:
        return normalize_gender(v)


class UserUpdate(BaseModel):
    # Non-null columns default to None so an omitted key stays unset while an explicit null is rejected
    email: str = None
    password: str = Field(None, min_length=6)
    full_name: str = None
    gender: str = None
    mobile_no: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not re.match(EMAIL_PATTERN, v):
            raise ValueError("Invalid email format")
        return v.lower()

    @field_validator("gender")
    @classmethod
    def validate_gender(cls, v: str) -> str:
        return normalize_gender(v)


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: str
    gender: str
    mobile_no: Optional[str] = None
    signup_type: str
    is_mobile_verified: bool
    is_email_verified: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserSummary(BaseModel):
    """The user fields echoed back alongside a freshly issued token."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: str
    gender: str
    mobile_no: Optional[str] = None
    is_mobile_verified: bool
    is_email_verified: bool


# --- Auth ---
class RegisterRequest(BaseModel):
    # Presence is checked by the handler so a missing field yields "All fields are required"
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None
    gender: Optional[str] = None
    mobile_no: Optional[str] = None
    signup_type: Optional[str] = None

    @field_validator("gender")
    @classmethod
    def validate_gender(cls, v: Optional[str]) -> Optional[str]:
        return normalize_gender(v)


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class TokenData(BaseModel):
    token: str
    user: UserSummary


class LegacyAuthData(BaseModel):
    token: str
    user: User


class RegisteredUser(BaseModel):
    user_id: int


class VerifyMobileRequest(BaseModel):
    user_id: Optional[int] = None
    otp: Optional[str] = None


class DemoOtpRequest(BaseModel):
    phone: Optional[str] = None
    otp: Optional[str] = None


class FirebaseUserData(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None
    gender: Optional[str] = None
    mobile_no: Optional[str] = None
    signup_type: Optional[str] = None
    is_mobile_verified: bool = False


class FirebaseLoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id_token: Optional[str] = Field(None, alias="idToken")
    user_data: Optional[FirebaseUserData] = Field(None, alias="userData")


# --- Companies ---
class CompanyCreate(BaseModel):
    company_name: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    industry: Optional[str] = None
    founded_date: Optional[date] = None
    description: Optional[str] = None
    social_links: Any = None

    blank_dates_to_none = field_validator("founded_date", "website", mode="before")(_blank_to_none)


class CompanyUpdate(BaseModel):
    company_name: str = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    industry: Optional[str] = None
    founded_date: Optional[date] = None
    description: Optional[str] = None
    social_links: Any = None

    blank_dates_to_none = field_validator("founded_date", "website", mode="before")(_blank_to_none)


class Company(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    company_name: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    industry: Optional[str] = None
    founded_date: Optional[date] = None
    description: Optional[str] = None
    social_links: Any = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    decode_social_links = field_validator("social_links", mode="before")(parse_json_text)


class ImageUpload(BaseModel):
    image: Optional[str] = None


class UploadedImage(BaseModel):
    url: str


# --- Jobs ---
class JobCreate(BaseModel):
    """Job posting body as sent by the dashboard form (camelCase aliases accepted)."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    department: Optional[str] = None
    location: str
    employment_type: str = Field(alias="employmentType")
    experience_level: Optional[str] = Field(None, alias="experience")
    salary_min: Optional[int] = Field(None, ge=0, le=MAX_SALARY, alias="salaryMin")
    salary_max: Optional[int] = Field(None, ge=0, le=MAX_SALARY, alias="salaryMax")
    description: str
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    skills: Any = Field(default_factory=list)
    is_remote: bool = Field(False, alias="remote")
    is_urgent: bool = Field(False, alias="urgent")

    blank_salaries_to_none = field_validator("salary_min", "salary_max", mode="before")(_blank_to_none)
    null_skills_to_empty = field_validator("skills", mode="before")(_none_to_list)


class JobUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = None
    department: Optional[str] = None
    location: str = None
    employment_type: str = Field(None, alias="employmentType")
    experience_level: Optional[str] = Field(None, alias="experience")
    salary_min: Optional[int] = Field(None, ge=0, le=MAX_SALARY, alias="salaryMin")
    salary_max: Optional[int] = Field(None, ge=0, le=MAX_SALARY, alias="salaryMax")
    description: str = None
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    skills: Any = None
    is_remote: bool = Field(None, alias="remote")
    is_urgent: bool = Field(None, alias="urgent")

    blank_salaries_to_none = field_validator("salary_min", "salary_max", mode="before")(_blank_to_none)


class JobStatusUpdate(BaseModel):
    status: Optional[str] = None


class Job(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    title: str
    department: Optional[str] = None
    location: str
    employment_type: str
    experience_level: Optional[str] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    description: str
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    skills: Any = None
    is_remote: bool
    is_urgent: bool
    status: str
    applicants_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    decode_skills = field_validator("skills", mode="before")(parse_json_text)
