import secrets
import time
from contextlib import asynccontextmanager
from typing import List, Optional

import structlog
from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

import crud
import media
import models
import schemas
from auth import FirebaseError, create_firebase_user, get_current_user, verify_id_token
from database import check_connection, create_db_and_tables, get_db
from observability import init_observability
from request_id_middleware import RequestIdMiddleware
from security import create_access_token, verify_password
from settings import get_settings


# Initialise observability before creating app
init_observability()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Probe the database and create missing tables on startup."""
    if check_connection():
        create_db_and_tables()
    yield


app = FastAPI(
    title="Company Registration API",
    description="Backend API for company registration, onboarding and job postings",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestIdMiddleware)


# --- Error Handling --- #
def _error_body(message: str, **extra) -> dict:
    return {"success": False, "message": message, **extra}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = "Route not found"
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(message),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Validation failed", errors=jsonable_encoder(exc.errors())),
    )


@app.exception_handler(crud.InvalidFieldValue)
async def invalid_field_handler(request: Request, exc: crud.InvalidFieldValue):
    logger.warning("Rejected field value", field=exc.field, error=str(exc))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_error_body(str(exc)))


@app.exception_handler(media.MediaError)
async def media_error_handler(request: Request, exc: media.MediaError):
    logger.error("Image hosting error", error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=_error_body("Error uploading image"),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error", exc_info=exc)
    extra = {"error": str(exc)} if get_settings().is_development else {}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error", **extra),
    )


# --- Helpers --- #
def _ok(message: str, data=None) -> dict:
    return {"success": True, "message": message, "data": data}


def _build_user(**fields) -> schemas.UserCreate:
    """Validate user input, turning pydantic errors into a 400."""
    try:
        return schemas.UserCreate(**fields)
    except ValidationError as exc:
        first = exc.errors()[0]
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=first.get("msg", "Invalid user data"),
        )


def _token_payload(user: models.User) -> schemas.TokenData:
    return schemas.TokenData(
        token=create_access_token(user.id),
        user=schemas.UserSummary.model_validate(user),
    )


def _legacy_token_payload(user: models.User) -> schemas.LegacyAuthData:
    return schemas.LegacyAuthData(
        token=create_access_token(user.id),
        user=schemas.User.model_validate(user),
    )


def _authenticate(db: Session, email: str, password: str) -> models.User:
    user = crud.get_user_by_email(db, email) if email else None
    if not user or not verify_password(password, user.password):
        logger.info("Login failed", email=email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password"
        )
    return user


# Fixed phone/OTP pairs served by the demo OTP endpoint
DEMO_OTP_USERS = [
    {"phone": "+919876543210", "otp": "123456", "name": "John Doe"},
    {"phone": "+919876543211", "otp": "654321", "name": "Jane Smith"},
    {"phone": "+919876543212", "otp": "111111", "name": "Robert Johnson"},
    {"phone": "+919876543213", "otp": "222222", "name": "Emily Davis"},
    {"phone": "+919876543214", "otp": "333333", "name": "Michael Wilson"},
]


@app.get("/", tags=["Root"])
async def read_root():
    return {"message": "Company Registration Backend API"}


@app.get("/health", tags=["Root"])
async def health_check():
    return {"status": "healthy"}


# --- Auth Endpoints --- #
@app.post(
    "/api/auth/register",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.APIResponse[schemas.RegisteredUser],
    tags=["Auth"],
)
def register(payload: schemas.RegisterRequest, db: Session = Depends(get_db)):
    if not all(
        [payload.email, payload.password, payload.full_name, payload.gender, payload.mobile_no]
    ):
        raise HTTPException(status_code=400, detail="All fields are required")

    if crud.get_user_by_email(db, payload.email):
        raise HTTPException(status_code=400, detail="User already exists with this email")

    user_in = _build_user(
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
        gender=payload.gender,
        mobile_no=payload.mobile_no,
        signup_type=payload.signup_type or "e",
        is_mobile_verified=False,
        is_email_verified=False,
    )
    user = crud.create_user(db, user_in)
    return _ok(
        "User registered successfully. Please verify mobile OTP.",
        schemas.RegisteredUser(user_id=user.id),
    )


@app.post("/api/auth/login", response_model=schemas.APIResponse[schemas.TokenData], tags=["Auth"])
def login(payload: schemas.LoginRequest, db: Session = Depends(get_db)):
    user = _authenticate(db, payload.email, payload.password)
    logger.info("User logged in", user_id=user.id)
    return _ok("User logged in successfully", _token_payload(user))


@app.post(
    "/api/auth/firebase-login",
    response_model=schemas.APIResponse[schemas.TokenData],
    tags=["Auth"],
)
def firebase_login(payload: schemas.FirebaseLoginRequest, db: Session = Depends(get_db)):
    """Exchange a verified Firebase ID token for this API's own token.

    The verified email is the join key: an existing local account is reused,
    otherwise one is created from ``userData`` when supplied.
    """
    if not payload.id_token:
        raise HTTPException(status_code=401, detail="Invalid authentication token")
    identity = verify_id_token(payload.id_token)
    if not identity.email:
        raise HTTPException(status_code=401, detail="Invalid authentication token")

    user = crud.get_user_by_email(db, identity.email)
    if user:
        logger.info("Federated login for existing user", user_id=user.id)
    elif payload.user_data:
        data = payload.user_data
        user_in = _build_user(
            email=identity.email,
            password=data.password or secrets.token_urlsafe(32),
            full_name=data.full_name or identity.email.split("@")[0],
            gender=data.gender or "o",
            mobile_no=data.mobile_no,
            signup_type=data.signup_type or "e",
            is_mobile_verified=data.is_mobile_verified,
            # Firebase has already verified the address
            is_email_verified=True,
        )
        user = crud.create_user(db, user_in)
        logger.info("Federated login created user", user_id=user.id)
    else:
        raise HTTPException(status_code=400, detail="User not found. Please register first.")

    return _ok("User authenticated successfully", _token_payload(user))


@app.get("/api/auth/verify-email", response_model=schemas.APIResponse[None], tags=["Auth"])
def verify_email(token: Optional[str] = None):
    # TODO: check the token against an issued email-verification link once delivery exists
    if not token:
        raise HTTPException(status_code=400, detail="Verification token is required")
    return _ok("Email verified successfully")


@app.post(
    "/api/auth/verify-mobile",
    response_model=schemas.APIResponse[schemas.TokenData],
    tags=["Auth"],
)
def verify_mobile(payload: schemas.VerifyMobileRequest, db: Session = Depends(get_db)):
    if not payload.user_id or not payload.otp:
        raise HTTPException(status_code=400, detail="User ID and OTP are required")

    user = crud.update_user(db, payload.user_id, {"is_mobile_verified": True})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return _ok("Mobile verified successfully", _token_payload(user))


@app.post("/api/auth/demo-otp", response_model=schemas.APIResponse[dict], tags=["Auth"])
def demo_otp(payload: schemas.DemoOtpRequest):
    if not payload.phone or not payload.otp:
        raise HTTPException(status_code=400, detail="Phone number and OTP are required")

    match = next(
        (u for u in DEMO_OTP_USERS if u["phone"] == payload.phone and u["otp"] == payload.otp),
        None,
    )
    if match is None:
        raise HTTPException(status_code=400, detail="Invalid OTP. Please try again.")

    now_ms = int(time.time() * 1000)
    return _ok(
        "OTP verification successful!",
        {
            "token": f"demo-token-{now_ms}",
            "user": {
                "id": now_ms,
                "full_name": match["name"],
                "mobile_no": match["phone"],
                "is_mobile_verified": True,
            },
        },
    )


# --- User Endpoints --- #
@app.post(
    "/api/users/register",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.APIResponse[schemas.LegacyAuthData],
    tags=["Users"],
)
def register_user(payload: schemas.RegisterRequest, db: Session = Depends(get_db)):
    if payload.email and crud.get_user_by_email(db, payload.email):
        raise HTTPException(status_code=400, detail="User already exists with this email")

    user_in = _build_user(
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
        gender=payload.gender,
        mobile_no=payload.mobile_no,
        signup_type="e",
        is_mobile_verified=True,
        is_email_verified=False,
    )

    try:
        create_firebase_user(user_in.email, user_in.password)
    except FirebaseError as exc:
        # Local registration proceeds without the Firebase mirror
        logger.warning("Firebase user creation error", exc=str(exc))

    user = crud.create_user(db, user_in)
    return _ok("User registered successfully", _legacy_token_payload(user))


@app.post(
    "/api/users/login",
    response_model=schemas.APIResponse[schemas.LegacyAuthData],
    tags=["Users"],
)
def login_user(payload: schemas.LoginRequest, db: Session = Depends(get_db)):
    user = _authenticate(db, payload.email, payload.password)
    return _ok("User logged in successfully", _legacy_token_payload(user))


@app.get("/api/users/profile", response_model=schemas.APIResponse[schemas.User], tags=["Users"])
def get_my_profile(current_user: models.User = Depends(get_current_user)):
    return _ok("User retrieved successfully", schemas.User.model_validate(current_user))


def _ensure_email_available(db: Session, email: Optional[str], user_id: int) -> None:
    if not email:
        return
    other = crud.get_user_by_email(db, email)
    if other and other.id != user_id:
        raise HTTPException(status_code=400, detail="User already exists with this email")


@app.put("/api/users/profile", response_model=schemas.APIResponse[schemas.User], tags=["Users"])
def update_my_profile(
    patch: schemas.UserUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    fields = patch.model_dump(exclude_unset=True)
    _ensure_email_available(db, fields.get("email"), current_user.id)
    user = crud.update_user(db, current_user.id, fields)
    return _ok("User profile updated successfully", schemas.User.model_validate(user))


@app.put("/api/users/change-password", response_model=schemas.APIResponse[None], tags=["Users"])
def change_password(
    payload: schemas.ChangePasswordRequest,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not verify_password(payload.current_password, current_user.password):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    crud.update_user(db, current_user.id, {"password": payload.new_password})
    logger.info("Password changed", user_id=current_user.id)
    return _ok("Password changed successfully")


@app.get("/api/users", response_model=schemas.APIResponse[List[schemas.User]], tags=["Users"])
def list_users(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    users = [schemas.User.model_validate(u) for u in crud.get_all_users(db)]
    return _ok("Users retrieved successfully", users)


@app.get(
    "/api/users/{user_id}", response_model=schemas.APIResponse[schemas.User], tags=["Users"]
)
def get_user(
    user_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = crud.get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return _ok("User retrieved successfully", schemas.User.model_validate(user))


def _get_own_user(db: Session, user_id: int, current_user: models.User) -> models.User:
    user = crud.get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.id != current_user.id:
        raise HTTPException(status_code=403, detail="Access denied")
    return user


@app.put(
    "/api/users/{user_id}", response_model=schemas.APIResponse[schemas.User], tags=["Users"]
)
def update_user(
    user_id: int,
    patch: schemas.UserUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _get_own_user(db, user_id, current_user)
    fields = patch.model_dump(exclude_unset=True)
    _ensure_email_available(db, fields.get("email"), user_id)
    user = crud.update_user(db, user_id, fields)
    return _ok("User updated successfully", schemas.User.model_validate(user))


@app.put(
    "/api/users/{user_id}/profile",
    response_model=schemas.APIResponse[schemas.User],
    tags=["Users"],
)
def update_user_profile(
    user_id: int,
    patch: schemas.UserUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _get_own_user(db, user_id, current_user)
    fields = patch.model_dump(exclude_unset=True)
    _ensure_email_available(db, fields.get("email"), user_id)
    user = crud.update_user(db, user_id, fields)
    return _ok("User profile updated successfully", schemas.User.model_validate(user))


@app.delete(
    "/api/users/{user_id}", response_model=schemas.APIResponse[schemas.User], tags=["Users"]
)
def delete_user(
    user_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = _get_own_user(db, user_id, current_user)
    company = user.company
    asset_ids = [company.logo_public_id, company.banner_public_id] if company else []

    deleted = crud.delete_user(db, user_id)
    for public_id in asset_ids:
        media.delete_image_quietly(public_id)
    return _ok("User deleted successfully", schemas.User.model_validate(deleted))


# --- Company Endpoints --- #
def _coerce_social_links(social_links):
    """Accept the shapes the onboarding screens send and produce a list of link objects."""
    if social_links is None or isinstance(social_links, str):
        return social_links
    if isinstance(social_links, dict):
        social_links = list(social_links.values())
    if not isinstance(social_links, list):
        return []

    coerced = []
    for link in social_links:
        if isinstance(link, str):
            link = schemas.parse_json_text(link)
        coerced.append(link)
    return coerced


def _get_own_company(db: Session, current_user: models.User) -> models.Company:
    company = crud.get_company_by_owner_id(db, current_user.id)
    if not company:
        raise HTTPException(status_code=404, detail="Company profile not found")
    return company


@app.post(
    "/api/companies/register",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.APIResponse[schemas.Company],
    tags=["Companies"],
)
def create_company(
    payload: schemas.CompanyCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if crud.get_company_by_owner_id(db, current_user.id):
        raise HTTPException(status_code=400, detail="Company profile already exists")

    payload.social_links = _coerce_social_links(payload.social_links)
    # owner_id always comes from the token, never from the request body
    company = crud.create_company(db, payload, owner_id=current_user.id)
    return _ok("Company profile created successfully", schemas.Company.model_validate(company))


@app.get(
    "/api/companies/profile",
    response_model=schemas.APIResponse[schemas.Company],
    tags=["Companies"],
)
def get_company_profile(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    company = _get_own_company(db, current_user)
    return _ok("Company profile retrieved successfully", schemas.Company.model_validate(company))


@app.put(
    "/api/companies/profile",
    response_model=schemas.APIResponse[schemas.Company],
    tags=["Companies"],
)
def update_company_profile(
    patch: schemas.CompanyUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    company = _get_own_company(db, current_user)

    fields = patch.model_dump(exclude_unset=True)
    if "social_links" in fields:
        fields["social_links"] = _coerce_social_links(fields["social_links"])

    try:
        updated = crud.update_company(db, company.id, fields)
    except crud.InvalidJSONField:
        raise HTTPException(
            status_code=400,
            detail="Invalid social links format. Please check your social media URLs.",
        )
    return _ok("Company profile updated successfully", schemas.Company.model_validate(updated))


def _replace_company_image(
    db: Session, current_user: models.User, payload: schemas.ImageUpload, kind: str
) -> str:
    """Upload a logo or banner, point the company at it, then drop the previous asset."""
    if not payload.image:
        raise HTTPException(status_code=400, detail="Image data is required")
    company = _get_own_company(db, current_user)

    if kind == "logo":
        folder, transformation = "company_logos", media.LOGO_TRANSFORMATION
    else:
        folder, transformation = "company_banners", media.BANNER_TRANSFORMATION

    previous_public_id = getattr(company, f"{kind}_public_id")
    asset = media.upload_image(payload.image, folder=folder, transformation=transformation)
    crud.update_company(
        db,
        company.id,
        {f"{kind}_url": asset.secure_url, f"{kind}_public_id": asset.public_id},
    )

    if previous_public_id and previous_public_id != asset.public_id:
        media.delete_image_quietly(previous_public_id)
    return asset.secure_url


@app.post(
    "/api/companies/upload-logo",
    response_model=schemas.APIResponse[schemas.UploadedImage],
    tags=["Companies"],
)
def upload_logo(
    payload: schemas.ImageUpload,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    url = _replace_company_image(db, current_user, payload, "logo")
    return _ok("Logo uploaded successfully", schemas.UploadedImage(url=url))


@app.post(
    "/api/companies/upload-banner",
    response_model=schemas.APIResponse[schemas.UploadedImage],
    tags=["Companies"],
)
def upload_banner(
    payload: schemas.ImageUpload,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    url = _replace_company_image(db, current_user, payload, "banner")
    return _ok("Banner uploaded successfully", schemas.UploadedImage(url=url))


@app.get(
    "/api/companies",
    response_model=schemas.APIResponse[List[schemas.Company]],
    tags=["Companies"],
)
def list_companies(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    companies = [schemas.Company.model_validate(c) for c in crud.get_all_companies(db)]
    return _ok("Companies retrieved successfully", companies)


def _get_owned_company(db: Session, company_id: int, current_user: models.User) -> models.Company:
    company = crud.get_company_by_id(db, company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    if company.owner_id != current_user.id:
        raise HTTPException(status_code=403, detail="Access denied")
    return company


@app.get(
    "/api/companies/{company_id}",
    response_model=schemas.APIResponse[schemas.Company],
    tags=["Companies"],
)
def get_company(
    company_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    company = crud.get_company_by_id(db, company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return _ok("Company retrieved successfully", schemas.Company.model_validate(company))


@app.put(
    "/api/companies/{company_id}",
    response_model=schemas.APIResponse[schemas.Company],
    tags=["Companies"],
)
def update_company(
    company_id: int,
    patch: schemas.CompanyUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _get_owned_company(db, company_id, current_user)
    fields = patch.model_dump(exclude_unset=True)
    if "social_links" in fields:
        fields["social_links"] = _coerce_social_links(fields["social_links"])
    updated = crud.update_company(db, company_id, fields)
    return _ok("Company updated successfully", schemas.Company.model_validate(updated))


@app.delete(
    "/api/companies/{company_id}",
    response_model=schemas.APIResponse[schemas.Company],
    tags=["Companies"],
)
def delete_company(
    company_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    company = _get_owned_company(db, company_id, current_user)
    asset_ids = [company.logo_public_id, company.banner_public_id]

    # Row first, assets second
    deleted = crud.delete_company(db, company_id)
    for public_id in asset_ids:
        media.delete_image_quietly(public_id)
    return _ok("Company deleted successfully", schemas.Company.model_validate(deleted))


# --- Job Endpoints --- #
def _get_owned_job(db: Session, job_id: int, current_user: models.User) -> models.Job:
    """Row ownership check: the job must belong to the caller's company."""
    job = crud.get_job(db, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    company = crud.get_company_by_owner_id(db, current_user.id)
    if not company or company.id != job.company_id:
        raise HTTPException(status_code=403, detail="Access denied")
    return job


@app.post(
    "/api/jobs",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.APIResponse[schemas.Job],
    tags=["Jobs"],
)
def create_job(
    payload: schemas.JobCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    company = crud.get_company_by_owner_id(db, current_user.id)
    if not company:
        raise HTTPException(
            status_code=404,
            detail="Company profile not found. Please complete your company profile first.",
        )
    job = crud.create_job(db, payload, company_id=company.id)
    return _ok("Job posted successfully", schemas.Job.model_validate(job))


@app.get("/api/jobs", response_model=schemas.APIResponse[List[schemas.Job]], tags=["Jobs"])
def list_jobs(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    company = _get_own_company(db, current_user)
    jobs = crud.get_jobs_by_company_id(db, company.id)
    return _ok("Jobs retrieved successfully", [schemas.Job.model_validate(j) for j in jobs])


@app.get(
    "/api/jobs/recent", response_model=schemas.APIResponse[List[schemas.Job]], tags=["Jobs"]
)
def list_recent_jobs(
    limit: int = Query(5, ge=1, le=50),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    company = _get_own_company(db, current_user)
    jobs = crud.get_recent_jobs(db, company.id, limit=limit)
    return _ok("Jobs retrieved successfully", [schemas.Job.model_validate(j) for j in jobs])


@app.get("/api/jobs/{job_id}", response_model=schemas.APIResponse[schemas.Job], tags=["Jobs"])
def get_job(
    job_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    job = _get_owned_job(db, job_id, current_user)
    return _ok("Job retrieved successfully", schemas.Job.model_validate(job))


@app.put("/api/jobs/{job_id}", response_model=schemas.APIResponse[schemas.Job], tags=["Jobs"])
def update_job(
    job_id: int,
    patch: schemas.JobUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _get_owned_job(db, job_id, current_user)
    job = crud.update_job(db, job_id, patch.model_dump(exclude_unset=True))
    return _ok("Job updated successfully", schemas.Job.model_validate(job))


@app.delete("/api/jobs/{job_id}", response_model=schemas.APIResponse[None], tags=["Jobs"])
def delete_job(
    job_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _get_owned_job(db, job_id, current_user)
    crud.delete_job(db, job_id)
    return _ok("Job deleted successfully")


@app.put(
    "/api/jobs/{job_id}/status", response_model=schemas.APIResponse[schemas.Job], tags=["Jobs"]
)
def update_job_status(
    job_id: int,
    payload: schemas.JobStatusUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if payload.status not in schemas.JOB_STATUSES:
        raise HTTPException(
            status_code=400,
            detail="Invalid status. Valid statuses are: pending, active, closed",
        )
    _get_owned_job(db, job_id, current_user)
    job = crud.update_job_status(db, job_id, payload.status)
    return _ok("Job status updated successfully", schemas.Job.model_validate(job))


@app.post(
    "/api/jobs/{job_id}/apply", response_model=schemas.APIResponse[schemas.Job], tags=["Jobs"]
)
def apply_to_job(job_id: int, db: Session = Depends(get_db)):
    """Public endpoint. Every call counts as a new application."""
    if not crud.get_job(db, job_id):
        raise HTTPException(status_code=404, detail="Job not found")
    job = crud.increment_applicants_count(db, job_id)
    logger.info("Application submitted", job_id=job_id, applicants_count=job.applicants_count)
    return _ok("Application submitted successfully", schemas.Job.model_validate(job))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=3001, reload=False)
