from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # `.env.prod` takes priority over `.env`
        env_file=(".env", ".env.prod"),
        extra="ignore",
    )

    # "development" echoes raw error messages in 500 responses
    app_env: str = "production"

    # Token issuance
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 90

    # Comma-separated list of allowed browser origins
    cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173"

    # Reject malformed JSON strings for social_links / skills instead of storing them raw
    strict_json_fields: bool = False

    # Firebase (federated login). Optional for local dev
    firebase_project_id: Optional[str] = None
    firebase_api_key: Optional[str] = None

    # Cloudinary image hosting
    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() == "development"

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
