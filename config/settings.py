"""Settings configuration using pydantic-settings for environment variable management."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator
from dotenv import load_dotenv

load_dotenv(override=True)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "taskflow"

    JWT_ACCESS_SECRET: str = "dev-access-secret-change-in-production"
    JWT_REFRESH_SECRET: str = "dev-refresh-secret-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    BCRYPT_ROUNDS: int = 10

    REFRESH_COOKIE_NAME: str = "refreshToken"
    ENVIRONMENT: str = "development"
    CLIENT_URL: str = "http://localhost:3000"
    API_PREFIX: str = "/api/v1"

    APP_NAME: str = "TaskFlow"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def validate_bcrypt_rounds(cls, v):
        """bcrypt only accepts work factors between 4 and 31."""
        if not 4 <= v <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    @field_validator("API_PREFIX", mode="before")
    @classmethod
    def validate_api_prefix(cls, v):
        """Normalize the prefix to a leading slash and no trailing slash."""
        if isinstance(v, str):
            return "/" + v.strip().strip("/")
        return v

    @model_validator(mode="after")
    def validate_distinct_secrets(self):
        """Access and refresh tokens must never share a signing secret."""
        if self.JWT_ACCESS_SECRET == self.JWT_REFRESH_SECRET:
            raise ValueError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")
        return self

    @property
    def is_production(self) -> bool:
        """Whether the service runs with production hardening."""
        return self.ENVIRONMENT.strip().lower() == "production"

    @property
    def refresh_cookie_path(self) -> str:
        """Path the refresh cookie is scoped to."""
        return f"{self.API_PREFIX}/auth"

    @property
    def refresh_cookie_max_age(self) -> int:
        """Refresh cookie lifetime in seconds, matching the refresh token."""
        return self.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60


settings = Settings()
