"""
Application Configuration for GoGo Backend
"""
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path

# Get the project root directory (where .env file is located)
PROJECT_ROOT = Path(__file__).parent.parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database Configuration
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: int = 5432
    DATABASE_NAME: str = "gogo"
    DATABASE_USERNAME: str = "postgres"
    DATABASE_PASSWORD: str = "postgres"  # Default for development
    DATABASE_URL_OVERRIDE: Optional[str] = None

    @property
    def DATABASE_URL(self) -> str:
        """Construct database URL from components"""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return (
            f"postgresql://{self.DATABASE_USERNAME}:{self.DATABASE_PASSWORD}"
            f"@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"
        )

    # JWT Configuration
    JWT_SECRET_KEY: str = "dev-secret-key-change-in-production"  # Default for development
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days

    # Firebase Configuration (push notifications only)
    GOOGLE_APPLICATION_CREDENTIALS: str = "firebase-admin-sdk.json"

    # Image storage
    S3_BUCKET_NAME: str = "gogo-images"
    AWS_REGION: str = "ap-southeast-1"
    IMAGE_ROOT_FOLDER: str = "gogo"

    # Reverse geocoding (Nominatim)
    GEOCODING_URL: str = "https://nominatim.openstreetmap.org/reverse"
    GEOCODING_USER_AGENT: str = "GoGoApp/1.0 (contact@gogo.app)"
    GEOCODING_REFERER: str = "https://gogo.app"
    GEOCODING_ACCEPT_LANGUAGE: str = "vi,en"
    GEOCODING_TIMEOUT_SECONDS: float = 10.0
    GEOCODING_CACHE_TTL_SECONDS: float = 120.0
    GEOCODING_CACHE_MAX_ENTRIES: int = 100
    GEOCODING_MIN_INTERVAL_SECONDS: float = 2.0
    GEOCODING_BLOCK_SECONDS: float = 3600.0

    # API Configuration
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 3000
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "GoGo API"
    DEBUG: bool = True
    FRONTEND_URL: str = "http://localhost:3000"

    # CORS Configuration
    ALLOWED_ORIGINS: str = "*"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from string"""
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    # Environment
    ENVIRONMENT: str = "development"

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


# Global settings instance
settings = Settings()
