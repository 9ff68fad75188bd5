"""Configuration settings for the account service."""

import os
import secrets
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./account_service.db")

    # JWT
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    SESSION_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("SESSION_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))
    RESET_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "60"))

    # Passwords
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "10"))

    # Profile pictures
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
    MAX_AVATAR_SIZE_MB: int = int(os.getenv("MAX_AVATAR_SIZE_MB", "2"))

    # Password reset delivery
    RESET_URL_BASE: str = os.getenv("RESET_URL_BASE", "http://localhost:8000/reset-password")

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

    def __init__(self) -> None:
        self.secret_generated = not self.JWT_SECRET_KEY
        if self.secret_generated:
            self.JWT_SECRET_KEY = secrets.token_urlsafe(32)

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        warnings = []
        if self.secret_generated:
            warnings.append("JWT_SECRET_KEY is not set - using auto-generated key (not persistent across restarts)")
        if self.BCRYPT_ROUNDS < 4 or self.BCRYPT_ROUNDS > 31:
            warnings.append(f"BCRYPT_ROUNDS={self.BCRYPT_ROUNDS} is outside bcrypt's supported range 4-31")
        if self.APP_ENV == "production" and self.DATABASE_URL.startswith("sqlite"):
            warnings.append("Using SQLite in production")
        return warnings


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
