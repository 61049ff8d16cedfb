"""
Configuration settings for the application
"""

import os
from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""

    # Database (local document store when Firebase is disabled)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./wedding_planner.db")
    USE_FIREBASE: bool = os.getenv("USE_FIREBASE", "false").lower() in ("1", "true", "yes")
    FIREBASE_CREDENTIALS_JSON: str | None = os.getenv("FIREBASE_CREDENTIALS_JSON")
    FIREBASE_CREDENTIALS_FILE: str | None = os.getenv("FIREBASE_CREDENTIALS_FILE")
    FIREBASE_CREDENTIALS_B64: str | None = os.getenv("FIREBASE_CREDENTIALS_B64")
    FIREBASE_STORAGE_BUCKET: str | None = os.getenv("FIREBASE_STORAGE_BUCKET")

    # Security
    # Accept "dev:<uid>:<email>" bearer tokens when Firebase Auth is not in use
    DEV_AUTH_ENABLED: bool = os.getenv("DEV_AUTH_ENABLED", "true").lower() in ("1", "true", "yes")

    # Application
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS
    ALLOW_ORIGINS: List[str] = ["*"]

    # File limits
    MAX_UPLOAD_SIZE: int = 25 * 1024 * 1024  # 25MB
    MAX_COVER_IMAGE_SIZE: int = 5 * 1024 * 1024  # 5MB

    # Rate limiting
    RATE_LIMIT_PER_MINUTE: int = 30

    # Guest import
    IMPORT_UNDO_SECONDS: int = 30

    # Transactional email (Resend)
    RESEND_API_KEY: str = os.getenv("RESEND_API_KEY", "")
    RESEND_FROM_EMAIL: str = os.getenv("RESEND_FROM_EMAIL", "updates@oneknot.app")
    RESEND_FROM_NAME: str = os.getenv("RESEND_FROM_NAME", "OneKnot Updates")

    # Invitation email templates (EmailJS)
    EMAILJS_SERVICE_ID: str = os.getenv("EMAILJS_SERVICE_ID", "")
    EMAILJS_TEMPLATE_ID: str = os.getenv("EMAILJS_TEMPLATE_ID", "")
    EMAILJS_PUBLIC_KEY: str = os.getenv("EMAILJS_PUBLIC_KEY", "")
    EMAILJS_PRIVATE_KEY: str = os.getenv("EMAILJS_PRIVATE_KEY", "")

    class Config:
        env_file = ".env"

settings = Settings()
