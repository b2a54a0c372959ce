"""Application configuration"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # Supabase (Postgres holding the *_submissions tables)
    supabase_url: str
    supabase_service_role_key: str
    db_max_retries: int = 3

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # File uploads
    upload_dir: str = "uploads"
    upload_url_prefix: str = "/uploads"
    max_upload_bytes: int = 5 * 1024 * 1024
    allowed_upload_types: list[str] = ["image/jpeg", "image/png", "application/pdf"]

    # Seconds a success notice stays visible after a submission
    success_notice_seconds: float = 5.0

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
