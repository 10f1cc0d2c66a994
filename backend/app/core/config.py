"""Module: config."""

from pydantic_settings import BaseSettings


# Centralized runtime configuration loaded from environment variables.
class Settings(BaseSettings):
    # Primary SQLAlchemy connection string for the backend database.
    database_url: str = "sqlite:///./college_leave.db"

    # Days of leave each employee may take per calendar month, across all categories.
    monthly_leave_allowance: int = 5
    # When true an HOD only sees and reviews applications from their own department.
    reviewer_department_scope: bool = True

    # Bearer sessions expire this many hours after login.
    session_ttl_hours: int = 12

    # Fixed daily booking schedule: [start_hour, end_hour) in interval_minutes steps.
    slot_day_start_hour: int = 9
    slot_day_end_hour: int = 17
    slot_interval_minutes: int = 30

    # Seed departments, demo users and the slot schedule on an empty database.
    seed_default_data: bool = True

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    log_level: str = "INFO"

    # Configure pydantic-settings to also load values from local .env file.
    class Config:
        env_file = ".env"


# Global settings instance imported by app modules at runtime.
settings = Settings()
