from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    APP_NAME: str = "Therapy Records"
    VERSION: str = "1.0.0"

    DATABASE_URL: str = "sqlite:///./therapy_records.db"
    SQL_ECHO: bool = False

    # Medical report attachments
    REPORTS_DIR: str = "./medical_reports"
    ALLOWED_REPORT_EXTENSIONS: List[str] = [".pdf", ".jpg", ".jpeg", ".png"]

    LOG_LEVEL: str = "INFO"

    # Pre-populate a demo patient on startup (idempotent)
    SEED_DEMO_DATA: bool = False

    class Config:
        env_file = ".env"


settings = Settings()
