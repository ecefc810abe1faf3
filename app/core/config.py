from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # API Settings
    PROJECT_NAME: str = "School Fees API"
    API_V1_STR: str = "/api/v1"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "Student fee aggregation, payments and receipts"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # MongoDB
    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "school_fees"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # JWT
    JWT_SECRET: str = "change-this-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Payments
    OVERPAYMENT_POLICY: str = "discard"  # discard | reject
    RECEIPT_NUMBER_PREFIX: str = "RCP"
    DEFAULT_PAYMENT_METHOD: str = "cash"

    # Reminders
    SCHOOL_NAME: str = "EduCare"
    REMINDER_DAYS_BEFORE_DUE: List[int] = [7, 1]
    REMINDER_OVERDUE_INTERVAL_DAYS: int = 3

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

settings = Settings()
