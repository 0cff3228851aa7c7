from decimal import Decimal
from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # API Settings
    PROJECT_NAME: str = "Mistock API"
    API_V1_STR: str = "/api/v1"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "Sales ledger, purchase request and settlement API"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Storage: "memory" keeps everything in the app instance, "mongo" uses motor
    STORAGE_BACKEND: Literal["memory", "mongo"] = "memory"
    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "mistock"

    # JWT (tokens are issued by the identity provider)
    JWT_SECRET: str = "change-this-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Money
    CURRENCY_SYMBOL: str = "₦"
    DEFAULT_TAX_RATE_PERCENT: Decimal = Decimal("0")

    # Settlements: "clamp" floors the balance at zero, "reject" refuses the payment
    OVERPAYMENT_POLICY: Literal["clamp", "reject"] = "clamp"

    # Per-id write lock wait before failing with a conflict
    LOCK_TIMEOUT_SECONDS: float = 5.0

    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

settings = Settings()
