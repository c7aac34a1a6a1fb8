# app/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from functools import lru_cache

class Settings(BaseSettings):
    ENV: str = "development"
    DATA_DIR: Path = Path("data")  # where the collection files live
    USERS_FILE: str = "users.csv"
    PRODUCTS_FILE: str = "products.csv"
    CARTS_FILE: str = "carts.csv"
    THREADS_FILE: str = "threads.csv"
    GROOMING_FILE: str = "grooming.csv"
    HEALTHCARE_FILE: str = "healthcare.csv"
    PAYMENTS_FILE: str = "payments.csv"

    # comma-separated list of front-end origins
    ALLOWED_ORIGINS: str = (
        "http://localhost:5173,"
        "https://project-petverse.netlify.app,"
        "https://petverse-8f5b7.web.app"
    )

    PAYMENT_CURRENCY: str = "usd"
    LOG_LEVEL: str = "INFO"

    # Example .env:
    # DATA_DIR=./data
    # LOG_LEVEL=DEBUG

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def allowed_origins(self) -> list:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    def collection_files(self) -> dict:
        return {
            "users": self.USERS_FILE,
            "products": self.PRODUCTS_FILE,
            "carts": self.CARTS_FILE,
            "threads": self.THREADS_FILE,
            "grooming": self.GROOMING_FILE,
            "healthcare": self.HEALTHCARE_FILE,
            "payments": self.PAYMENTS_FILE,
        }

@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()

settings = get_settings()
