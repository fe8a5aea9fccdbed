# backend/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./database_materials.db"

    FRONTEND_URL: str = ""

    # Blob storage for product images, withdrawal photos and signatures
    UPLOAD_DIR: str = "static/uploads"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # Dashboard defaults
    LOW_STOCK_THRESHOLD: int = 10
    RECENT_WITHDRAWALS_LIMIT: int = 5

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=str(env_path), extra="ignore")

settings = Settings()
