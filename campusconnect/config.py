# campusconnect/config.py
from typing import List

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./campusconnect.db"
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: float = 60  # supports decimal durations

    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # Default admin created by the seed script
    SEED_ADMIN_EMAIL: str = "admin@campusconnect.local"
    SEED_ADMIN_PASSWORD: str = "change-me-please"

    class Config:
        env_file = ".env"

settings = Settings()
