from typing import List, Optional
from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = "Leafora Admin"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:5173",  # Admin dashboard development
        "https://leafora-web-client.vercel.app",  # Production dashboard
    ]

    # Firebase Settings
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Service account JSON; falls back to ADC
    FIREBASE_PROJECT_ID: Optional[str] = None
    USERS_COLLECTION: str = "users"

    # User Management
    DEFAULT_TEMP_PASSWORD: str = "TempPassword123!"
    DEFAULT_PAGE_SIZE: int = 10
    RECENT_USERS_LIMIT: int = 5

    # Rate Limiting (requests per minute)
    RATE_LIMIT_ADMIN_LOGIN: int = 5
    RATE_LIMIT_DEFAULT: int = 60
    SUSPICIOUS_IP_THRESHOLD: int = 5  # failed logins before blocking
    IP_BLOCK_DURATION: int = 15  # minutes

    class Config:
        env_file = ".env"
        case_sensitive = True

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
