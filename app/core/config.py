from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from typing import List, Optional

load_dotenv()

class Settings(BaseSettings):
    DATABASE_URL: str
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Redis settings (preference catalog cache, disabled when unset)
    REDIS_URL: Optional[str] = None
    PREFERENCE_CACHE_TTL_SECONDS: int = 600

    # Image uploads
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    BASE_URL: Optional[str] = None

    # Demo data import from OpenStreetMap
    OVERPASS_URL: str = "https://overpass-api.de/api/interpreter"
    OVERPASS_TIMEOUT_SECONDS: float = 30.0
    SEED_LIMIT: int = 20
    # south, west, north, east
    SEED_BBOX: str = "-6.3713,106.6486,-6.0835,106.9758"

    API_PREFIX: str = "/api/v1"
    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    PROJECT_NAME: str = "TripBook API"
    PROJECT_VERSION: str = "1.0.0"
    PROJECT_DESCRIPTION: str = "Trip publishing and booking API"

    PASSWORD_MIN_LENGTH: int = 6

    class Config:
        env_file = ".env"


settings = Settings()
