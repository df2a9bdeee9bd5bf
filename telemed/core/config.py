from pydantic_settings import BaseSettings
from typing import List
import os


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "TeleMed Connect"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    TESTING: bool = os.getenv("TESTING", "0").lower() in ("1", "true", "t", "yes", "y")

    # Hosted backend (REST + auth); defaults match a local development stack
    BACKEND_URL: str = "http://localhost:54321"
    BACKEND_ANON_KEY: str = ""
    BACKEND_TIMEOUT: float = 10.0
    # server-side cap on rows per response; paged reads use it as their page size
    BACKEND_MAX_ROWS: int = 1000

    # Tokens are issued by the backend; we only verify them
    BACKEND_JWT_SECRET: str = "super-secret-jwt-token-with-at-least-32-characters-long"
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"

    # Session cookies
    ACCESS_COOKIE_NAME: str = "telemed-access-token"
    REFRESH_COOKIE_NAME: str = "telemed-refresh-token"
    COOKIE_SECURE: bool = False

    # Redis (rate limiting of the auth forms)
    REDIS_URL: str = "redis://localhost:6379"
    RATE_LIMIT_MAX_REQUESTS: int = 10
    RATE_LIMIT_WINDOW_SECONDS: int = 3600

    # CORS / hosts
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8080", "http://testserver"]
    ALLOWED_HOSTS: List[str] = ["localhost", "127.0.0.1", "*.localhost", "testserver"]

    class Config:
        env_file = ".env"
        case_sensitive = True

# Create settings instance
settings = Settings()
