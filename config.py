from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database
    DATABASE_URL: str = "sqlite:///./hopalong.db"

    # JWT
    JWT_SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_DAYS: int = 30

    # Server / CORS
    PORT: int = 5000
    FRONTEND_URL: str = "http://localhost:3000"
    FRONTEND_URLS: str = ""  # comma separated extra origins

    # Rate limiting (per client, applied to /api/)
    RATE_LIMIT_WINDOW_SECONDS: int = 600
    RATE_LIMIT_MAX_REQUESTS: int = 100

    # Restrict registration to one email domain, e.g. "iitr.ac.in"
    ALLOWED_EMAIL_DOMAIN: str = ""

    LOG_PATH: str = ""

    @property
    def allowed_origins(self) -> List[str]:
        extra = [o.strip() for o in self.FRONTEND_URLS.split(",") if o.strip()]
        origins = []
        for origin in [self.FRONTEND_URL, "http://localhost:3001", *extra]:
            if origin not in origins:
                origins.append(origin)
        return origins


settings = Settings()
