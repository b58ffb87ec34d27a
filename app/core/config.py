from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "THM Registration API"
    # Comma-separated origins for CORS. If empty, any origin is allowed (public registration form).
    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str
    DB_STATEMENT_TIMEOUT_MS: int = 15000
    DB_POOL_TIMEOUT_SECONDS: int = 10

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v
    REDIS_URL: str = "redis://localhost:6379/0"

    # ImgBB (transaction screenshot hosting)
    IMGBB_API_KEY: str = ""
    IMGBB_UPLOAD_URL: str = "https://api.imgbb.com/1/upload"
    IMGBB_TIMEOUT_SECONDS: int = 20

    # Google Sheets mirror. Service account JSON is passed inline, not as a file path.
    GOOGLE_SERVICE_ACCOUNT_KEY: str = ""
    GOOGLE_SHEET_ID: str = ""
    GOOGLE_SHEET_RANGE: str = "Sheet1!A:Q"
    SHEET_SYNC_BACKEND: str = "thread"  # thread|celery
    SHEET_SYNC_WORKERS: int = 2

    # Upload boundary
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024
    TICKET_ID_MAX_ATTEMPTS: int = 3

    # Admission control on POST /api/register
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_BACKEND: str = "memory"  # memory|redis
    RATE_LIMIT_MAX: int = 5
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60


settings = Settings()
