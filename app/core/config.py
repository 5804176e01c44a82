import os

from dotenv import load_dotenv
from pydantic_settings import BaseSettings


load_dotenv()


def _read_secret(env_var: str, default: str = "") -> str:
    """Read secret from environment variable or file path (for Cloud Run secrets)"""
    value = os.getenv(env_var, default)

    # If value looks like a file path and exists, read the file
    # This handles Cloud Run's --set-secrets behavior
    if value and os.path.exists(value):
        try:
            with open(value) as f:
                return f.read().strip()
        except OSError:
            return default

    return value


class Settings(BaseSettings):
    APP_TITLE: str = "course-completion-api"
    APP_DESCRIPTION: str = "Availability-based course completion criteria"
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"

    # Default to localhost only - set proper origins in production
    ALLOW_ORIGINS: str = _read_secret(
        "ALLOW_ORIGINS", "http://localhost:3000,http://localhost:8000"
    )

    # Firebase - credentials file path (works for both local and Cloud Run)
    GOOGLE_APPLICATION_CREDENTIALS: str = os.getenv(
        "GOOGLE_APPLICATION_CREDENTIALS", "firebase_key.json"
    )
    FIRESTORE_DATABASE_ID: str = "(default)"

    # Completion times are backdated by this many seconds when the
    # reconciliation job marks users complete
    COMPLETION_BACKDATE_SECONDS: int = 3000

    def __repr__(self):
        """Override __repr__ to prevent logging sensitive information"""
        return f"Settings(APP_TITLE='{self.APP_TITLE}', HOST='{self.HOST}', PORT={self.PORT})"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.ALLOW_ORIGINS.split(",")]

    class Config:
        case_sensitive = True


settings = Settings()
