# goaltracker/core/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the project root directory (where .env should be located)
BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra="ignore"
    )

    # App Configuration
    APP_NAME: str = "Goal Tracker API"
    DEBUG: bool = False
    VERSION: str = "1.0.0"

    # Database Configuration (goal and profile documents)
    DATABASE_URL: str = "sqlite+aiosqlite:///./goaltracker.db"

    # Session cookie signing (OAuth state)
    SECRET_KEY: str = "change-me"

    # CORS Configuration
    FRONTEND_URL: str = "http://localhost:3000"

    # Firebase web configuration - opaque values, never parsed
    FIREBASE_API_KEY: str = ""
    FIREBASE_AUTH_DOMAIN: str = ""
    FIREBASE_PROJECT_ID: str = ""
    FIREBASE_STORAGE_BUCKET: str = ""
    FIREBASE_MESSAGING_SENDER_ID: str = ""
    FIREBASE_APP_ID: str = ""

    # Point this at the Auth emulator for local development
    IDENTITY_TOOLKIT_URL: str = "https://identitytoolkit.googleapis.com/v1"
    IDENTITY_REQUEST_TIMEOUT_SECONDS: float = 10.0

    # Google OAuth Configuration
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_REDIRECT_URI: str = "http://localhost:8000/api/v1/auth/google/callback"

    # Goal subscription timing
    GOALS_SUBSCRIBE_TIMEOUT_SECONDS: float = 10.0
    GOALS_ERROR_CLEAR_SECONDS: float = 5.0

    # Optional: Environment
    ENVIRONMENT: str = "development"

    @property
    def is_sqlite(self) -> bool:
        """Check if we're using a local SQLite database"""
        return self.DATABASE_URL.startswith("sqlite")

# Create a global settings instance
settings = Settings()
