"""
backend/score_gateway/config.py

Purpose:
    Central settings loading for the gateway provider and its pipe routes.

Dependencies:
    - pydantic-settings
    - pathlib
"""

from pathlib import Path

from pydantic_settings import BaseSettings

# Prefer backend/.env, fallback to project-root .env.
_BACKEND_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
_ROOT_ENV_FILE = Path(__file__).resolve().parent.parent.parent / ".env"


class Settings(BaseSettings):
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB: str = "score_gateway"
    ENCRYPTION_KEY: str = ""
    ENCRYPTION_KEY_OLD: str = ""  # Set during rotation; cleared after re-encryption
    BACKEND_CORS_ORIGINS: str = "http://localhost:5173"

    # Address of this provider in the leasing protocol; config lookups are keyed by it
    PROVIDER_ADDRESS: str = ""

    # Outbound prediction API
    PREDICTION_REQUEST_TIMEOUT_SECONDS: float = 120.0

    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_file": (str(_BACKEND_ENV_FILE), str(_ROOT_ENV_FILE)),
        "extra": "ignore",
    }


settings = Settings()
