import os
import pathlib
from typing import List

from dotenv import load_dotenv

# Load environment variables from the project .env file (if any)
env_path = pathlib.Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _get_list(name: str, default: str = "") -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    """Application settings, read once from the environment"""

    def __init__(self):
        # Environment
        self.ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
        self.DEBUG = _get_bool("DEBUG", self.ENVIRONMENT == "development")

        # Project metadata
        self.PROJECT_NAME = os.getenv("PROJECT_NAME", "Rally Tournament API")
        self.PROJECT_DESCRIPTION = os.getenv(
            "PROJECT_DESCRIPTION",
            "API for scheduling group matches and scoring them live",
        )
        self.PROJECT_VERSION = os.getenv("PROJECT_VERSION", "1.0.0")
        self.API_V1_STR = os.getenv("API_V1_STR", "/api/v1")
        self.CORS_ORIGINS = _get_list("CORS_ORIGINS", "http://localhost:3000")

        # MongoDB configuration
        self.MONGO_URI = os.getenv(
            f"MONGO_URI_{self.ENVIRONMENT.upper()}",
            os.getenv("MONGO_URI", "mongodb://localhost:27017/rally_tournament"),
        )
        self.MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "rally_tournament")

        # Token verification
        self.SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
        self.ALGORITHM = os.getenv("ALGORITHM", "HS256")
        self.ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

        # Logging
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.LOG_FORMAT = os.getenv(
            "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        self.LOG_DATE_FORMAT = os.getenv("LOG_DATE_FORMAT", "%Y-%m-%d %H:%M:%S")
        self.LOG_FILE = os.getenv("LOG_FILE") or None

        # Scheduling
        self.SHUFFLE_GROUP_SCHEDULE = _get_bool("SHUFFLE_GROUP_SCHEDULE", False)


settings = Settings()
