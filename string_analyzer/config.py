import logging
import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./strings.db"


class Settings(BaseModel):
    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = "INFO"
    port: int = 8000
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


def normalize_database_url(url: str) -> str:
    # Railway hands out "mysql://" URLs, SQLAlchemy expects "mysql+pymysql://"
    if url.startswith("mysql://"):
        return url.replace("mysql://", "mysql+pymysql://", 1)
    return url


def get_settings() -> Settings:
    """Build settings from the environment (and a local .env file, if any)"""
    if os.path.exists(".env"):
        load_dotenv()
        logger.info("Loading from .env file (local development)")

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        logger.warning(f"DATABASE_URL not found in environment, using {DEFAULT_DATABASE_URL}")
        database_url = DEFAULT_DATABASE_URL

    origins = os.getenv("CORS_ORIGINS", "*")

    return Settings(
        database_url=normalize_database_url(database_url),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        port=int(os.getenv("PORT", 8000)),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
    )
