# config.py
import os
from dataclasses import dataclass

@dataclass
class Config:
    """Holds all application configuration."""
    CATALOG_BASE_URL: str = "http://localhost:8080"
    RESULT_LIMIT: int = 20
    SEARCH_PAGE: int = 0
    REQUEST_TIMEOUT: float = 10.0
    LOG_FILENAME: str = "movie_explorer.log"
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Builds a config, letting environment variables override the defaults."""
        config = cls()
        config.CATALOG_BASE_URL = os.getenv("CATALOG_BASE_URL", config.CATALOG_BASE_URL).rstrip("/")
        config.REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", config.REQUEST_TIMEOUT))
        config.LOG_LEVEL = os.getenv("LOG_LEVEL", config.LOG_LEVEL).upper()
        config.LOG_DIR = os.getenv("LOG_DIR", config.LOG_DIR)
        return config
