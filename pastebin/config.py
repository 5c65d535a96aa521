"""
Configuration module for Pastebin Lite.
Loads environment variables and provides config objects.
"""
import os
from functools import lru_cache

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self, **overrides):
        self.REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
        self.DEBUG: bool = _env_flag("DEBUG", "False")
        # Fixed public base URL for share links; empty means derive from request headers
        self.APP_DOMAIN: str = os.getenv("APP_DOMAIN", "")
        self.TEST_MODE: bool = _env_flag("TEST_MODE", "0")
        self.MEMORY_FALLBACK: bool = _env_flag("MEMORY_FALLBACK", "0")
        self.MAX_DECREMENT_RETRIES: int = int(os.getenv("MAX_DECREMENT_RETRIES", "100"))
        self.KEY_EXPIRY_GRACE_SECONDS: int = int(os.getenv("KEY_EXPIRY_GRACE_SECONDS", "60"))
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if self.DEBUG else "INFO").upper()

        for name, value in overrides.items():
            if not hasattr(self, name):
                raise AttributeError(f"Unknown setting: {name}")
            setattr(self, name, value)

    @property
    def uses_memory_store(self) -> bool:
        """True when REDIS_URL explicitly selects the in-memory store."""
        return self.REDIS_URL.startswith("memory://")


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, read once from the environment."""
    return Settings()
