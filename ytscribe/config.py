"""
Configuration settings for the ytscribe transcript service.
"""

import os
from pathlib import Path
from dotenv import load_dotenv


# Ensure environment variables are loaded
load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Base configuration class."""

    # Application info
    APP_NAME = "ytscribe"
    APP_VERSION = "0.2.0"

    # Directories
    BASE_DIR = Path(__file__).resolve().parent.parent.absolute()
    LOGS_DIR = BASE_DIR / "logs"

    DEBUG = _env_bool("DEBUG")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Cache store; in-memory when unset
    REDIS_URL = os.getenv("REDIS_URL")

    # Caption sources
    DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "en")
    COOKIES_FILE = Path(os.getenv("COOKIES_FILE", BASE_DIR / "all_cookies.txt"))
    YTDLP_BINARY = os.getenv("YTDLP_BINARY", "yt-dlp")
    JS_RUNTIME = os.getenv("JS_RUNTIME", "deno")
    YTDLP_TIMEOUT = float(os.getenv("YTDLP_TIMEOUT", "120"))
    HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "20"))

    # Summary model endpoints
    MODEL_ENDPOINTS = {
        "chatgpt": os.getenv("CHATGPT_ENDPOINT_URL"),
        "deepseek": os.getenv("DEEPSEEK_ENDPOINT_URL"),
        "anthropic": os.getenv("ANTHROPIC_ENDPOINT_URL"),
    }
    DEFAULT_SUMMARY_MODEL = os.getenv("DEFAULT_SUMMARY_MODEL", "chatgpt")
    MODEL_API_KEY = os.getenv("MODEL_API_KEY")
    MODEL_SHARED_SECRET = os.getenv("MODEL_SHARED_SECRET")
    MODEL_TIMEOUT = float(os.getenv("MODEL_TIMEOUT", "120"))
    MODEL_RETRY_ATTEMPTS = int(os.getenv("MODEL_RETRY_ATTEMPTS", "3"))
    MODEL_RETRY_BASE_DELAY = float(os.getenv("MODEL_RETRY_BASE_DELAY", "1.0"))

    # Server
    PORT = int(os.getenv("PORT", "3004"))
    REGION = os.getenv("REGION") or os.getenv("FLY_REGION") or "unknown"

    @classmethod
    def initialize(cls):
        """Initialize the application configuration."""
        cls.LOGS_DIR.mkdir(parents=True, exist_ok=True)

        # Validate the collaborators the caption sources depend on
        if not cls.COOKIES_FILE.exists():
            print(f"WARNING: cookie file not found at {cls.COOKIES_FILE}.")
            print("The yt-dlp and scrape caption sources will run without session cookies.")

        if not any(cls.MODEL_ENDPOINTS.values()):
            print("WARNING: no summary model endpoint configured.")
            print("Set CHATGPT_ENDPOINT_URL, DEEPSEEK_ENDPOINT_URL or ANTHROPIC_ENDPOINT_URL.")


class DevelopmentConfig(Config):
    """Development configuration."""

    DEBUG = _env_bool("DEBUG", True)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class ProductionConfig(Config):
    """Production configuration."""

    DEBUG = _env_bool("DEBUG", False)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


# Determine which configuration to use based on environment
def get_config():
    """Get the appropriate configuration based on environment."""
    env = os.getenv("ENVIRONMENT", "development").lower()
    if env == "production":
        return ProductionConfig
    else:
        return DevelopmentConfig


# Create a config instance
config = get_config()
