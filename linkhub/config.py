import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "default-secret-key")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{BASE_DIR / 'linkhub.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    DEFAULT_THEME = os.environ.get("DEFAULT_THEME", "dark")
    FEATURED_PROFILE_LIMIT = int(os.environ.get("FEATURED_PROFILE_LIMIT", "3"))
    PROFILE_SEARCH_LIMIT = int(os.environ.get("PROFILE_SEARCH_LIMIT", "20"))
    UI_MODE_COOKIE = os.environ.get("UI_MODE_COOKIE", "ui_mode")
    UI_MODE_COOKIE_MAX_AGE = int(
        os.environ.get("UI_MODE_COOKIE_MAX_AGE", str(60 * 60 * 24 * 365))
    )


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    LOG_LEVEL = "DEBUG"
