import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    ENV_NAME = "production"
    TESTING = False

    # document store
    STORE_BACKEND = os.environ.get("STORE_BACKEND", "file")
    DATABASE_PATH = os.environ.get("DATABASE_PATH", "database.json")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///rideshare.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    STORE_DOCUMENT_KEY = os.environ.get("STORE_DOCUMENT_KEY", "rideshare")
    # "reset" starts with an empty dataset when the document can't be read, "fail" aborts startup
    STORE_LOAD_FAILURE = os.environ.get("STORE_LOAD_FAILURE", "reset")

    ADMIN_TOKEN = os.environ.get("ADMIN_TOKEN")
    BOT_TOKEN = os.environ.get("BOT_TOKEN")
    APP_URL = os.environ.get("APP_URL")
    CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

    RIDES_TIMEZONE = os.environ.get("RIDES_TIMEZONE", "UTC")
    EXPIRY_GRACE_MINUTES = int(os.environ.get("EXPIRY_GRACE_MINUTES", 20))
    SWEEP_ENABLED = _flag("SWEEP_ENABLED", True)
    SWEEP_INTERVAL_SECONDS = int(os.environ.get("SWEEP_INTERVAL_SECONDS", 300))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class StagingConfig(Config):
    ENV_NAME = "staging"
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")
    SQLALCHEMY_ECHO = True


class TestingConfig(Config):
    ENV_NAME = "testing"
    TESTING = True
    STORE_BACKEND = "memory"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    ADMIN_TOKEN = "test-admin-token"
    BOT_TOKEN = None
    APP_URL = "http://localhost:3000"
    CORS_ORIGINS = ["*"]
    RIDES_TIMEZONE = "UTC"
    EXPIRY_GRACE_MINUTES = 20
    SWEEP_ENABLED = False
    LOG_LEVEL = "DEBUG"


def get_config(env=None):
    env = env or os.environ.get("FLASK_ENV", "production")
    if env == "staging":
        return StagingConfig
    if env == "testing":
        return TestingConfig
    return Config
