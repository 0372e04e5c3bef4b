# config.py
import os
from dotenv import load_dotenv

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
load_dotenv(dotenv_path=os.path.join(BASE_DIR, ".env"))


def _flag(name, default="false"):
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "y", "on"}


class Config:
    # Secret must exist for signing session and reset tokens
    SECRET_KEY = os.environ.get("FLASK_SECRET") or "dev-secret-change-me"
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URI", f"sqlite:///{os.path.join(BASE_DIR, 'app.db')}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AUTO_CREATE_TABLES = _flag("AUTO_CREATE_TABLES", "true")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Tokens
    SESSION_MAX_AGE = int(os.environ.get("SESSION_MAX_AGE", str(7 * 24 * 3600)))
    RESET_MAX_AGE = int(os.environ.get("RESET_MAX_AGE", "3600"))

    # Rate limiting (Flask-Limiter reads RATELIMIT_*)
    RATELIMIT_ENABLED = _flag("RATELIMIT_ENABLED", "true")
    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")
    LOGIN_RATE_LIMIT = os.environ.get("LOGIN_RATE_LIMIT", "10 per minute")

    # Credentials
    PASSWORD_DIGITS = int(os.environ.get("PASSWORD_DIGITS", "4"))
    USERNAME_ATTEMPTS = int(os.environ.get("USERNAME_ATTEMPTS", "10"))
    # Legacy QR payloads carried the plaintext password; off unless explicitly enabled
    QR_EMBED_PASSWORD = _flag("QR_EMBED_PASSWORD", "false")

    # Mail (delivery skipped when MAIL_SERVER is empty)
    MAIL_SERVER = os.environ.get("MAIL_SERVER", "")
    MAIL_PORT = int(os.environ.get("MAIL_PORT", "465"))
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME", "")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD", "")
    MAIL_USE_SSL = _flag("MAIL_USE_SSL", "true")
    MAIL_SENDER = os.environ.get("MAIL_SENDER") or os.environ.get("MAIL_USERNAME", "")

    SCHOOL_NAME = os.environ.get("SCHOOL_NAME", "FG School")
    FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    RATELIMIT_ENABLED = False
    MAIL_SERVER = ""
    LOG_LEVEL = "DEBUG"
