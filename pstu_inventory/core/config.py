# pstu_inventory/core/config.py
import os
from typing import List
from pydantic import BaseModel
from dotenv import load_dotenv
from urllib.parse import quote_plus

load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [v.strip() for v in (value or "").split(",") if v.strip()]


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


class Settings(BaseModel):
    PROJECT_NAME: str = os.getenv("PROJECT_NAME",
                                  "PSTU Inventory Management System")
    API_V1_STR: str = os.getenv("API_V1_STR", "/api")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS (env takes priority)
    BACKEND_CORS_ORIGINS: List[str] = _split_csv(
        os.getenv(
            "CORS_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000",
        ))

    # ---------- MySQL ----------
    MYSQL_HOST: str = os.getenv("MYSQL_HOST", "localhost")
    MYSQL_PORT: int = int(os.getenv("MYSQL_PORT", "3306"))
    MYSQL_USER: str = os.getenv("MYSQL_USER", "inventory_user")
    MYSQL_PASSWORD: str = os.getenv("MYSQL_PASSWORD", "")
    MYSQL_DB: str = os.getenv("MYSQL_DB", "pstu_inventory")
    DB_DRIVER: str = os.getenv("DB_DRIVER", "pymysql")

    # DATABASE_URL wins when set (sqlite for local runs and tests)
    SQLALCHEMY_DATABASE_URI: str = os.getenv(
        "DATABASE_URL",
        f"mysql+{DB_DRIVER}://{quote_plus(MYSQL_USER)}:{quote_plus(MYSQL_PASSWORD)}"
        f"@{MYSQL_HOST}:{MYSQL_PORT}/{MYSQL_DB}?charset=utf8mb4",
    )

    # ---------- Security ----------
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-this")
    JWT_ALG: str = os.getenv("JWT_ALG", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "10"))
    PASSWORD_OTP_TTL_MINUTES: int = int(
        os.getenv("PASSWORD_OTP_TTL_MINUTES", "5"))

    # ---------- Email (Gmail defaults) ----------
    EMAIL_ENABLED: bool = _flag("EMAIL_ENABLED", "true")
    SMTP_HOST: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER: str = os.getenv("SMTP_USER", os.getenv("EMAIL_USER", ""))
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD",
                                   os.getenv("EMAIL_PASS", ""))
    SMTP_FROM: str = os.getenv("SMTP_FROM", "")
    SMTP_TLS: bool = _flag("SMTP_TLS", "true")
    # implicit TLS (port 465); takes precedence over SMTP_TLS
    SMTP_SSL: bool = _flag("SMTP_SSL", "false")
    ALERT_EMAIL: str = os.getenv("ALERT_EMAIL", "")

    # ---------- File storage ----------
    STORAGE_DIR: str = os.getenv("STORAGE_DIR", "./uploads")
    MEDIA_URL: str = os.getenv("MEDIA_URL", "/uploads")

    # ---------- Ledger ----------
    LEDGER_SIGNING_KEY: str = os.getenv(
        "LEDGER_SIGNING_KEY",
        os.getenv("BLOCKCHAIN_SIGNING_KEY",
                  "default-dev-key-change-in-production"))
    LEDGER_VERIFY_ENABLED: bool = _flag("LEDGER_VERIFY_ENABLED", "true")
    LEDGER_VERIFY_CRON_MINUTE: int = int(
        os.getenv("LEDGER_VERIFY_CRON_MINUTE", "0"))
    LEDGER_INITIAL_VERIFY_DELAY_SECONDS: int = int(
        os.getenv("LEDGER_INITIAL_VERIFY_DELAY_SECONDS", "5"))


settings = Settings()
