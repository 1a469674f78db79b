# backend/rentpos/config.py
from __future__ import annotations
import os
from decimal import Decimal


def _csv(value: str) -> set[str]:
    return {item.strip() for item in value.split(",") if item.strip()}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/rentpos.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # optional alternative location
        "sqlite:///rentpos.sqlite3",  # default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Pricing rates (Decimal so money math stays exact)
    TAX_RATE = Decimal(os.environ.get("TAX_RATE", "0.06"))
    COUPON_DISCOUNT_RATE = Decimal(os.environ.get("COUPON_DISCOUNT_RATE", "0.10"))
    LATE_FEE_RATE = Decimal(os.environ.get("LATE_FEE_RATE", "0.10"))

    # Store I/O bounds
    STORE_TIMEOUT_SECONDS = float(os.environ.get("STORE_TIMEOUT_SECONDS", "5"))
    LOOKUP_RETRY_ATTEMPTS = int(os.environ.get("LOOKUP_RETRY_ATTEMPTS", "3"))
    LOOKUP_RETRY_BACKOFF_SECONDS = float(os.environ.get("LOOKUP_RETRY_BACKOFF_SECONDS", "0.1"))

    CORS_ALLOWED_ORIGINS = _csv(os.environ.get(
        "CORS_ALLOWED_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000",
    ))

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
