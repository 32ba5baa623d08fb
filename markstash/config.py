import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent


def _split_domains(raw: str) -> frozenset[str]:
    return frozenset(
        part.strip().lower() for part in raw.split(",") if part.strip()
    )


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "default-secret-key")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{BASE_DIR / 'markstash.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BLOCKED_DOMAINS = _split_domains(
        os.environ.get("BLOCKED_DOMAINS", "yahoo.com,socket.io")
    )
    WHOIS_LOOKUP_URL = os.environ.get(
        "WHOIS_LOOKUP_URL", "https://api.whoisfreaks.com/v1.0/whois?domainName={url}"
    )
    PREVIEW_FETCH_TIMEOUT = float(os.environ.get("PREVIEW_FETCH_TIMEOUT", "10"))
    CONTENT_MAX_BYTES = int(os.environ.get("CONTENT_MAX_BYTES", "2500000"))
    DEFAULT_LIST_LIMIT = int(os.environ.get("DEFAULT_LIST_LIMIT", "50"))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    BLOCKED_DOMAINS = frozenset({"yahoo.com", "socket.io"})
    WHOIS_LOOKUP_URL = "https://whois.test/lookup?url={url}"
    PREVIEW_FETCH_TIMEOUT = 2.0
