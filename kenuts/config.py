# /kenuts/config.py
from __future__ import annotations

import os

from pydantic import BaseModel


class Settings(BaseModel):
    API_KEY: str | None = os.getenv("API_KEY")
    LOCALE: str = os.getenv("LOCALE", "en")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Client
    DEFAULT_PORT: int = int(os.getenv("DEFAULT_PORT", "6969"))
    CONNECT_TIMEOUT_SECONDS: float = float(os.getenv("CONNECT_TIMEOUT_SECONDS", "5.0"))
    READ_TIMEOUT_SECONDS: float = float(os.getenv("READ_TIMEOUT_SECONDS", "10.0"))  # <= 0 disables
    MAX_BYTES: int = int(os.getenv("MAX_BYTES", "2097152"))  # 2 MB
    ENCODING: str = os.getenv("ENCODING", "utf-8")

    # Reference server
    SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
    SERVER_PORT: int = int(os.getenv("SERVER_PORT", "6969"))
    SERVER_INDEX_FILE: str = os.getenv("SERVER_INDEX_FILE", "./index.html")
    SERVER_READ_TIMEOUT_SECONDS: float = float(os.getenv("SERVER_READ_TIMEOUT_SECONDS", "5.0"))
    SERVER_WRITE_TIMEOUT_SECONDS: float = float(os.getenv("SERVER_WRITE_TIMEOUT_SECONDS", "5.0"))
    SERVER_MAX_HEADER_LINES: int = int(os.getenv("SERVER_MAX_HEADER_LINES", "200"))


settings = Settings()
