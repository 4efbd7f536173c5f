"""Application configuration settings."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Final

BASE_DIR: Final[Path] = Path(__file__).resolve().parent.parent
DATA_DIR: Final[Path] = BASE_DIR / "data"

DATABASE_URL: Final[str] = os.getenv(
    "DATABASE_URL", f"sqlite:///{(DATA_DIR / 'school_records.db').as_posix()}"
)
SQLALCHEMY_ECHO: Final[bool] = os.getenv("SQLALCHEMY_ECHO") == "1"

# bcrypt cost factor used by bootstrap scripts before passwords reach the store.
PASSWORD_HASH_ROUNDS: Final[int] = int(os.getenv("PASSWORD_HASH_ROUNDS", 12))

LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO")
APP_ENV: Final[str] = os.getenv("APP_ENV", "development")
