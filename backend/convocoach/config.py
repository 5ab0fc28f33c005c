from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()

# backend/storage/convocoach.sqlite3
ROOT_DIR = Path(__file__).resolve().parents[1]
STORAGE_DIR = ROOT_DIR / "storage"
DEFAULT_DB_URL = f"sqlite:///{STORAGE_DIR / 'convocoach.sqlite3'}"


def _split_csv(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass(frozen=True)
class Settings:
    """Runtime settings, read from the environment (.env supported)."""

    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", DEFAULT_DB_URL))
    openai_api_key: str | None = field(default_factory=lambda: os.getenv("OPENAI_API_KEY"))
    feedback_model: str = field(default_factory=lambda: os.getenv("FEEDBACK_MODEL", "gpt-4o-mini"))
    feedback_temperature: float = field(
        default_factory=lambda: float(os.getenv("FEEDBACK_TEMPERATURE", "0.7"))
    )
    llm_timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    cors_origins: List[str] = field(
        default_factory=lambda: _split_csv(os.getenv("CORS_ORIGINS", "*"))
    )


settings = Settings()
