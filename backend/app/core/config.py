"""Application configuration.

Environment variables override all defaults. A backend/.env file is loaded
for local development when python-dotenv finds one.
"""

import os
from pathlib import Path
from typing import List


# Load .env for local development (safe no-op if not installed)
try:
    from dotenv import load_dotenv  # type: ignore

    _BACKEND_DIR = Path(__file__).resolve().parents[2]
    load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)
except ImportError:
    pass


def _csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings:
    # Document store backing database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./bizops.db")

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # CORS (specific origins only, no wildcards)
    CORS_ORIGINS: List[str] = _csv(
        os.getenv(
            "CORS_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000,http://localhost:9002,http://127.0.0.1:9002",
        )
    )

    # Groq API (must be set via .env, never in code)
    GROQ_API_KEY: str = os.getenv("GROQ_API_KEY", "")
    GROQ_TEXT_MODEL: str = os.getenv("GROQ_TEXT_MODEL", "llama-3.3-70b-versatile")
    GROQ_VISION_MODEL: str = os.getenv(
        "GROQ_VISION_MODEL", "meta-llama/llama-4-scout-17b-16e-instruct"
    )
    GROQ_TIMEOUT_SECONDS: float = float(os.getenv("GROQ_TIMEOUT_SECONDS", "20"))
    GROQ_MAX_RETRIES: int = int(os.getenv("GROQ_MAX_RETRIES", "2"))

    # Optimistic concurrency: attempts for a read-modify-write on an invoice
    STATUS_WRITE_MAX_ATTEMPTS: int = int(os.getenv("STATUS_WRITE_MAX_ATTEMPTS", "3"))

    # Decoded size limit for invoice uploads (10 MiB)
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))

    # Avatars are handed out round-robin: avatar-1 .. avatar-N
    AVATAR_POOL_SIZE: int = int(os.getenv("AVATAR_POOL_SIZE", "6"))


settings = Settings()
