# Settings for the triage service, read from the environment (.env supported)
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


class Settings:
    # Catalog knowledge files ship inside the package
    KNOWLEDGE_DIR = Path(os.getenv("KNOWLEDGE_DIR", str(Path(__file__).parent / "knowledge")))

    # Engine limits
    MAX_CANDIDATES = _int_env("MAX_CANDIDATES", 10)
    MAX_SYMPTOMS = _int_env("MAX_SYMPTOMS", 20)
    MAX_MESSAGE_LENGTH = _int_env("MAX_MESSAGE_LENGTH", 2000)
    DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "es")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Audit storage (Redis when configured, in-memory otherwise)
    REDIS_URL = os.getenv("REDIS_URL")
    AUDIT_MAX_ENTRIES = _int_env("AUDIT_MAX_ENTRIES", 1000)

    # Server
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = _int_env("PORT", 8000)


settings = Settings()
