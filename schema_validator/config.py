import logging
import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


class Settings:
    DEFAULT_DRAFT: str = os.getenv("SCHEMA_VALIDATOR_DRAFT", "draft-07")
    VALIDATE_FORMATS: bool = _env_flag("SCHEMA_VALIDATOR_VALIDATE_FORMATS")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()


def configure_logging() -> None:
    """Logging setup for applications embedding the validator."""
    logging.basicConfig(
        level=settings.LOG_LEVEL, format="%(levelname)s | %(name)s | %(message)s"
    )
