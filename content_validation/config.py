"""Application configuration via environment variables, plus the validation config file."""

import json
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationError
from pydantic_settings import BaseSettings

from content_validation.exceptions import ConfigurationError
from content_validation.models.config import ContentValidationConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    LOG_LEVEL: str = "info"

    # Content validation
    CONTENT_VALIDATION_CONFIG: str = ""  # Path to the JSON validation config; empty = no routes
    VALIDATION_PRIORITY: int = 650
    PRELOAD_INPUT_FILTERS: bool = True  # Build every spec-defined input filter at startup

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()


def load_module_config(path: str) -> ContentValidationConfig:
    """Load the validation config file.

    The file is a JSON object with two optional sections:

        {
            "content_validation": {"<handler>": {"input_filter": "<name>", "POST": "<name>"}},
            "input_filter_specs": {"<name>": {"<field>": {"validators": [{"name": "Digits"}]}}}
        }

    Args:
        path: Path to the JSON file; empty means an empty config

    Raises:
        ConfigurationError: unreadable file, invalid JSON, or invalid structure
    """
    if not path:
        return ContentValidationConfig()

    config_file = Path(path)
    try:
        raw = json.loads(config_file.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read validation config '{path}': {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Validation config '{path}' is not valid JSON: {e}") from e

    try:
        return ContentValidationConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Validation config '{path}' is invalid: {e}") from e
