"""Configuration management for Daybook."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DAYBOOK_HOME = Path(os.environ.get("DAYBOOK_HOME", Path.home() / "daybook"))
CONFIG_FILE = DAYBOOK_HOME / "config" / "daybook.conf"
DATA_DIR = DAYBOOK_HOME / "data"

STORAGE_KEY = "stt_journal_v1"
UNPARSED_DATE_POLICIES = ("ask", "skip", "today")


@dataclass
class Config:
    """Daybook configuration."""

    data_dir: str = ""
    storage_key: str = STORAGE_KEY
    openai_api_key: str = ""
    openai_model: str = "gpt-5"
    openai_base_url: str = "https://api.openai.com/v1"
    llm_timeout: int = 60
    # Reject documents holding two sections for the same date
    strict_headers: bool = False
    unparsed_dates: str = "ask"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(path: Path | None = None) -> Config:
    """Load configuration from daybook.conf, then environment fallbacks."""
    config = Config()
    config_file = path or CONFIG_FILE

    if config_file.exists():
        _apply_file(config, config_file)

    if not config.openai_api_key:
        config.openai_api_key = os.environ.get("OPENAI_API_KEY", "")
    if "OPENAI_MODEL" in os.environ:
        config.openai_model = os.environ["OPENAI_MODEL"]

    return config


def _parse_value(raw: str) -> str:
    """Unwrap a setting value: quotes keep '#', unquoted values lose trailing comments."""
    value = raw.strip()
    if value[:1] in ('"', "'"):
        quote = value[0]
        closing = value.find(quote, 1)
        return value[1:closing] if closing != -1 else value[1:]
    return value.split("#", 1)[0].strip()


def _apply_file(config: Config, config_file: Path) -> None:
    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, raw = line.partition("=")
        key = key.strip().lower()
        value = _parse_value(raw)

        match key:
            case "data_dir":
                config.data_dir = value
            case "storage_key":
                config.storage_key = value or STORAGE_KEY
            case "openai_api_key":
                config.openai_api_key = value
            case "openai_model":
                config.openai_model = value
            case "openai_base_url":
                config.openai_base_url = value.rstrip("/")
            case "llm_timeout":
                try:
                    config.llm_timeout = int(value)
                except ValueError:
                    logger.warning(f"Invalid LLM_TIMEOUT {value!r}, keeping {config.llm_timeout}")
            case "strict_headers":
                config.strict_headers = _parse_bool(value)
            case "unparsed_dates":
                if value.lower() in UNPARSED_DATE_POLICIES:
                    config.unparsed_dates = value.lower()
                else:
                    logger.warning(f"Unknown UNPARSED_DATES {value!r}, keeping {config.unparsed_dates}")
