"""Configuration models and loading."""

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from core.exceptions import ConfigurationError

CONFIG_DIR = Path.home() / ".config" / "service-requester"
CONFIG_FILE = CONFIG_DIR / "config.json"

TRANSACTION_HEADER = "Transaction-Id"
COMPAT_TRANSACTION_HEADER = "X-Transaction-Id"


class TracingSettings(BaseModel):
    transaction_header: str = TRANSACTION_HEADER


class LoggingSettings(BaseModel):
    log_root: Path = Field(default_factory=lambda: Path.cwd() / "logs")
    console: bool = True


class Config(BaseModel):
    tracing: TracingSettings = Field(default_factory=TracingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_config(path: Path | None = None) -> Config:
    """Load configuration from JSON file.

    Without an explicit path the default file is created when missing and
    recreated (after a backup) when corrupted. An explicit path must exist
    and be valid.
    """
    if path is not None:
        try:
            return Config.model_validate(json.loads(Path(path).read_text()))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise ConfigurationError(f"Invalid config file {path}: {e}") from e

    if not CONFIG_FILE.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        default = Config()
        CONFIG_FILE.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(CONFIG_FILE.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = CONFIG_FILE.with_suffix(".json.bak")
        CONFIG_FILE.rename(backup)
        default = Config()
        CONFIG_FILE.write_text(default.model_dump_json(indent=2))
        return default
