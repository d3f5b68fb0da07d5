"""Ledger configuration, environment and logging setup."""
import os
import sys
from pathlib import Path
from typing import Optional, Union
import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError


def get_data_dir() -> Path:
    """Get the sandbox data directory."""
    return Path(os.getenv(
        "SOFTEE_DATA_DIR",
        os.path.join(os.path.expanduser("~"), ".softee")
    ))


def get_log_level() -> str:
    return os.getenv("SOFTEE_LOG_LEVEL", "INFO").upper()


def setup_logging(level: Optional[str] = None) -> None:
    """Route loguru output to stderr at the given level."""
    logger.remove()
    logger.add(sys.stderr, level=(level or get_log_level()).upper())


class LedgerConfig(BaseModel):
    """Process-wide ledger settings, changed only by the controller."""
    model_config = ConfigDict(validate_assignment=True)

    harvest_rate: int = Field(default=0, ge=0)  # reward units per second per item
    harvest_time_threshold: int = Field(default=0, ge=0)  # seconds
    staking_opened: bool = False
    harvest_opened: bool = False
    coin_withdraw_timelock: int = Field(default=0, ge=0)
    coin: Optional[str] = None  # symbol of the bound reward coin


def load_config(path: Union[str, Path]) -> LedgerConfig:
    """Load ledger configuration from a YAML file.

    Args:
        path: YAML file whose top-level keys are ``LedgerConfig`` fields

    Returns:
        Parsed configuration, or defaults if the file does not exist

    Raises:
        ConfigError: If the file is not valid YAML or has invalid values
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f"No config at {path}, using defaults")
        return LedgerConfig()

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e

    if data is None:
        return LedgerConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping in {path}, got {type(data).__name__}")

    try:
        return LedgerConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e
