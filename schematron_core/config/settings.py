"""
Configuration Settings
======================

Configuration dataclass for Schematron validators, loadable from JSON or
YAML files.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict
import json
import logging

import yaml

logger = logging.getLogger(__name__)

MIN_PRIORITY = 1
MAX_PRIORITY = 100
DEFAULT_PRIORITY = 100


def clamp_priority(priority: int) -> int:
    """Bound a priority to [1, 100] (1 being the highest priority)."""
    priority = int(priority)
    if priority > MAX_PRIORITY:
        return MAX_PRIORITY
    if priority < MIN_PRIORITY:
        return MIN_PRIORITY
    return priority


@dataclass
class ValidatorConfig:
    """
    Validator configuration.

    Example:
        config = ValidatorConfig(schema_path="record.sch", schema_dir="schemas")
        config.suppress_warnings = True
        save_config(config, Path("validator.yaml"))
    """

    schema_path: str = ""
    schema_dir: str = ""          # Empty means current directory
    preprocessor_dir: str = ""    # Empty means the stylesheets bundled with lxml
    suppress_warnings: bool = False
    priority: int = DEFAULT_PRIORITY
    phase: str = ""               # Empty means the schema's default phase
    log_level: str = "INFO"

    # Custom extensions
    custom: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.priority = clamp_priority(self.priority)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'ValidatorConfig':
        """Create from dictionary, ignoring unknown keys."""
        known = {name for name in cls.__dataclass_fields__}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})


def load_config(config_path: Path) -> ValidatorConfig:
    """
    Load configuration from file.

    Supports JSON and YAML formats based on file extension.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is not supported
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    with open(config_path, 'r', encoding='utf-8') as f:
        if suffix in ['.yaml', '.yml']:
            data = yaml.safe_load(f) or {}
        elif suffix == '.json':
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

    logger.info(f"Loaded configuration from {config_path}")
    return ValidatorConfig.from_dict(data)


def save_config(config: ValidatorConfig, config_path: Path) -> None:
    """
    Save configuration to file.

    Supports JSON and YAML formats based on file extension.

    Raises:
        ValueError: If file format is not supported
    """
    config_path = Path(config_path)
    suffix = config_path.suffix.lower()
    data = config.to_dict()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        if suffix in ['.yaml', '.yml']:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
        elif suffix == '.json':
            json.dump(data, f, indent=2)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

    logger.info(f"Saved configuration to {config_path}")


def get_default_config() -> ValidatorConfig:
    """Get default configuration."""
    return ValidatorConfig()
