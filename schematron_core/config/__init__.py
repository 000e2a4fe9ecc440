"""
Configuration Management
========================

Configuration utilities for Schematron validators.
"""

from schematron_core.config.settings import (
    DEFAULT_PRIORITY,
    ValidatorConfig,
    clamp_priority,
    get_default_config,
    load_config,
    save_config,
)

__all__ = [
    "DEFAULT_PRIORITY",
    "ValidatorConfig",
    "clamp_priority",
    "get_default_config",
    "load_config",
    "save_config",
]
