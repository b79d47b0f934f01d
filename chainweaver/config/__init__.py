"""
ChainWeaver v0.1.0

Configuration management for ChainWeaver.

Author: ChainWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from .schema import (
    DEFAULT_CONFIG,
    VALID_TEMPLATES,
    ConfigValidationError,
    load_config,
    get_setting,
    save_config_template,
    validate_config,
    require_valid_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "VALID_TEMPLATES",
    "ConfigValidationError",
    "load_config",
    "get_setting",
    "save_config_template",
    "validate_config",
    "require_valid_config",
]
