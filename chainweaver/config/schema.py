"""
ChainWeaver v0.1.0

Configuration schema for ChainWeaver.

Defines all available configuration parameters with defaults and validation.

Author: ChainWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import copy
import re
from typing import Dict, Any, Optional, List
from pathlib import Path
import yaml

from ..graph_core.path_index import PATH_COLOR_PALETTE


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


# Default configuration values
DEFAULT_CONFIG = {
    # ========================================================================
    # Graph Ingestion
    # ========================================================================
    'graph': {
        'format': 'auto',  # 'auto' (detect from edge orientations), 'gfa', 'dot'
        'default_length': 1000,  # Used when a segment has no length or '*'
        'default_depth': 1.0,
    },

    # ========================================================================
    # Chain Merging
    # ========================================================================
    'merge': {
        'id_prefix': 'MERGED',  # Merged ids: {prefix}_{members}_{serial}
    },

    # ========================================================================
    # Vertex Resolution
    # ========================================================================
    'resolution': {
        'mode': 'auto',  # 'auto' (physical for GFA, logical for DOT), 'logical', 'physical'
        'copy_radius': 60.0,  # Distance of copies from the resolved vertex
    },

    # ========================================================================
    # Editing Session
    # ========================================================================
    'history': {
        'max_depth': 20,  # Undo snapshots kept
    },

    'paths': {
        'palette': list(PATH_COLOR_PALETTE),
    },

    # ========================================================================
    # Output
    # ========================================================================
    'output': {
        'format': 'yaml',  # Graph document format: 'yaml' or 'json'
        'logging': {
            'level': 'INFO',
            'log_file': None,
        },
    },
}

VALID_TEMPLATES = ('default', 'gfa', 'dot')
_VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
_HEX_COLOR = re.compile(r'^#[0-9A-Fa-f]{6}$')


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Path to YAML config file (None = use defaults)

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config_path is given but does not exist
        ConfigValidationError: If the file is not a YAML mapping
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path) as f:
            try:
                user_config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigValidationError(f"Invalid YAML in {config_path}: {e}") from e

        if user_config is None:
            return config
        if not isinstance(user_config, dict):
            raise ConfigValidationError(f"Configuration file {config_path} must contain a mapping")

        # Deep merge user config into defaults
        config = _deep_merge(config, user_config)

    return config


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def get_setting(config: Dict[str, Any], key: str, default: Any = None) -> Any:
    """
    Get a value using dotted notation, e.g. 'resolution.mode'.
    """
    value: Any = config
    for part in key.split('.'):
        if not isinstance(value, dict) or part not in value:
            return default
        value = value[part]
    return value


def save_config_template(output_path: Path, template: str = 'default'):
    """
    Save a configuration template to file.

    Args:
        output_path: Output file path
        template: Template type ('default', 'gfa', 'dot')
    """
    if template not in VALID_TEMPLATES:
        raise ConfigValidationError(
            f"Unknown template: {template} (choose from {', '.join(VALID_TEMPLATES)})"
        )

    config = copy.deepcopy(DEFAULT_CONFIG)

    # Customize for specific templates
    if template == 'gfa':
        config['graph']['format'] = 'gfa'
        config['resolution']['mode'] = 'physical'

    elif template == 'dot':
        config['graph']['format'] = 'dot'
        config['resolution']['mode'] = 'logical'

    with open(output_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration dictionary.

    Args:
        config: Configuration to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    # Validate graph settings
    graph = config.get('graph', {})
    if graph.get('format') not in ('auto', 'gfa', 'dot'):
        errors.append(f"Invalid graph.format: {graph.get('format')} (auto, gfa or dot)")
    length = graph.get('default_length')
    if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
        errors.append(f"Invalid graph.default_length: {length} (positive integer required)")
    depth = graph.get('default_depth')
    if isinstance(depth, bool) or not isinstance(depth, (int, float)) or depth < 0:
        errors.append(f"Invalid graph.default_depth: {depth} (non-negative number required)")

    # Validate merge settings
    prefix = config.get('merge', {}).get('id_prefix')
    if not isinstance(prefix, str) or not prefix.strip():
        errors.append("Invalid merge.id_prefix: must be a non-empty string")

    # Validate resolution settings
    resolution = config.get('resolution', {})
    if resolution.get('mode') not in ('auto', 'logical', 'physical'):
        errors.append(f"Invalid resolution.mode: {resolution.get('mode')} (auto, logical or physical)")
    radius = resolution.get('copy_radius')
    if isinstance(radius, bool) or not isinstance(radius, (int, float)) or radius < 0:
        errors.append(f"Invalid resolution.copy_radius: {radius} (non-negative number required)")

    # Validate history depth
    max_depth = config.get('history', {}).get('max_depth')
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
        errors.append(f"Invalid history.max_depth: {max_depth} (integer >= 1 required)")

    # Validate path palette
    palette = config.get('paths', {}).get('palette')
    if not isinstance(palette, list) or not palette:
        errors.append("Invalid paths.palette: must be a non-empty list of colors")
    else:
        for color in palette:
            if not isinstance(color, str) or not _HEX_COLOR.match(color):
                errors.append(f"Invalid palette color: {color} (expected #RRGGBB)")

    # Validate output settings
    output = config.get('output', {})
    if output.get('format') not in ('yaml', 'json'):
        errors.append(f"Invalid output.format: {output.get('format')} (yaml or json)")
    level = str(output.get('logging', {}).get('level', '')).upper()
    if level not in _VALID_LOG_LEVELS:
        errors.append(f"Invalid output.logging.level: {output.get('logging', {}).get('level')}")

    return errors


def require_valid_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return config unchanged, or raise ConfigValidationError listing every problem.
    """
    errors = validate_config(config)
    if errors:
        raise ConfigValidationError("Invalid configuration:\n  " + "\n  ".join(errors))
    return config
