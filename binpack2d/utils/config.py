"""
Configuration Management

Load, save, and validate packing job files. A job file is YAML:

    bin:
      width: 10
      height: 10
    packing:
      hole_metric: area
      time_limit: null
    items:
      - {w: 10, h: 3, allow_rotate: true, id: D}
      - {w: 2, h: 2, quantity: 4}
    output:
      html: null
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..environment.holes import HOLE_METRICS
from ..environment.item import Item

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "bin": {"width": 10, "height": 10},
    "packing": {"hole_metric": "area", "time_limit": None},
    "items": [],
    "output": {"html": None},
}


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Missing optional sections are filled in from the defaults.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Configuration dictionary

    Example:
        >>> config = load_config("config/default.yaml")
        >>> print(config["bin"]["width"])
        10
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        loaded = yaml.safe_load(f) or {}

    # bin and items are required, so check before the defaults fill them in
    _validate_config(loaded)
    config = merge_configs(DEFAULT_CONFIG, loaded)
    _validate_config(config)

    return config


def save_config(config: Dict[str, Any], save_path: str):
    """
    Save configuration to YAML file.

    Args:
        config: Configuration dictionary
        save_path: Path to save YAML file
    """
    save_path = Path(save_path)
    save_path.parent.mkdir(parents=True, exist_ok=True)

    with open(save_path, "w") as f:
        yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)

    logger.info("Configuration saved to: %s", save_path)


def merge_configs(base_config: Dict[str, Any],
                  override_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge two configurations (override takes precedence).

    Args:
        base_config: Base configuration
        override_config: Override configuration

    Returns:
        Merged configuration
    """
    merged = copy.deepcopy(base_config)

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)

    return merged


def _validate_config(config: Dict[str, Any]):
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary

    Raises:
        ValueError: If configuration is invalid
    """
    required_sections = ["bin", "items"]

    for section in required_sections:
        if section not in config:
            raise ValueError(f"Missing required section: {section}")

    bin_config = config["bin"]
    if not isinstance(bin_config, dict):
        raise ValueError("bin must be a mapping")
    for key in ("width", "height"):
        value = bin_config.get(key)
        if not _is_int(value) or value < 1:
            raise ValueError(f"bin.{key} must be a positive integer, got {value!r}")

    items = config["items"]
    if not isinstance(items, list):
        raise ValueError("items must be a list")
    for idx, entry in enumerate(items):
        if not isinstance(entry, dict):
            raise ValueError(f"items[{idx}] must be a mapping, got {entry!r}")
        for key in ("w", "h"):
            value = entry.get(key)
            if not _is_int(value) or value < 1:
                raise ValueError(
                    f"items[{idx}].{key} must be a positive integer, got {value!r}"
                )
        quantity = entry.get("quantity", 1)
        if not _is_int(quantity) or quantity < 0:
            raise ValueError(f"items[{idx}].quantity must be a non-negative integer")

    packing_config = config.get("packing", {})
    metric = packing_config.get("hole_metric", "area")
    if metric not in HOLE_METRICS:
        raise ValueError(
            f"Unknown hole_metric '{metric}', expected one of {sorted(HOLE_METRICS)}"
        )

    time_limit = packing_config.get("time_limit")
    if time_limit is not None:
        if isinstance(time_limit, bool) or not isinstance(time_limit, (int, float)) \
                or time_limit <= 0:
            raise ValueError(
                f"packing.time_limit must be a positive number, got {time_limit!r}"
            )


def _is_int(value: Any) -> bool:
    # YAML booleans load as bool, which is a subclass of int
    return isinstance(value, int) and not isinstance(value, bool)


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration.

    Returns:
        Default configuration dictionary (a fresh copy)
    """
    return copy.deepcopy(DEFAULT_CONFIG)


def update_config_from_args(config: Dict[str, Any],
                            args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Update configuration from command-line arguments.

    Args:
        config: Base configuration
        args: Command-line arguments

    Returns:
        Updated configuration

    Raises:
        ValueError: If an override makes the configuration invalid
    """
    updated_config = copy.deepcopy(config)

    # Map common CLI args to config keys
    arg_mapping = {
        "width": ("bin", "width"),
        "height": ("bin", "height"),
        "metric": ("packing", "hole_metric"),
        "time_limit": ("packing", "time_limit"),
        "save_html": ("output", "html"),
    }

    for arg_key, (section, config_key) in arg_mapping.items():
        if arg_key in args and args[arg_key] is not None:
            if section not in updated_config:
                updated_config[section] = {}
            updated_config[section][config_key] = args[arg_key]

    _validate_config(updated_config)
    return updated_config


def items_from_config(config: Dict[str, Any]) -> List[Item]:
    """
    Build the item list described by a configuration.

    Entries with a quantity above one expand into several items. Their ids
    get a "#n" suffix; entries without an id are numbered by position.

    Args:
        config: Validated configuration dictionary

    Returns:
        Items in configuration order
    """
    items = []
    for idx, entry in enumerate(config["items"]):
        base_id = entry.get("id", idx)
        quantity = entry.get("quantity", 1)
        for copy_idx in range(quantity):
            item_id = base_id if quantity == 1 else f"{base_id}#{copy_idx}"
            items.append(Item(
                w=entry["w"],
                h=entry["h"],
                allow_rotate=bool(entry.get("allow_rotate", False)),
                item_id=item_id,
            ))
    return items
