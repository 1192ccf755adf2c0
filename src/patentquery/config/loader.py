from copy import deepcopy
from pathlib import Path
from typing import Any, Dict

import yaml

from patentquery.retrieval.models import ENDPOINTS

DEFAULT_CONFIG_PATH = Path("patentquery.config.yaml")

BASE_CONFIG: Dict[str, Dict[str, Any]] = {
    "api": {
        "base_url": "https://api.patentsview.org",
        "endpoint": "patents",
        "timeout_seconds": 30,
        "user_agent": "patentquery/0.1",
        "reason_header": "X-Status-Reason",
    },
    "defaults": {
        "per_page": 25,
    },
    "logging": {
        "level": "INFO",
        "json": False,
    },
}


def _merge_sections(user_config: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay user sections on the built-in defaults, one level deep."""
    merged = deepcopy(BASE_CONFIG)
    for section, values in user_config.items():
        if section in merged:
            if not isinstance(values, dict):
                raise ValueError(f"Config section '{section}' must be a dictionary")
            merged[section].update(values)
        else:
            merged[section] = values
    return merged


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load configuration from YAML, merged over built-in defaults.

    Args:
        path: Optional path to a config file. Defaults to patentquery.config.yaml;
            when that default file does not exist the built-in defaults are used.

    Returns:
        Dictionary with ``api``, ``defaults`` and ``logging`` sections

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist
        ValueError: If config structure is invalid
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        if path is not None:
            raise FileNotFoundError(f"Config file not found: {cfg_path}")
        return deepcopy(BASE_CONFIG)

    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError("Config must be a dictionary")

    merged = _merge_sections(config)

    endpoint = merged["api"].get("endpoint")
    if endpoint not in ENDPOINTS:
        raise ValueError(f"Unknown endpoint in config: {endpoint}")

    timeout = merged["api"].get("timeout_seconds")
    if timeout is not None and (not isinstance(timeout, (int, float)) or timeout <= 0):
        raise ValueError("Config 'api.timeout_seconds' must be a positive number or null")

    per_page = merged["defaults"].get("per_page")
    if not isinstance(per_page, int) or per_page <= 0:
        raise ValueError("Config 'defaults.per_page' must be a positive integer")

    return merged
