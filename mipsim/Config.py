import logging
import os

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "config.yaml")

DEFAULTS = {
    "clock": {
        "frequency": 1000000,
        "r_cycles": 1,
        "i_cycles": 1,
        "j_cycles": 1,
    },
    "memory": {
        "kind": "fixed",
        "size": 4096,
        "load_address": 0,
    },
    "snapshot": {
        "memory_bytes": 1024,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 5000,
    },
}

MEMORY_KINDS = ("fixed", "sparse")


def load_config(config_path: str = None, overrides: dict = None) -> dict:
    """
    Load the simulator configuration from YAML, merged section by section
    over the built-in defaults.

    Args:
        config_path (str): YAML file; defaults to config.yaml next to this module.
            A missing file leaves the defaults in place.
        overrides (dict): section -> values applied last

    Returns:
        dict: the merged configuration
    """
    path = config_path or DEFAULT_CONFIG_PATH
    loaded = {}
    if os.path.exists(path):
        with open(path, "r") as file:
            loaded = yaml.safe_load(file) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{path}: expected a mapping at top level")
        logger.info("Loaded configuration from %s", path)
    elif config_path is not None:
        logger.warning("Configuration file %s not found, using defaults", path)

    config = {}
    for section, defaults in DEFAULTS.items():
        config[section] = {**defaults, **(loaded.get(section) or {}), **((overrides or {}).get(section) or {})}

    kind = config["memory"]["kind"]
    if kind not in MEMORY_KINDS:
        raise ValueError(f"unknown memory kind: {kind!r} (expected one of {MEMORY_KINDS})")

    return config
