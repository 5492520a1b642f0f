import json
import logging
import os

log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/runtime_config.json"

DEFAULT_CONFIG = {
    "max_steps": 50_000_000,
    "default_speed": 1.0,
    "visible_cells": 10,
    "log_level": "INFO",
    "output_directory": "logs/",
    "log_file_prefix": "busybeaver_",
    "store_file": "machines/custom_machines.json",
    "generator": {
        "halt_probability": 0.3,
        "left_probability": 0.4,
        "right_probability": 0.4,
        "no_move_probability": 0.2,
        "max_states": 10,
    },
}

# Expected types for validation
CONFIG_SCHEMA = {
    "max_steps": int,
    "default_speed": (int, float),
    "visible_cells": int,
    "log_level": str,
    "output_directory": str,
    "log_file_prefix": str,
    "store_file": str,
    "generator": dict,
}

GENERATOR_KEYS = ["halt_probability", "left_probability", "right_probability", "no_move_probability", "max_states"]


def validate_config(config):
    for key, expected_type in CONFIG_SCHEMA.items():
        if key not in config:
            raise ValueError(f"Missing required configuration key: {key}")
        if isinstance(config[key], bool) or not isinstance(config[key], expected_type):
            raise TypeError(f"Config key '{key}' expected {expected_type}, got {type(config[key])}.")

    if config["max_steps"] <= 0:
        raise ValueError("max_steps must be positive.")
    if config["default_speed"] <= 0:
        raise ValueError("default_speed must be positive.")

    # Special check inside the generator block
    generator = config["generator"]
    if not all(k in generator for k in GENERATOR_KEYS):
        raise ValueError(f"Generator settings must contain {', '.join(repr(k) for k in GENERATOR_KEYS)}.")
    moves = generator["left_probability"] + generator["right_probability"] + generator["no_move_probability"]
    if abs(moves - 1.0) > 1e-9:
        raise ValueError(f"Generator move probabilities must sum to 1, got {moves}.")


def load_config(path=DEFAULT_CONFIG_PATH):
    if not os.path.exists(path):
        raise FileNotFoundError(f"Configuration file not found at: {path}")

    with open(path, "r", encoding="utf-8") as f:
        user_config = json.load(f)

    # Merge defaults with overrides, one level deep for the generator block
    config = DEFAULT_CONFIG.copy()
    config["generator"] = {**DEFAULT_CONFIG["generator"], **user_config.pop("generator", {})}
    config.update(user_config)

    validate_config(config)

    os.makedirs(config["output_directory"], exist_ok=True)

    log.info("Loaded config from %s", path)
    for key, value in config.items():
        log.debug("  %s: %s", key, value)

    return config


def save_config(config, path=DEFAULT_CONFIG_PATH):
    validate_config(config)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=4)
