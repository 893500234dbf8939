"""
Configuration management module.

This module provides utilities for loading and repairing the exhibit
configuration stored in config.json: the safe band bubbles are kept inside,
retry policies for remote calls, and the photo catalog.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
"""

import json
import os
from typing import Dict, Any

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_PATH = os.path.join(BASE_DIR, "config.json")

DEFAULT_SAFE_BAND = {"min": 4.0, "max": 96.0}
DEFAULT_RETRY = {"attempts": 3, "base_delay": 0.25, "max_delay": 2.0}


def load_config() -> Dict[str, Any]:
    """Load configuration from config.json.

    Returns:
        Configuration dictionary with all required fields ensured.
    """
    try:
        with open(CONFIG_PATH, "r", encoding="utf-8") as f:
            config = json.load(f)
    except FileNotFoundError:
        config = get_default_config()

    # Ensure all required fields are present
    config = ensure_config_fields(config)
    return config


def get_default_config() -> Dict[str, Any]:
    """Get default configuration structure.

    Returns:
        Default configuration dictionary.
    """
    return {
        "safe_band": dict(DEFAULT_SAFE_BAND),
        "placement_salt": "x",
        "default_photo": "l1",
        "max_comment_length": 500,
        "upsert_retry": dict(DEFAULT_RETRY),
        "subscribe_retry": dict(DEFAULT_RETRY),
        "photos": [],
    }


def ensure_config_fields(config: Dict[str, Any]) -> Dict[str, Any]:
    """Ensure all required fields are present in the configuration.

    Args:
        config: Configuration dictionary to update.

    Returns:
        Updated configuration dictionary.
    """
    config.setdefault("safe_band", dict(DEFAULT_SAFE_BAND))
    config.setdefault("placement_salt", "x")
    config.setdefault("default_photo", "l1")
    config.setdefault("max_comment_length", 500)
    config.setdefault("photos", [])

    band = config["safe_band"]
    band.setdefault("min", DEFAULT_SAFE_BAND["min"])
    band.setdefault("max", DEFAULT_SAFE_BAND["max"])
    if band["min"] > band["max"]:
        band["min"], band["max"] = band["max"], band["min"]
    # Positions are percentages of the canvas
    band["min"] = min(max(float(band["min"]), 0.0), 100.0)
    band["max"] = min(max(float(band["max"]), 0.0), 100.0)

    for key in ("upsert_retry", "subscribe_retry"):
        policy = config.setdefault(key, dict(DEFAULT_RETRY))
        ensure_retry_fields(policy)

    for photo in config["photos"]:
        ensure_photo_fields(photo)

    return config


def ensure_retry_fields(policy: Dict[str, Any]):
    """Ensure a retry policy has all required fields with appropriate defaults.

    Args:
        policy: Retry policy dictionary to update.
    """
    for key, default in DEFAULT_RETRY.items():
        policy.setdefault(key, default)

    # At least one attempt is always made
    policy["attempts"] = max(1, int(policy["attempts"]))


def ensure_photo_fields(photo: Dict[str, Any]):
    """Ensure a catalog photo has all required fields with appropriate defaults.

    Args:
        photo: Photo dictionary to update.
    """
    defaults = {
        "id": "",
        "url": "",
        "thumbnail": "",
        "label": "絵",
        "group": "",
    }

    for key, default in defaults.items():
        photo.setdefault(key, default)
