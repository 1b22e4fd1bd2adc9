"""Utility functions for common operations."""

from .config_io import load_config, load_config_from_json, save_config_to_json

__all__ = [
    "load_config",
    "load_config_from_json",
    "save_config_to_json",
]
