"""Utilities for loading and saving MigrationConfig from/to JSON files."""

from pathlib import Path
from typing import Optional
from pydantic import TypeAdapter, ValidationError
from eavmigrate.model.migration_config import MigrationConfig


def load_config_from_json(config_path: Path) -> MigrationConfig:
    """
    Load MigrationConfig from a JSON file.

    Args:
        config_path: Path to the JSON file

    Returns:
        Loaded MigrationConfig instance

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is empty or invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Migration config not found: {config_path}")

    file_content = config_path.read_text(encoding="utf-8").strip()
    if not file_content:
        raise ValueError(f"Migration config is empty: {config_path}")

    try:
        return TypeAdapter(MigrationConfig).validate_json(file_content)
    except ValidationError as e:
        raise ValueError(f"Invalid migration config {config_path}: {e}") from e


def load_config(config_path: Optional[Path]) -> MigrationConfig:
    """Config from ``config_path``, or the built-in EAV layout when it is None."""
    if config_path is None:
        return MigrationConfig()
    return load_config_from_json(config_path)


def save_config_to_json(config: MigrationConfig, config_path: Path) -> None:
    """
    Save MigrationConfig to a JSON file.

    Note:
        Creates parent directories if they don't exist.
    """
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
