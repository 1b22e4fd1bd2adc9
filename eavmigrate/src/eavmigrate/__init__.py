"""eavmigrate: EAV attribute taxonomy migration between schema versions."""

__version__ = "0.1.0"
