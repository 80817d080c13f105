"""Config package exporting loader helpers."""

from .loader import LoggingConfig, ServerConfig, Settings, StorageConfig, load_settings

__all__ = ["LoggingConfig", "ServerConfig", "Settings", "StorageConfig", "load_settings"]
