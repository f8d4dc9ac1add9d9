"""Configuration module for Legend Studio."""

from .loader import ConfigLoader, load_settings
from .settings import (
    APISettings,
    GenerationSettings,
    OutputSettings,
    Settings,
    StorageSettings,
    VideoSettings,
)

__all__ = [
    "APISettings",
    "ConfigLoader",
    "GenerationSettings",
    "OutputSettings",
    "Settings",
    "StorageSettings",
    "VideoSettings",
    "load_settings",
]
