"""CLI commands for Legend Studio."""

from .config_cmd import config
from .effects import remove_bg, upscale, zoom_out
from .generate import generate, scene
from .history import history_app
from .theme import theme
from .video import video

__all__ = [
    "config",
    "generate",
    "history_app",
    "remove_bg",
    "scene",
    "theme",
    "upscale",
    "video",
    "zoom_out",
]
