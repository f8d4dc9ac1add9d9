"""Image and video generation orchestrators."""

from .generator import BatchStatus, GenerationSummary, ImageGenerator, SceneResult
from .video_generator import VideoGenerator

__all__ = [
    "BatchStatus",
    "GenerationSummary",
    "ImageGenerator",
    "SceneResult",
    "VideoGenerator",
]
