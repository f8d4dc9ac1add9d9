"""Data models for Legend Studio."""

from .advisor import AdvisorChoice, EditingSuggestion, SuggestionContext, SuggestionTarget
from .images import ASPECT_RATIOS, GeneratedImage, HistoryItem, UploadedImage
from .toast import Toast, ToastSeverity
from .video import VIDEO_ASPECT_RATIOS, VeoHistoryItem, VeoParams, VideoAspectRatio

__all__ = [
    # Image models
    "ASPECT_RATIOS",
    "GeneratedImage",
    "HistoryItem",
    "UploadedImage",
    # Video models
    "VIDEO_ASPECT_RATIOS",
    "VeoHistoryItem",
    "VeoParams",
    "VideoAspectRatio",
    # Advisor models
    "AdvisorChoice",
    "EditingSuggestion",
    "SuggestionContext",
    "SuggestionTarget",
    # Notifications
    "Toast",
    "ToastSeverity",
]
