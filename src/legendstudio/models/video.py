"""Video generation data models."""

import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .images import UploadedImage

VideoAspectRatio = Literal["16:9", "9:16"]

VIDEO_ASPECT_RATIOS: tuple[str, ...] = ("16:9", "9:16")

DEFAULT_VIDEO_DURATION = 8

# Clip lengths each Veo generation accepts
_VEO_DURATIONS: dict[str, tuple[int, ...]] = {
    "veo-2": (5, 6, 7, 8),
    "veo-3": (4, 6, 8),
}


def supported_durations(model: str) -> tuple[int, ...] | None:
    """Return the clip lengths ``model`` accepts, or None when unknown."""
    for prefix, durations in _VEO_DURATIONS.items():
        if model.startswith(prefix):
            return durations
    return None


class VeoParams(BaseModel):
    """Everything needed to dispatch one video generation."""

    prompt: str = Field(default="")
    start_frame: UploadedImage | None = Field(default=None)
    end_frame: UploadedImage | None = Field(default=None)
    aspect_ratio: VideoAspectRatio | None = Field(default=None)
    duration: int = Field(
        default=DEFAULT_VIDEO_DURATION, ge=1, le=8, description="Clip length in seconds"
    )


class VeoHistoryItem(VeoParams):
    """A generated video together with the parameters that produced it."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    video_path: str = Field(..., description="Where the resulting video was saved")

    def to_params(self) -> VeoParams:
        return VeoParams(
            prompt=self.prompt,
            start_frame=self.start_frame,
            end_frame=self.end_frame,
            aspect_ratio=self.aspect_ratio,
            duration=self.duration,
        )
