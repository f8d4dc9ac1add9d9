"""Image data models: uploads, generated results and history records."""

import uuid
from pathlib import Path

from pydantic import BaseModel, Field

from legendstudio.utils.imaging import (
    create_placeholder,
    data_url_to_bytes,
    read_image_file,
    split_data_url,
)

# Aspect ratios offered for image generation
ASPECT_RATIOS = ("1:1", "3:4", "4:3", "9:16", "16:9")


def _new_id() -> str:
    return str(uuid.uuid4())


class UploadedImage(BaseModel):
    """An image supplied by the user (or injected as a placeholder)."""

    src: str = Field(..., description="Encoded image as a data URL")
    name: str = Field(default="image.png", description="Source file name")
    id: str = Field(default_factory=_new_id)
    width: int | None = Field(default=None, ge=1)
    height: int | None = Field(default=None, ge=1)
    is_placeholder: bool = Field(
        default=False,
        description="Auto-generated neutral fill used to pin the aspect ratio",
    )
    is_processing: bool = Field(
        default=False, description="Background removal still running"
    )
    has_error: bool = Field(
        default=False, description="Background removal failed for this image"
    )

    @property
    def mime_type(self) -> str:
        return split_data_url(self.src)[0]

    @property
    def data(self) -> bytes:
        """Raw encoded image bytes."""
        return data_url_to_bytes(self.src)

    @classmethod
    def placeholder(cls, ratio: str) -> "UploadedImage":
        """Create a neutral-grey placeholder for the given aspect ratio."""
        src, width, height = create_placeholder(ratio)
        return cls(
            src=src,
            name=f"placeholder-{ratio}.png",
            width=width,
            height=height,
            is_placeholder=True,
        )

    @classmethod
    def from_path(cls, path: Path | str) -> "UploadedImage":
        """Load an image file from disk."""
        path = Path(path)
        return cls(src=read_image_file(path), name=path.name)


class GeneratedImage(BaseModel):
    """A single image produced by the backend."""

    id: str = Field(default_factory=_new_id)
    src: str = Field(..., description="Encoded image as a data URL")
    alt: str = Field(default="")
    prompt: str = Field(default="", description="Prompt that produced the image")
    aspect_ratio: str | None = Field(default=None)
    width: int | None = Field(default=None)
    height: int | None = Field(default=None)
    size: int | None = Field(default=None, description="Approximate size in bytes")

    def to_upload(self, name: str | None = None) -> UploadedImage:
        """Copy this result into an upload slot (reuse-result actions)."""
        return UploadedImage(
            src=self.src,
            name=name or f"used-{self.id}.png",
            width=self.width,
            height=self.height,
        )


class HistoryItem(GeneratedImage):
    """A generated image committed to the persisted history.

    ``width``/``height``/``size``/``aspect_ratio`` are filled in at commit
    time. They stay ``None`` only when the image could not be decoded.
    """

    analysis: str | None = Field(
        default=None, description="Image analysis, computed on first inspection"
    )
