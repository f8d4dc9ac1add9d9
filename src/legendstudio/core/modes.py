"""Operating modes and their independent draft slots.

Each mode owns one draft. Switching modes never touches a draft; only
``clear``/``clear_current`` reset one, and only the one named.
"""

from enum import StrEnum

from pydantic import BaseModel, Field

from legendstudio.models.images import UploadedImage
from legendstudio.models.video import DEFAULT_VIDEO_DURATION, VeoParams, VideoAspectRatio

MAX_REFERENCE_IMAGES = 8
MAX_CUSTOM_IMAGES = 8


class AppMode(StrEnum):
    """Operating modes of the studio."""

    GENERATE = "generate"
    STRUCTURED_SCENE = "structured_scene"
    BACKGROUND_REMOVAL = "background_removal"
    DRAW = "draw"
    VIDEO = "video"
    HISTORY_VIEW = "history_view"


class GenerateDraft(BaseModel):
    """Free-text generation draft with up to eight reference images.

    Invariant: at most one placeholder, always at index 0, and never more
    than ``MAX_REFERENCE_IMAGES`` images in total.
    """

    prompt: str = ""
    reference_images: list[UploadedImage] = Field(default_factory=list)
    aspect_ratio: str | None = None
    inspired_part: str = ""

    @property
    def placeholder(self) -> UploadedImage | None:
        if self.reference_images and self.reference_images[0].is_placeholder:
            return self.reference_images[0]
        return None

    def user_references(self) -> list[UploadedImage]:
        """Reference images without the placeholder."""
        return [img for img in self.reference_images if not img.is_placeholder]

    def _rebuild(self, placeholder: UploadedImage | None, images: list[UploadedImage]) -> None:
        head = [placeholder] if placeholder is not None else []
        self.reference_images = (head + images)[:MAX_REFERENCE_IMAGES]

    def add_reference_images(self, images: list[UploadedImage]) -> None:
        """Append uploads after the existing references (placeholders are ignored)."""
        uploads = [img for img in images if not img.is_placeholder]
        self._rebuild(self.placeholder, self.user_references() + uploads)

    def set_placeholder(self, placeholder: UploadedImage | None) -> None:
        """Install (or with ``None`` remove) the placeholder at position 0."""
        if placeholder is not None and not placeholder.is_placeholder:
            placeholder = placeholder.model_copy(update={"is_placeholder": True})
        self._rebuild(placeholder, self.user_references())

    def remove_reference_image(self, index: int) -> UploadedImage:
        """Remove and return the reference at ``index``."""
        removed = self.reference_images[index]
        remaining = self.reference_images[:index] + self.reference_images[index + 1:]
        placeholder = remaining[0] if remaining and remaining[0].is_placeholder else None
        self._rebuild(placeholder, [img for img in remaining if not img.is_placeholder])
        return removed

    def select_aspect_ratio(self, ratio: str) -> None:
        """Record the output ratio and pin it with a fresh placeholder."""
        self.aspect_ratio = ratio
        self.set_placeholder(UploadedImage.placeholder(ratio))


class SceneDraft(BaseModel):
    """Structured scene draft.

    ``None`` stands for every "unspecified" choice: auto-detected attributes,
    no weapon, no vehicle, solo (no companion), random director and random
    mission.
    """

    prompt: str = ""
    aspect_ratio: str | None = None
    character_image: UploadedImage | None = None
    custom_weapon_images: list[UploadedImage] = Field(default_factory=list)
    custom_companion_images: list[UploadedImage] = Field(default_factory=list)

    hair_style: str | None = None
    hair_color: str | None = None
    expression: str | None = None
    headwear: str | None = None
    outerwear: str | None = None
    innerwear: str | None = None
    legwear: str | None = None
    footwear: str | None = None
    face_cyberware: str | None = None
    body_cyberware: str | None = None
    life_path: str | None = None

    weapon: str | None = None
    vehicle: str | None = None
    companion: str | None = None

    selected_scenes: list[str] = Field(default_factory=list)
    director: str | None = None
    mission: str | None = None
    cinematic_realism: bool = False

    @property
    def has_character(self) -> bool:
        return self.character_image is not None and not self.character_image.is_placeholder

    def add_custom_images(self, images: list[UploadedImage], kind: str) -> list[UploadedImage]:
        """Append weapon or companion images (capped); returns the images kept."""
        if kind == "weapon":
            current = self.custom_weapon_images
        elif kind == "companion":
            current = self.custom_companion_images
        else:
            raise ValueError(f"Unknown custom image kind: {kind!r}")
        combined = (current + images)[:MAX_CUSTOM_IMAGES]
        current[:] = combined
        kept_ids = {img.id for img in combined}
        return [img for img in images if img.id in kept_ids]

    def reset_equipment(self) -> None:
        self.custom_weapon_images = []
        self.custom_companion_images = []
        self.weapon = None
        self.vehicle = None
        self.companion = None
        self.director = None
        self.mission = None
        self.selected_scenes = []


class BackgroundRemovalDraft(BaseModel):
    image: UploadedImage | None = None
    green_screen: bool = False


class DrawDraft(BaseModel):
    aspect_ratio: str | None = None
    background_color: str = "#808080"
    background_image: str | None = None
    brush_size: int = Field(default=10, ge=1, le=100)


class VideoDraft(BaseModel):
    """Video draft; ``director=None`` means a random director per dispatch."""

    prompt: str = ""
    start_frame: UploadedImage | None = None
    end_frame: UploadedImage | None = None
    aspect_ratio: VideoAspectRatio | None = None
    duration: int = Field(default=DEFAULT_VIDEO_DURATION, ge=1, le=8)
    director: str | None = None

    def to_params(self) -> VeoParams:
        return VeoParams(
            prompt=self.prompt,
            start_frame=self.start_frame,
            end_frame=self.end_frame,
            aspect_ratio=self.aspect_ratio,
            duration=self.duration,
        )

    def load_params(self, params: VeoParams) -> None:
        self.prompt = params.prompt
        self.start_frame = params.start_frame
        self.end_frame = params.end_frame
        if params.aspect_ratio:
            self.aspect_ratio = params.aspect_ratio
        self.duration = params.duration


class HistoryViewState(BaseModel):
    selected_id: str | None = None
    analysis_error: str | None = None


_DRAFT_FIELDS: dict[AppMode, str] = {
    AppMode.GENERATE: "generate",
    AppMode.STRUCTURED_SCENE: "scene",
    AppMode.BACKGROUND_REMOVAL: "background_removal",
    AppMode.DRAW: "draw",
    AppMode.VIDEO: "video",
    AppMode.HISTORY_VIEW: "history_view",
}


class ModeController:
    """Tracks the active mode and owns one draft slot per mode."""

    def __init__(self, mode: AppMode = AppMode.GENERATE) -> None:
        self.mode = mode
        self.generate = GenerateDraft()
        self.scene = SceneDraft()
        self.background_removal = BackgroundRemovalDraft()
        self.draw = DrawDraft()
        self.video = VideoDraft()
        self.history_view = HistoryViewState()

    def switch(self, mode: AppMode) -> None:
        """Activate ``mode``; every transition is valid and no draft is cleared."""
        self.mode = mode

    def draft_for(self, mode: AppMode) -> BaseModel:
        return getattr(self, _DRAFT_FIELDS[mode])

    def active_draft(self) -> BaseModel:
        return self.draft_for(self.mode)

    def clear(self, mode: AppMode) -> None:
        """Reset one mode's draft to its defaults."""
        field = _DRAFT_FIELDS[mode]
        setattr(self, field, type(getattr(self, field))())

    def clear_current(self) -> None:
        self.clear(self.mode)
