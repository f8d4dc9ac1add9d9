"""Studio session: the explicit context object owning all generation state.

One ``Session`` replaces what would otherwise be process-wide mutable
state. It wires the mode controller, notification channel, prompt
composer, advisor, both orchestrators and the persisted stores around a
single backend and storage transport.
"""

import logging
import random
from enum import StrEnum
from pathlib import Path

from legendstudio.api.base import GenerationBackendProtocol
from legendstudio.assets.generator import ImageGenerator
from legendstudio.assets.video_generator import VideoGenerator
from legendstudio.config.settings import Settings
from legendstudio.errors import BackendError, InputValidationError
from legendstudio.models.advisor import SuggestionTarget
from legendstudio.models.images import ASPECT_RATIOS, GeneratedImage, HistoryItem, UploadedImage
from legendstudio.state.history import HistoryStore, PreferencesStore
from legendstudio.state.storage import JsonFileStorage, KeyValueStorage
from legendstudio.utils.imaging import ImageDecodeError, crop_to_aspect_ratio, get_image_dimensions

from .advisor import AdvisorEngine
from .catalogs import CINEMATIC_REALISM_CLAUSE
from .composer import PromptComposer, RandomSource
from .modes import MAX_CUSTOM_IMAGES, AppMode, ModeController
from .toasts import ToastCenter

logger = logging.getLogger(__name__)

# Markers identifying a prompt produced by structured scene composition
STRUCTURED_PROMPT_MARKERS = ("cyberpunk setting", "FACIAL REPLICATION", "Night City")


class ImageAction(StrEnum):
    """Where a generated result is reused."""

    REFERENCE = "reference"
    REMOVE_BACKGROUND = "remove_bg"
    DRAW_BACKGROUND = "draw_bg"


def is_structured_prompt(prompt: str) -> bool:
    return any(marker in prompt for marker in STRUCTURED_PROMPT_MARKERS)


class Session:
    """Everything one user works with during a studio session.

    Args:
        backend: Generative backend shared by all components.
        storage: Durable key-value transport for history and preferences.
        rng: Random source for the composer (seed it for reproducibility).
        output_dir: Where generated images are downloaded, if anywhere.
        variants: Variants per single-unit image generation.
    """

    def __init__(
        self,
        backend: GenerationBackendProtocol,
        storage: KeyValueStorage,
        rng: RandomSource | None = None,
        output_dir: Path | None = None,
        variants: int = 4,
    ) -> None:
        self.backend = backend
        self.storage = storage
        self.toasts = ToastCenter()
        self.modes = ModeController()
        self.composer = PromptComposer(rng)
        self.history = HistoryStore(storage, self.toasts)
        self.preferences = PreferencesStore(storage)
        self.advisor = AdvisorEngine(backend, self.modes, self.toasts)
        self.images = ImageGenerator(
            backend,
            self.composer,
            self.history,
            self.toasts,
            output_dir=output_dir,
            variants=variants,
        )
        self.videos = VideoGenerator(
            backend, self.composer, self.modes, self.toasts, advisor=self.advisor
        )
        self.history.load()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        backend: GenerationBackendProtocol | None = None,
        seed: int | None = None,
    ) -> "Session":
        """Build a session with file-backed storage from application settings."""
        if backend is None:
            from legendstudio.api.factory import create_backend

            backend = create_backend(settings)
        storage = JsonFileStorage(settings.storage_dir, settings.storage.quota_bytes)
        output_dir = Path(settings.output_dir) if settings.output.auto_download else None
        return cls(
            backend,
            storage,
            rng=random.Random(seed),
            output_dir=output_dir,
            variants=settings.generation.variants,
        )

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    async def upload_references(self, images: list[UploadedImage]) -> None:
        """Add reference images to the generate draft and ask the advisor."""
        self.modes.generate.add_reference_images(images)
        await self.advisor.on_upload(
            [img for img in images if not img.is_placeholder], SuggestionTarget.PROMPT
        )

    async def set_character_image(self, image: UploadedImage | None) -> None:
        self.modes.scene.character_image = image
        if image is not None:
            await self.advisor.on_single_upload(image, SuggestionTarget.PROMPT)

    async def set_background_removal_image(self, image: UploadedImage | None) -> None:
        self.modes.background_removal.image = image
        if image is not None:
            await self.advisor.on_single_upload(image, SuggestionTarget.PROMPT)

    async def set_draw_background(self, image: UploadedImage | None) -> None:
        self.modes.draw.background_image = image.src if image is not None else None
        if image is not None:
            await self.advisor.on_single_upload(image, SuggestionTarget.PROMPT)

    async def set_video_frame(self, image: UploadedImage | None, frame: str) -> None:
        draft = self.modes.video
        if frame == "start":
            draft.start_frame = image
        elif frame == "end":
            draft.end_frame = image
        else:
            raise ValueError(f"Unknown frame: {frame!r}")
        if image is not None:
            await self.advisor.on_single_upload(image, SuggestionTarget.VIDEO)

    async def upload_custom_images(self, images: list[UploadedImage], kind: str) -> None:
        """Add custom weapon/companion images, removing their backgrounds one by one.

        Each kept image is marked processing, then replaced by its
        background-free version, or flagged with an error if removal fails.
        """
        draft = self.modes.scene
        pending = [img.model_copy(update={"is_processing": True}) for img in images]
        kept = draft.add_custom_images(pending, kind)
        slots = draft.custom_weapon_images if kind == "weapon" else draft.custom_companion_images

        if len(images) > 1:
            await self.advisor.on_batch_upload(images)
        else:
            self.advisor.chips = []

        for image in kept:
            index = next((i for i, s in enumerate(slots) if s.id == image.id), None)
            if index is None:
                continue
            try:
                src = await self.backend.remove_background(image, False)
                width, height = get_image_dimensions(src)
            except (BackendError, ImageDecodeError) as exc:
                logger.error("Automatic background removal failed for %s: %s", image.name, exc)
                self.toasts.error(f"Automatic background removal failed: {image.name}")
                slots[index] = image.model_copy(update={"is_processing": False, "has_error": True})
                continue

            processed = image.model_copy(
                update={
                    "src": src,
                    "name": f"processed-{image.name}",
                    "width": width,
                    "height": height,
                    "is_processing": False,
                    "is_placeholder": False,
                }
            )
            slots[index] = processed
            if len(images) == 1:
                await self.advisor.on_single_upload(processed, SuggestionTarget.PROMPT)

    async def paste_image(self, image: UploadedImage) -> UploadedImage:
        """Crop a pasted image to the active mode's ratio and route it to that mode.

        Structured scenes take it as the character first, then as custom
        weapon images (companions once the weapon slots are full); video takes
        it as the first empty frame.
        """
        mode = self.modes.mode
        ratios = {
            AppMode.DRAW: self.modes.draw.aspect_ratio,
            AppMode.VIDEO: self.modes.video.aspect_ratio,
            AppMode.STRUCTURED_SCENE: self.modes.scene.aspect_ratio,
        }
        ratio = ratios.get(mode, self.modes.generate.aspect_ratio)
        if not ratio:
            raise InputValidationError("Select an aspect ratio before pasting an image")

        src = crop_to_aspect_ratio(image.src, ratio)
        width, height = get_image_dimensions(src)
        pasted = UploadedImage(src=src, name=image.name, width=width, height=height)

        if mode == AppMode.BACKGROUND_REMOVAL:
            await self.set_background_removal_image(pasted)
        elif mode == AppMode.GENERATE:
            await self.upload_references([pasted])
        elif mode == AppMode.STRUCTURED_SCENE:
            scene = self.modes.scene
            if scene.character_image is None:
                await self.set_character_image(pasted)
            else:
                kind = "weapon" if len(scene.custom_weapon_images) < MAX_CUSTOM_IMAGES else "companion"
                await self.upload_custom_images([pasted], kind)
        elif mode == AppMode.VIDEO:
            if self.modes.video.start_frame is None:
                await self.set_video_frame(pasted, "start")
            elif self.modes.video.end_frame is None:
                await self.set_video_frame(pasted, "end")
        self.toasts.success("Image pasted and cropped")
        return pasted

    # ------------------------------------------------------------------
    # Reusing results
    # ------------------------------------------------------------------

    async def use_image(self, image: GeneratedImage, action: ImageAction) -> None:
        """Route a generated result into another mode's draft."""
        upload = image.to_upload()
        if action == ImageAction.REFERENCE:
            if image.aspect_ratio in ASPECT_RATIOS:
                self.modes.generate.select_aspect_ratio(image.aspect_ratio)
            self.modes.switch(AppMode.GENERATE)
            self.toasts.success("Image added to references")
            await self.upload_references([upload])
        elif action == ImageAction.REMOVE_BACKGROUND:
            self.modes.switch(AppMode.BACKGROUND_REMOVAL)
            await self.set_background_removal_image(upload)
        elif action == ImageAction.DRAW_BACKGROUND:
            self.modes.switch(AppMode.DRAW)
            self.toasts.success("Image set as canvas background")
            await self.set_draw_background(upload)

    async def use_history_image(self, item: HistoryItem, mode: AppMode) -> None:
        """Send a history record to the given mode's draft."""
        upload = item.to_upload("history-img.png")
        if mode == AppMode.BACKGROUND_REMOVAL:
            self.modes.switch(mode)
            await self.set_background_removal_image(upload)
        elif mode == AppMode.DRAW:
            self.modes.switch(mode)
            await self.set_draw_background(upload)
        elif mode == AppMode.GENERATE:
            self.modes.switch(mode)
            await self.upload_references([upload])
        elif mode == AppMode.STRUCTURED_SCENE:
            self.modes.switch(mode)
            if self.modes.scene.character_image is None:
                await self.set_character_image(upload)
        else:
            raise ValueError(f"History images cannot be sent to {mode}")

    async def inspect_history_item(self, item_id: str) -> HistoryItem:
        """Select a history record, analyzing it on first inspection only."""
        item = self.history.get(item_id)
        if item is None:
            raise InputValidationError(f"No history item with id {item_id}")

        view = self.modes.history_view
        view.selected_id = item_id
        view.analysis_error = None
        if item.analysis is not None:
            return item

        try:
            analysis = await self.backend.analyze_image(item.to_upload("analysis.png"))
        except BackendError as exc:
            view.analysis_error = str(exc)
            logger.error("Analysis of history item %s failed: %s", item_id, exc)
            return item
        return self.history.set_analysis(item_id, analysis) or item

    async def prepare_cinematic_upgrade(self, image: GeneratedImage) -> bool:
        """Load a structured-scene result back as the character for a realism pass."""
        if not is_structured_prompt(image.prompt):
            self.toasts.error("Only structured scene results can be upgraded")
            return False

        self.modes.switch(AppMode.STRUCTURED_SCENE)
        draft = self.modes.scene
        draft.prompt = (
            f"{image.prompt}, {CINEMATIC_REALISM_CLAUSE}" if image.prompt else CINEMATIC_REALISM_CLAUSE
        )
        if image.aspect_ratio in ASPECT_RATIOS:
            draft.aspect_ratio = image.aspect_ratio
        draft.reset_equipment()
        draft.cinematic_realism = True
        self.toasts.success("Upgrade settings loaded; review them and generate")
        await self.set_character_image(image.to_upload("upgrade-ref.png"))
        return True

    # ------------------------------------------------------------------
    # Drafts
    # ------------------------------------------------------------------

    def clear_settings(self, mode: AppMode | None = None) -> None:
        """Reset a mode's draft (the active one by default)."""
        self.modes.clear(mode or self.modes.mode)
        self.advisor.chips = []
        self.toasts.info("Settings cleared")
