"""Image generation orchestrator.

Coordinates image dispatch to the backend with:
- Local input validation (nothing reaches the backend on bad input)
- Single-unit generation of several variants, revealed atomically
- Strictly sequential multi-scene batches with progressive reveal
- Per-scene failure isolation; only an all-failed batch is an error
- One operation in flight at a time per orchestrator
"""

import logging
import re
from collections.abc import Awaitable, Callable
from enum import StrEnum
from pathlib import Path

from legendstudio.api.base import GenerationBackendProtocol
from legendstudio.core.composer import PromptComposer, ScenePrompt
from legendstudio.core.modes import (
    MAX_REFERENCE_IMAGES,
    BackgroundRemovalDraft,
    GenerateDraft,
    SceneDraft,
)
from legendstudio.core.toasts import ToastCenter
from legendstudio.errors import (
    BackendError,
    InputValidationError,
    OrchestratorBusyError,
    TotalBatchFailure,
)
from legendstudio.models.images import GeneratedImage, UploadedImage
from legendstudio.state.history import HistoryStore
from legendstudio.utils.imaging import save_data_url, split_data_url, suffix_for_mime

logger = logging.getLogger(__name__)

DEFAULT_VARIANTS = 4

ResultCallback = Callable[[GeneratedImage], None]


class BatchStatus(StrEnum):
    COMPLETE = "complete"
    PARTIAL = "partial"


class SceneResult:
    """Result of one scene in a batch."""

    def __init__(
        self,
        scene: str,
        success: bool,
        image: GeneratedImage | None = None,
        error: str | None = None,
    ) -> None:
        self.scene = scene
        self.success = success
        self.image = image
        self.error = error


class GenerationSummary:
    """Aggregated results from a multi-scene batch."""

    def __init__(self, results: list[SceneResult]) -> None:
        self.results = results

    @property
    def succeeded(self) -> list[SceneResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> list[SceneResult]:
        return [r for r in self.results if not r.success]

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def images(self) -> list[GeneratedImage]:
        return [r.image for r in self.results if r.image is not None]

    @property
    def status(self) -> BatchStatus:
        return BatchStatus.PARTIAL if self.failed else BatchStatus.COMPLETE

    def format_summary(self) -> str:
        """Format a human-readable summary of batch results."""
        lines = [f"Generated {len(self.succeeded)}/{self.total} scenes successfully."]
        if self.failed:
            lines.append("Failed scenes:")
            for r in self.failed:
                lines.append(f"  {r.scene}: {r.error}")
        return "\n".join(lines)


class ImageGenerator:
    """Dispatches image generations and effects, feeding results to history.

    ``results`` is the visible result set: replaced atomically for single
    units, appended to scene by scene during a batch.

    Args:
        backend: Generative backend.
        composer: Prompt composer (owns the random source).
        history: History store every success is committed to.
        toasts: User notification channel.
        output_dir: If set, every result is also written there as a file.
        variants: Variants requested for a single-unit generation.
    """

    def __init__(
        self,
        backend: GenerationBackendProtocol,
        composer: PromptComposer,
        history: HistoryStore,
        toasts: ToastCenter,
        output_dir: Path | None = None,
        variants: int = DEFAULT_VARIANTS,
    ) -> None:
        self.backend = backend
        self.composer = composer
        self.history = history
        self.toasts = toasts
        self.output_dir = output_dir
        self.variants = variants
        self.results: list[GeneratedImage] = []
        self.error: str | None = None
        self._busy = False

    @property
    def is_busy(self) -> bool:
        return self._busy

    def _begin(self) -> None:
        if self._busy:
            raise OrchestratorBusyError("A generation is already in progress")
        self._busy = True
        self.error = None
        self.results = []

    def _fail(self, exc: Exception, label: str) -> None:
        self.error = str(exc)
        self.toasts.error(f"{label} failed: {exc}")

    def _download(self, image: GeneratedImage, stem: str) -> None:
        if self.output_dir is None:
            return
        safe_stem = re.sub(r"[^a-z0-9]+", "_", stem.lower()).strip("_") or "image"
        name = f"{safe_stem}-{image.id[:8]}"
        try:
            suffix = suffix_for_mime(split_data_url(image.src)[0])
            save_data_url(image.src, self.output_dir / f"{name}{suffix}")
        except (OSError, ValueError) as exc:
            logger.warning("Could not save %s: %s", name, exc)
            self.toasts.warning(f"Download failed: {name}")

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def validate_flat(draft: GenerateDraft) -> str:
        if not draft.aspect_ratio:
            raise InputValidationError("Select an aspect ratio first")
        if not draft.prompt.strip() and not draft.user_references():
            raise InputValidationError("Enter a prompt or upload a reference image")
        return draft.aspect_ratio

    @staticmethod
    def validate_structured(draft: SceneDraft) -> str:
        if not draft.aspect_ratio:
            raise InputValidationError("Select an aspect ratio first")
        if not draft.prompt.strip() and not draft.has_character:
            raise InputValidationError("Enter a prompt or upload a character image")
        return draft.aspect_ratio

    # ------------------------------------------------------------------
    # Single unit
    # ------------------------------------------------------------------

    async def _single_unit(
        self,
        prompt: str,
        aspect_ratio: str,
        references: list[UploadedImage],
        count: int,
        stem: str,
    ) -> list[GeneratedImage]:
        images = await self.backend.generate_images(prompt, aspect_ratio, references, count)
        images = [
            img.model_copy(update={"prompt": prompt, "aspect_ratio": aspect_ratio})
            for img in images
        ]
        self.results = images
        self.history.commit(images)
        for image in images:
            self._download(image, stem)
        return images

    async def generate_flat(self, draft: GenerateDraft) -> list[GeneratedImage]:
        """Free-text generation of several variants from the generate draft."""
        aspect_ratio = self.validate_flat(draft)
        self._begin()
        try:
            references = [UploadedImage.placeholder(aspect_ratio), *draft.user_references()]
            references = references[:MAX_REFERENCE_IMAGES]
            prompt = self.composer.compose_simple(draft.prompt)
            return await self._single_unit(
                prompt, aspect_ratio, references, self.variants, "generate"
            )
        except BackendError as exc:
            self._fail(exc, "Generation")
            raise
        finally:
            self._busy = False

    @staticmethod
    def structured_references(draft: SceneDraft, aspect_ratio: str) -> list[UploadedImage]:
        """Placeholder first, then character, custom weapon and companion images."""
        references = [UploadedImage.placeholder(aspect_ratio)]
        if draft.character_image is not None:
            references.append(draft.character_image)
        references.extend(draft.custom_weapon_images)
        references.extend(draft.custom_companion_images)
        return references

    async def generate_structured(
        self,
        draft: SceneDraft,
        override_prompt: str | None = None,
        on_result: ResultCallback | None = None,
    ) -> list[GeneratedImage] | GenerationSummary:
        """Structured scene generation.

        With scenes selected this runs a batch and returns its summary;
        otherwise it generates a single unit (one image for an override
        prompt, the configured variant count otherwise).
        """
        aspect_ratio = self.validate_structured(draft)
        self._begin()
        try:
            references = self.structured_references(draft, aspect_ratio)
            if draft.selected_scenes:
                return await self._run_batch(draft, aspect_ratio, references, on_result)

            if override_prompt:
                prompt = self.composer.compose_override(override_prompt)
                count = 1
            else:
                prompt, _ = self.composer.compose_structured(draft)
                count = self.variants
            return await self._single_unit(prompt, aspect_ratio, references, count, "scene")
        except BackendError as exc:
            self._fail(exc, "Generation")
            raise
        except TotalBatchFailure as exc:
            self._fail(exc, "Generation")
            raise
        finally:
            self._busy = False

    async def generate_random_scenes(
        self,
        draft: SceneDraft,
        count: int = 5,
        on_result: ResultCallback | None = None,
    ) -> GenerationSummary:
        """Pick ``count`` random scenes into the draft and run them as a batch."""
        if not draft.prompt.strip() and not draft.has_character:
            raise InputValidationError("Set up a character first")
        aspect_ratio = self.validate_structured(draft)
        self._begin()
        try:
            draft.selected_scenes = self.composer.random_scenes(count)
            self.toasts.info(f"Picked {len(draft.selected_scenes)} random scenes")
            references = self.structured_references(draft, aspect_ratio)
            return await self._run_batch(draft, aspect_ratio, references, on_result)
        except TotalBatchFailure as exc:
            self._fail(exc, "Generation")
            raise
        finally:
            self._busy = False

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    async def _dispatch_scene(
        self,
        draft: SceneDraft,
        scene_prompt: ScenePrompt,
        aspect_ratio: str,
        references: list[UploadedImage],
    ) -> GeneratedImage | None:
        images = await self.backend.generate_images(
            scene_prompt.prompt, aspect_ratio, references, 1
        )
        if not images:
            return None
        return images[0].model_copy(
            update={
                "alt": self.composer.scene_alt_text(draft, scene_prompt),
                "prompt": scene_prompt.prompt,
                "aspect_ratio": aspect_ratio,
            }
        )

    async def _run_batch(
        self,
        draft: SceneDraft,
        aspect_ratio: str,
        references: list[UploadedImage],
        on_result: ResultCallback | None,
    ) -> GenerationSummary:
        """Dispatch scenes one after another; never more than one in flight.

        There is no cancellation: once started, the loop runs through every
        scene.
        """
        scenes = list(draft.selected_scenes)
        self.toasts.info(f"Preparing to generate {len(scenes)} scenes...")
        scene_prompts = self.composer.compose_batch(draft, scenes)
        results: list[SceneResult] = []

        for scene_prompt in scene_prompts:
            scene = scene_prompt.scene
            logger.info("Generating scene %s", scene)
            self.toasts.info(f"Generating scene: {scene}")
            try:
                image = await self._dispatch_scene(draft, scene_prompt, aspect_ratio, references)
            except Exception as exc:
                error_msg = f"{type(exc).__name__}: {exc}"
                logger.error("Scene %s generation failed: %s", scene, error_msg)
                self.toasts.warning(f"Scene {scene} failed: {exc}")
                results.append(SceneResult(scene=scene, success=False, error=error_msg))
                continue

            if image is None:
                logger.warning("Scene %s returned no image", scene)
                results.append(
                    SceneResult(scene=scene, success=False, error="No image returned")
                )
                continue

            self.results = [*self.results, image]
            self.history.commit([image])
            self._download(image, f"scene-{scene}")
            if on_result is not None:
                on_result(image)
            results.append(SceneResult(scene=scene, success=True, image=image))

        summary = GenerationSummary(results)
        if not summary.succeeded:
            raise TotalBatchFailure("All scenes failed to generate.", summary)

        if summary.status == BatchStatus.PARTIAL:
            self.toasts.warning(
                f"Generated {len(summary.succeeded)} of {summary.total} scenes"
            )
        else:
            self.toasts.success(f"Finished generating {summary.total} scenes")
        return summary

    # ------------------------------------------------------------------
    # Effects
    # ------------------------------------------------------------------

    async def _effect(self, label: str, make: Callable[[], Awaitable[GeneratedImage]]) -> GeneratedImage:
        self._begin()
        try:
            image = await make()
            self.results = [image]
            self.history.commit([image])
            self._download(image, label)
            return image
        except BackendError as exc:
            self._fail(exc, label.replace("-", " ").capitalize())
            raise
        finally:
            self._busy = False

    async def remove_background(self, draft: BackgroundRemovalDraft) -> GeneratedImage:
        """Remove the background of the uploaded image (optionally onto green)."""
        source = draft.image
        if source is None:
            raise InputValidationError("Upload an image first")

        async def make() -> GeneratedImage:
            src = await self.backend.remove_background(source, draft.green_screen)
            return GeneratedImage(
                src=src,
                alt=f"{source.name} - background removed",
                prompt=f"Remove background from original image, green screen: {draft.green_screen}",
            )

        return await self._effect("remove-bg", make)

    async def upscale(self, image: GeneratedImage | UploadedImage) -> GeneratedImage:
        source = image if isinstance(image, UploadedImage) else image.to_upload("upscale.png")

        async def make() -> GeneratedImage:
            src = await self.backend.upscale_image(source)
            return GeneratedImage(src=src, alt="Upscaled image", prompt="Upscaled image")

        return await self._effect("upscale", make)

    async def zoom_out(self, image: GeneratedImage) -> GeneratedImage:
        """Outpaint a wider view; the result keeps the source prompt."""
        source = image.to_upload("zoomout.png")

        async def make() -> GeneratedImage:
            src = await self.backend.zoom_out_image(source)
            return GeneratedImage(src=src, alt="Zoomed out image", prompt=image.prompt)

        return await self._effect("zoomout", make)
