"""Google Gemini / Veo backend client.

Wraps the google-genai SDK for every backend operation: image generation
and effects on the Gemini image model, analysis and prompt rewriting on the
Gemini text model, and video generation on Veo.

The SDK calls are synchronous (Veo operations run for minutes), so each is
pushed to a thread via asyncio.to_thread() to keep the event loop free for
advisor requests running alongside a generation.
"""

import asyncio
import functools
import logging
import time
import uuid
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, TypeVar

from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from legendstudio.errors import BackendError, InputValidationError
from legendstudio.models.advisor import EditingSuggestion
from legendstudio.models.images import GeneratedImage, UploadedImage
from legendstudio.models.video import VeoHistoryItem, VeoParams, supported_durations
from legendstudio.utils.imaging import to_data_url

from .base import ProgressCallback

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_TEXT_MODEL = "gemini-2.5-flash"
DEFAULT_VIDEO_MODEL = "veo-3.1-fast-generate-preview"

# Polling interval in seconds while waiting for video generation
_POLL_INTERVAL = 10

# Transient errors worth retrying
_RETRYABLE_ERRORS = (
    ConnectionError,
    TimeoutError,
    OSError,
)

REMOVE_BACKGROUND_PROMPT = (
    "Remove the background from this image completely. Keep the main subject "
    "intact with clean, precise edges and output it on a transparent background."
)
GREEN_SCREEN_PROMPT = (
    "Remove the background from this image and replace it with a flat, evenly "
    "lit chroma-key green (#00FF00). Keep the main subject intact with clean edges."
)
UPSCALE_PROMPT = (
    "Upscale this image to a higher resolution. Sharpen fine detail and texture "
    "without changing the composition, colors or content."
)
ZOOM_OUT_PROMPT = (
    "Zoom out from this image: keep the original content unchanged in the "
    "center and outpaint a wider view of the surrounding scene in the same style."
)
ANALYZE_PROMPT = (
    "Describe this image as a detailed image-generation prompt: subject, "
    "clothing, pose, setting, lighting, camera and style. Reply with the prompt only."
)
EDITING_SUGGESTION_PROMPT = (
    "Act as an image editing advisor. Return JSON with two fields: 'analysis', "
    "a detailed prompt describing what the image shows, and 'suggestion', one "
    "concrete creative edit that would improve or transform the image."
)
BATCH_SUGGESTION_PROMPT = (
    "Suggest one short creative way (under 15 words) to use this image in a new "
    "generated picture. Reply with the suggestion only."
)
OPTIMIZE_PROMPT = (
    "Rewrite the following image-generation prompt to be more vivid, specific "
    "and effective. Keep its intent. Reply with the rewritten prompt only.\n\n"
)
INSPIRE_PROMPT = (
    "Invent one original, visually striking image-generation prompt in a "
    "cyberpunk world. Reply with the prompt only."
)


def _image_part(image: UploadedImage) -> types.Part:
    return types.Part.from_bytes(data=image.data, mime_type=image.mime_type)


def _sdk_image(image: UploadedImage) -> types.Image:
    return types.Image(image_bytes=image.data, mime_type=image.mime_type)


def _extract_images(response: Any) -> list[str]:
    """Collect every inline image part of a response as data URLs."""
    images: list[str] = []
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is None or not inline.data:
                continue
            images.append(to_data_url(inline.data, inline.mime_type or "image/png"))
    return images


class GeminiClient:
    """Gemini/Veo client implementing GenerationBackendProtocol."""

    def __init__(
        self,
        api_key: str,
        image_model: str = DEFAULT_IMAGE_MODEL,
        text_model: str = DEFAULT_TEXT_MODEL,
        video_model: str = DEFAULT_VIDEO_MODEL,
        video_dir: Path = Path("outputs/videos"),
        poll_interval: int = _POLL_INTERVAL,
    ) -> None:
        self.client = genai.Client(api_key=api_key)
        self.image_model = image_model
        self.text_model = text_model
        self.video_model = video_model
        self.video_dir = video_dir
        self.poll_interval = poll_interval

    # ------------------------------------------------------------------
    # Thread + retry plumbing
    # ------------------------------------------------------------------

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=60),
        retry=retry_if_exception_type(_RETRYABLE_ERRORS),
        reraise=True,
    )
    async def _in_thread(self, func: Callable[..., T], *args: Any) -> T:
        return await asyncio.to_thread(func, *args)

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        """Run a synchronous SDK call in a thread, retrying transient errors.

        Raises:
            BackendError: If the call still fails after retries.
        """
        try:
            return await self._in_thread(func, *args)
        except _RETRYABLE_ERRORS as exc:
            raise BackendError(f"Gemini request failed: {exc}") from exc

    def _generate_content(self, model: str, contents: list[Any], config: Any = None) -> Any:
        try:
            return self.client.models.generate_content(
                model=model,
                contents=contents,
                config=config,
            )
        except genai_errors.APIError as exc:
            raise BackendError(f"Gemini rejected the request: {exc}") from exc

    def _edit_image_sync(self, image: UploadedImage, instruction: str) -> str:
        config = types.GenerateContentConfig(response_modalities=["IMAGE"])
        response = self._generate_content(
            self.image_model, [_image_part(image), instruction], config
        )
        images = _extract_images(response)
        if not images:
            raise BackendError("Gemini returned no image")
        return images[0]

    def _text_sync(self, contents: list[Any]) -> str:
        response = self._generate_content(self.text_model, contents)
        text = (response.text or "").strip()
        if not text:
            raise BackendError("Gemini returned an empty response")
        return text

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def _generate_images_sync(
        self,
        prompt: str,
        aspect_ratio: str,
        reference_images: Sequence[UploadedImage],
        count: int,
    ) -> list[GeneratedImage]:
        config = types.GenerateContentConfig(
            response_modalities=["IMAGE"],
            image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
        )
        contents: list[Any] = [_image_part(img) for img in reference_images]
        contents.append(prompt)

        logger.info(
            "Starting Gemini image generation: model=%s, ratio=%s, references=%d, count=%d",
            self.image_model,
            aspect_ratio,
            len(reference_images),
            count,
        )

        results: list[GeneratedImage] = []
        # The image model returns one image per call
        for index in range(count):
            response = self._generate_content(self.image_model, contents, config)
            for src in _extract_images(response)[:1]:
                results.append(
                    GeneratedImage(
                        src=src,
                        alt=f"Generated image {index + 1}",
                        prompt=prompt,
                        aspect_ratio=aspect_ratio,
                    )
                )

        if not results:
            raise BackendError("Image generation failed: no images returned by Gemini")
        return results

    async def generate_images(
        self,
        prompt: str,
        aspect_ratio: str,
        reference_images: Sequence[UploadedImage],
        count: int,
    ) -> list[GeneratedImage]:
        """Generate ``count`` variants; reference images are sent before the prompt."""
        return await self._run(
            self._generate_images_sync, prompt, aspect_ratio, list(reference_images), count
        )

    async def remove_background(self, image: UploadedImage, green_screen: bool) -> str:
        instruction = GREEN_SCREEN_PROMPT if green_screen else REMOVE_BACKGROUND_PROMPT
        return await self._run(self._edit_image_sync, image, instruction)

    async def upscale_image(self, image: UploadedImage) -> str:
        return await self._run(self._edit_image_sync, image, UPSCALE_PROMPT)

    async def zoom_out_image(self, image: UploadedImage) -> str:
        return await self._run(self._edit_image_sync, image, ZOOM_OUT_PROMPT)

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    async def analyze_image(self, image: UploadedImage) -> str:
        return await self._run(self._text_sync, [_image_part(image), ANALYZE_PROMPT])

    def _editing_suggestion_sync(self, image: UploadedImage) -> EditingSuggestion:
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=EditingSuggestion,
        )
        response = self._generate_content(
            self.text_model, [_image_part(image), EDITING_SUGGESTION_PROMPT], config
        )
        if not response.text:
            raise BackendError("Gemini returned no editing suggestion")
        try:
            return EditingSuggestion.model_validate_json(response.text)
        except ValueError as exc:
            raise BackendError(f"Malformed editing suggestion: {exc}") from exc

    async def get_editing_suggestion(self, image: UploadedImage) -> EditingSuggestion:
        return await self._run(self._editing_suggestion_sync, image)

    async def get_batch_suggestions(self, images: Sequence[UploadedImage]) -> list[str]:
        suggestions: list[str] = []
        for image in images:
            suggestions.append(
                await self._run(self._text_sync, [_image_part(image), BATCH_SUGGESTION_PROMPT])
            )
        return suggestions

    async def optimize_prompt(self, text: str) -> str:
        return await self._run(self._text_sync, [OPTIMIZE_PROMPT + text])

    async def inspire_prompt(self) -> str:
        return await self._run(self._text_sync, [INSPIRE_PROMPT])

    # ------------------------------------------------------------------
    # Video
    # ------------------------------------------------------------------

    def _generate_video_sync(
        self,
        params: VeoParams,
        progress: ProgressCallback | None,
    ) -> VeoHistoryItem:
        """Synchronous generate + poll loop run inside a thread."""
        config = types.GenerateVideosConfig(
            aspect_ratio=params.aspect_ratio,
            duration_seconds=params.duration,
            number_of_videos=1,
            last_frame=_sdk_image(params.end_frame) if params.end_frame else None,
        )

        logger.info(
            "Starting Veo generation: model=%s, ratio=%s, duration=%ss",
            self.video_model,
            params.aspect_ratio,
            params.duration,
        )

        try:
            operation = self.client.models.generate_videos(
                model=self.video_model,
                prompt=params.prompt,
                image=_sdk_image(params.start_frame) if params.start_frame else None,
                config=config,
            )
            polls = 0
            while not operation.done:
                polls += 1
                if progress is not None:
                    progress(f"Video still rendering ({polls * self.poll_interval}s elapsed)")
                time.sleep(self.poll_interval)
                operation = self.client.operations.get(operation)
        except genai_errors.APIError as exc:
            raise BackendError(f"Veo rejected the request: {exc}") from exc

        if not operation.response or not operation.response.generated_videos:
            raise BackendError("Video generation failed: no videos returned by Veo API")

        video = operation.response.generated_videos[0]
        if video.video is None:
            raise BackendError("Video generation failed: video object is empty in Veo response")

        item_id = str(uuid.uuid4())
        output_path = self.video_dir / f"video-{item_id}.mp4"
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.client.files.download(file=video.video)
        video.video.save(str(output_path))
        logger.info("Video saved to %s", output_path)

        return VeoHistoryItem(
            id=item_id,
            video_path=str(output_path),
            **params.model_dump(exclude={"start_frame", "end_frame"}),
            start_frame=params.start_frame,
            end_frame=params.end_frame,
        )

    async def generate_video(
        self,
        params: VeoParams,
        progress: ProgressCallback | None = None,
    ) -> VeoHistoryItem:
        """Generate a clip from prompt plus optional first/last frames.

        Progress messages are delivered on the calling event loop, not on
        the worker thread that polls the operation.

        Raises:
            InputValidationError: The model does not accept ``params.duration``.
            BackendError: Veo failed or returned no video.
        """
        allowed = supported_durations(self.video_model)
        if allowed is not None and params.duration not in allowed:
            raise InputValidationError(
                f"{self.video_model} accepts durations {allowed}, got {params.duration}s"
            )

        relay = None
        if progress is not None:
            relay = functools.partial(asyncio.get_running_loop().call_soon_threadsafe, progress)

        return await self._run(self._generate_video_sync, params, relay)
