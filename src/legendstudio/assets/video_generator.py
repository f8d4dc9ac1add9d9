"""Video generation orchestrator with per-session video history.

Tracks the displayed clip (``current``) and the parameters of the last
successful dispatch so the user can restore or regenerate them. Video
history lives in memory only and is never persisted.
"""

import logging
from typing import Literal

from legendstudio.api.base import GenerationBackendProtocol
from legendstudio.core.advisor import AdvisorEngine
from legendstudio.core.composer import PromptComposer
from legendstudio.core.modes import AppMode, ModeController
from legendstudio.core.toasts import ToastCenter
from legendstudio.errors import (
    BackendError,
    InputValidationError,
    OrchestratorBusyError,
)
from legendstudio.models.advisor import SuggestionTarget
from legendstudio.models.images import GeneratedImage
from legendstudio.models.video import VeoHistoryItem, VeoParams

logger = logging.getLogger(__name__)

Frame = Literal["start", "end"]


class VideoGenerator:
    """Dispatches video generations from the video draft.

    Args:
        backend: Generative backend.
        composer: Resolves the director clause appended to each prompt.
        modes: Mode controller owning the video draft.
        toasts: User notification channel.
        advisor: Optional advisor; frames sent from images are analyzed.
    """

    def __init__(
        self,
        backend: GenerationBackendProtocol,
        composer: PromptComposer,
        modes: ModeController,
        toasts: ToastCenter,
        advisor: AdvisorEngine | None = None,
    ) -> None:
        self.backend = backend
        self.composer = composer
        self.modes = modes
        self.toasts = toasts
        self.advisor = advisor
        self.history: list[VeoHistoryItem] = []
        self.current: VeoHistoryItem | None = None
        self.last_success: VeoParams | None = None
        self.error: str | None = None
        self._busy = False

    @property
    def is_busy(self) -> bool:
        return self._busy

    def _source(self) -> VeoParams | None:
        return self.current or self.last_success

    def _progress(self, message: str) -> None:
        self.toasts.info(message)

    async def generate(self, params: VeoParams | None = None) -> VeoHistoryItem:
        """Generate a clip from ``params`` or, if omitted, the video draft.

        Raises:
            InputValidationError: Empty prompt or no aspect ratio selected.
            OrchestratorBusyError: A video generation is already running.
            BackendError: The backend failed; history is left untouched.
        """
        draft = self.modes.video
        source = params if params is not None else draft.to_params()
        if not source.prompt.strip():
            raise InputValidationError("Enter a video prompt")
        if not source.aspect_ratio:
            raise InputValidationError("Select a video aspect ratio first")
        if self._busy:
            raise OrchestratorBusyError("A video generation is already in progress")

        self._busy = True
        self.error = None
        try:
            prompt = self.composer.compose_video(source.prompt, draft.director)
            dispatched = VeoParams(
                prompt=prompt,
                start_frame=source.start_frame,
                end_frame=source.end_frame,
                aspect_ratio=source.aspect_ratio,
                duration=source.duration,
            )
            logger.info(
                "Generating %ss %s video", dispatched.duration, dispatched.aspect_ratio
            )
            result = await self.backend.generate_video(dispatched, progress=self._progress)
        except BackendError as exc:
            self.error = str(exc)
            self.toasts.error(f"Video generation failed: {exc}")
            raise
        finally:
            self._busy = False

        self.history = [result, *self.history]
        self.current = result
        self.last_success = dispatched
        self.toasts.success("Video generated!")
        return result

    def restore(self) -> bool:
        """Load the displayed clip's (or last successful) settings into the draft."""
        source = self._source()
        if source is None:
            self.toasts.info("No settings to restore")
            return False
        self.modes.video.load_params(source)
        self.toasts.success("Settings restored")
        return True

    async def regenerate(self) -> VeoHistoryItem | None:
        """Dispatch again with the displayed clip's (or last successful) params."""
        source = self._source()
        if source is None:
            self.toasts.info("Nothing to regenerate")
            return None
        return await self.generate(source)

    def use_text_only(self) -> bool:
        """Keep only the displayed clip's prompt in the draft and clear both frames."""
        if self.current is None:
            self.toasts.info("No video text to use")
            return False
        draft = self.modes.video
        draft.prompt = self.current.prompt
        draft.start_frame = None
        draft.end_frame = None
        self.current = None
        self.toasts.success("Using video text, frames cleared")
        return True

    def delete(self, video_id: str) -> bool:
        """Remove a clip from history, re-pointing the display first if needed.

        A displayed clip is replaced by the entry just before it; when the
        head is deleted the following entry takes its place. A lone clip
        leaves nothing displayed.
        """
        index = next(
            (i for i, item in enumerate(self.history) if item.id == video_id), None
        )
        if index is None:
            return False

        if self.current is not None and self.current.id == video_id:
            if len(self.history) > 1:
                self.current = self.history[index - 1] if index > 0 else self.history[1]
            else:
                self.current = None

        del self.history[index]
        logger.info("Deleted video %s", video_id)
        return True

    async def send_image_to_video(
        self, image: GeneratedImage, frame: Frame = "start"
    ) -> None:
        """Use a generated image as the start or end frame and switch to video mode."""
        upload = image.to_upload(f"veo-frame-{frame}.png")
        draft = self.modes.video
        if frame == "start":
            draft.start_frame = upload
        else:
            draft.end_frame = upload
        self.modes.switch(AppMode.VIDEO)
        self.toasts.success(f"Image sent to the {frame} frame")
        if self.advisor is not None:
            await self.advisor.on_single_upload(upload, SuggestionTarget.VIDEO)
