"""AI advisor: suggestions for uploaded images merged into the draft prompt.

A single upload yields a blocking analysis/suggestion choice; a multi-image
upload yields one short suggestion chip per image. Adopted text is always
appended, never substituted for what the user already wrote.
"""

import logging
from collections.abc import Sequence

from legendstudio.api.base import GenerationBackendProtocol
from legendstudio.errors import BackendError, InputValidationError
from legendstudio.models.advisor import AdvisorChoice, SuggestionContext, SuggestionTarget
from legendstudio.models.images import UploadedImage

from .modes import AppMode, ModeController
from .toasts import ToastCenter

logger = logging.getLogger(__name__)


def append_block(current: str, text: str) -> str:
    """Append ``text`` after a blank line (or use it alone when empty)."""
    return f"{current.rstrip()}\n\n{text}" if current.strip() else text


def append_inline(current: str, text: str) -> str:
    """Append ``text`` after a comma (or use it alone when empty)."""
    return f"{current.rstrip()}, {text}" if current.strip() else text


class AdvisorEngine:
    """Requests suggestions and merges the chosen text into a draft prompt.

    Runs independently of the generation orchestrators' busy state.
    """

    def __init__(
        self,
        backend: GenerationBackendProtocol,
        modes: ModeController,
        toasts: ToastCenter,
    ) -> None:
        self.backend = backend
        self.modes = modes
        self.toasts = toasts
        self.pending: SuggestionContext | None = None
        self.chips: list[str] = []
        self.is_suggesting = False

    # ------------------------------------------------------------------
    # Target prompts
    # ------------------------------------------------------------------

    def _prompt_target(self) -> str:
        """Prompt-bearing draft that text targeted at PROMPT lands in."""
        if self.modes.mode == AppMode.STRUCTURED_SCENE:
            return "scene"
        return "generate"

    def get_prompt(self, target: SuggestionTarget) -> str:
        if target == SuggestionTarget.VIDEO:
            return self.modes.video.prompt
        return getattr(self.modes, self._prompt_target()).prompt

    def set_prompt(self, target: SuggestionTarget, text: str) -> None:
        if target == SuggestionTarget.VIDEO:
            self.modes.video.prompt = text
        else:
            getattr(self.modes, self._prompt_target()).prompt = text

    # ------------------------------------------------------------------
    # Upload events
    # ------------------------------------------------------------------

    async def on_single_upload(
        self,
        image: UploadedImage,
        target: SuggestionTarget = SuggestionTarget.PROMPT,
    ) -> SuggestionContext | None:
        """Request an analysis/suggestion pair for one uploaded image."""
        self.chips = []
        if image.is_placeholder:
            return None

        self.is_suggesting = True
        self.pending = None
        try:
            result = await self.backend.get_editing_suggestion(image)
        except BackendError as exc:
            self.toasts.error(f"Could not get suggestions: {exc}")
            return None
        finally:
            self.is_suggesting = False

        self.pending = SuggestionContext(
            analysis=result.analysis,
            suggestion=result.suggestion,
            target=target,
        )
        return self.pending

    async def on_batch_upload(self, images: Sequence[UploadedImage]) -> list[str]:
        """Request one suggestion chip per image for a multi-image upload."""
        self.chips = []
        if len(images) < 2:
            return []

        self.is_suggesting = True
        try:
            self.chips = list(await self.backend.get_batch_suggestions(list(images)))
        except BackendError as exc:
            self.toasts.error(f"Could not get batch suggestions: {exc}")
        finally:
            self.is_suggesting = False
        return list(self.chips)

    async def on_upload(
        self,
        images: Sequence[UploadedImage],
        target: SuggestionTarget = SuggestionTarget.PROMPT,
    ) -> None:
        """Dispatch to the single- or multi-image flow by batch size."""
        if len(images) == 1:
            await self.on_single_upload(images[0], target)
        elif len(images) > 1:
            await self.on_batch_upload(images)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, choice: AdvisorChoice) -> str | None:
        """Apply the user's choice for the pending suggestion.

        Returns:
            The updated prompt, or None if nothing was merged.
        """
        context = self.pending
        if context is None:
            return None
        self.pending = None

        if choice == AdvisorChoice.ANALYSIS:
            text = context.analysis
        elif choice == AdvisorChoice.SUGGESTION:
            text = context.suggestion
        elif choice == AdvisorChoice.BOTH:
            text = f"{context.analysis}\n\n{context.suggestion}"
        else:
            return None

        if not text:
            return None
        merged = append_block(self.get_prompt(context.target), text)
        self.set_prompt(context.target, merged)
        self.toasts.success("AI suggestion applied")
        return merged

    def apply_chip(self, index: int) -> str:
        """Append one chip to the prompt and discard the whole chip set."""
        if not 0 <= index < len(self.chips):
            raise IndexError(f"No suggestion chip at index {index}")
        chip = self.chips[index]
        self.chips = []
        merged = append_inline(self.get_prompt(SuggestionTarget.PROMPT), chip)
        self.set_prompt(SuggestionTarget.PROMPT, merged)
        self.toasts.success("AI suggestion applied")
        return merged

    # ------------------------------------------------------------------
    # Prompt rewriting
    # ------------------------------------------------------------------

    async def optimize(self, target: SuggestionTarget = SuggestionTarget.PROMPT) -> str:
        """Replace the target prompt with an optimized rewrite."""
        current = self.get_prompt(target)
        if not current.strip():
            raise InputValidationError("Enter a prompt to optimize first")
        optimized = await self.backend.optimize_prompt(current)
        self.set_prompt(target, optimized)
        self.toasts.success("Prompt optimized")
        return optimized

    async def inspire(self, target: SuggestionTarget = SuggestionTarget.PROMPT) -> str:
        """Add an inspired prompt idea.

        In the image prompt, a previously inspired fragment that is still
        present is swapped for the new one instead of stacking ideas.
        """
        inspired = await self.backend.inspire_prompt()
        current = self.get_prompt(target)

        if target == SuggestionTarget.PROMPT:
            previous = self.modes.generate.inspired_part
            if previous and previous in current:
                merged = current.replace(previous, inspired, 1)
            else:
                merged = append_block(current, inspired)
            self.modes.generate.inspired_part = inspired
        else:
            merged = append_block(current, inspired)

        self.set_prompt(target, merged)
        return merged
