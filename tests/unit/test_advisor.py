"""Unit tests for the advisor merge engine."""

from unittest.mock import AsyncMock

import pytest

from legendstudio.core.advisor import AdvisorEngine, append_block, append_inline
from legendstudio.core.modes import AppMode, ModeController
from legendstudio.core.toasts import ToastCenter
from legendstudio.errors import BackendError, InputValidationError
from legendstudio.models.advisor import AdvisorChoice, SuggestionTarget
from legendstudio.models.images import UploadedImage
from legendstudio.models.toast import ToastSeverity


@pytest.fixture
def modes() -> ModeController:
    return ModeController()


@pytest.fixture
def toasts() -> ToastCenter:
    return ToastCenter()


@pytest.fixture
def advisor(fake_backend: AsyncMock, modes: ModeController, toasts: ToastCenter) -> AdvisorEngine:
    return AdvisorEngine(fake_backend, modes, toasts)


class TestAppendHelpers:
    def test_block_on_empty(self) -> None:
        assert append_block("", "new text") == "new text"
        assert append_block("   ", "new text") == "new text"

    def test_block_separates_with_blank_line(self) -> None:
        assert append_block("old text  ", "new text") == "old text\n\nnew text"

    def test_inline_separates_with_comma(self) -> None:
        assert append_inline("a cat", "wearing a hat") == "a cat, wearing a hat"
        assert append_inline("", "wearing a hat") == "wearing a hat"


class TestSingleUpload:
    async def test_sets_pending_suggestion(
        self, advisor: AdvisorEngine, uploaded_image: UploadedImage
    ) -> None:
        context = await advisor.on_single_upload(uploaded_image)

        assert context is not None
        assert advisor.pending == context
        assert context.analysis == "A rainy street"
        assert context.suggestion == "Add neon signs"
        assert advisor.is_suggesting is False

    async def test_placeholder_is_ignored(
        self, advisor: AdvisorEngine, fake_backend: AsyncMock
    ) -> None:
        result = await advisor.on_single_upload(UploadedImage.placeholder("1:1"))

        assert result is None
        fake_backend.get_editing_suggestion.assert_not_awaited()

    async def test_backend_error_toasts_and_leaves_prompt(
        self,
        advisor: AdvisorEngine,
        fake_backend: AsyncMock,
        modes: ModeController,
        toasts: ToastCenter,
        uploaded_image: UploadedImage,
    ) -> None:
        modes.generate.prompt = "keep me"
        fake_backend.get_editing_suggestion.side_effect = BackendError("quota")

        result = await advisor.on_single_upload(uploaded_image)

        assert result is None
        assert advisor.pending is None
        assert modes.generate.prompt == "keep me"
        assert toasts.active()[-1].severity == ToastSeverity.ERROR
        assert advisor.is_suggesting is False


class TestResolve:
    @pytest.mark.parametrize(
        ("choice", "expected"),
        [
            (AdvisorChoice.ANALYSIS, "base\n\nA rainy street"),
            (AdvisorChoice.SUGGESTION, "base\n\nAdd neon signs"),
            (AdvisorChoice.BOTH, "base\n\nA rainy street\n\nAdd neon signs"),
        ],
    )
    async def test_merges_choice(
        self,
        advisor: AdvisorEngine,
        modes: ModeController,
        uploaded_image: UploadedImage,
        choice: AdvisorChoice,
        expected: str,
    ) -> None:
        modes.generate.prompt = "base"
        await advisor.on_single_upload(uploaded_image)

        assert advisor.resolve(choice) == expected
        assert modes.generate.prompt == expected
        assert advisor.pending is None

    async def test_none_keeps_prompt_and_clears_pending(
        self, advisor: AdvisorEngine, modes: ModeController, uploaded_image: UploadedImage
    ) -> None:
        modes.generate.prompt = "base"
        await advisor.on_single_upload(uploaded_image)

        assert advisor.resolve(AdvisorChoice.NONE) is None
        assert modes.generate.prompt == "base"
        assert advisor.pending is None

    def test_without_pending_is_noop(self, advisor: AdvisorEngine) -> None:
        assert advisor.resolve(AdvisorChoice.BOTH) is None

    async def test_structured_mode_targets_scene_prompt(
        self, advisor: AdvisorEngine, modes: ModeController, uploaded_image: UploadedImage
    ) -> None:
        modes.switch(AppMode.STRUCTURED_SCENE)
        await advisor.on_single_upload(uploaded_image)

        advisor.resolve(AdvisorChoice.ANALYSIS)

        assert modes.scene.prompt == "A rainy street"
        assert modes.generate.prompt == ""

    async def test_video_target_uses_video_prompt(
        self, advisor: AdvisorEngine, modes: ModeController, uploaded_image: UploadedImage
    ) -> None:
        modes.video.prompt = "slow pan"
        await advisor.on_single_upload(uploaded_image, SuggestionTarget.VIDEO)

        advisor.resolve(AdvisorChoice.SUGGESTION)

        assert modes.video.prompt == "slow pan\n\nAdd neon signs"
        assert modes.generate.prompt == ""


class TestChips:
    async def test_single_image_batch_yields_no_chips(
        self, advisor: AdvisorEngine, fake_backend: AsyncMock, uploaded_image: UploadedImage
    ) -> None:
        assert await advisor.on_batch_upload([uploaded_image]) == []
        fake_backend.get_batch_suggestions.assert_not_awaited()

    async def test_apply_chip_appends_and_discards_all(
        self,
        advisor: AdvisorEngine,
        modes: ModeController,
        uploaded_image: UploadedImage,
        png_src: str,
    ) -> None:
        modes.generate.prompt = "a street"
        other = UploadedImage(src=png_src, name="jacket.png")
        await advisor.on_upload([uploaded_image, other])
        assert advisor.chips == ["Use as jacket", "Use as backdrop"]

        merged = advisor.apply_chip(1)

        assert merged == "a street, Use as backdrop"
        assert advisor.chips == []

    def test_apply_chip_out_of_range(self, advisor: AdvisorEngine) -> None:
        with pytest.raises(IndexError):
            advisor.apply_chip(0)

    async def test_batch_error_leaves_no_chips(
        self,
        advisor: AdvisorEngine,
        fake_backend: AsyncMock,
        toasts: ToastCenter,
        uploaded_image: UploadedImage,
    ) -> None:
        fake_backend.get_batch_suggestions.side_effect = BackendError("down")

        chips = await advisor.on_batch_upload([uploaded_image, uploaded_image])

        assert chips == []
        assert toasts.active()[-1].severity == ToastSeverity.ERROR


class TestRewriting:
    async def test_optimize_replaces_prompt(
        self, advisor: AdvisorEngine, modes: ModeController
    ) -> None:
        modes.generate.prompt = "cat"

        assert await advisor.optimize() == "An optimized prompt"
        assert modes.generate.prompt == "An optimized prompt"

    async def test_optimize_requires_prompt(
        self, advisor: AdvisorEngine, fake_backend: AsyncMock
    ) -> None:
        with pytest.raises(InputValidationError):
            await advisor.optimize()
        fake_backend.optimize_prompt.assert_not_awaited()

    async def test_inspire_swaps_previous_idea(
        self, advisor: AdvisorEngine, fake_backend: AsyncMock, modes: ModeController
    ) -> None:
        modes.generate.prompt = "my idea"
        first = await advisor.inspire()
        assert first == "my idea\n\nA drone swarm over the bay"

        fake_backend.inspire_prompt.return_value = "A koi pond on a rooftop"
        second = await advisor.inspire()

        assert second == "my idea\n\nA koi pond on a rooftop"
        assert modes.generate.inspired_part == "A koi pond on a rooftop"

    async def test_inspire_appends_when_idea_was_edited_away(
        self, advisor: AdvisorEngine, fake_backend: AsyncMock, modes: ModeController
    ) -> None:
        await advisor.inspire()
        modes.generate.prompt = "rewritten by hand"
        fake_backend.inspire_prompt.return_value = "Rain on chrome"

        assert await advisor.inspire() == "rewritten by hand\n\nRain on chrome"

    async def test_inspire_video_appends(
        self, advisor: AdvisorEngine, modes: ModeController
    ) -> None:
        modes.video.prompt = "pan left"

        merged = await advisor.inspire(SuggestionTarget.VIDEO)

        assert merged == "pan left\n\nA drone swarm over the bay"
        assert modes.generate.inspired_part == ""
