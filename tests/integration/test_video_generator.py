"""Integration tests for the video orchestrator and its session history."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from legendstudio.assets import VideoGenerator
from legendstudio.core.catalogs import DIRECTOR_STYLES
from legendstudio.core.modes import AppMode
from legendstudio.core.session import Session
from legendstudio.errors import BackendError, InputValidationError, OrchestratorBusyError
from legendstudio.models.images import GeneratedImage, UploadedImage
from legendstudio.models.video import VeoHistoryItem, VeoParams

RIDLEY = DIRECTOR_STYLES["Ridley Scott"]


@pytest.fixture
def videos(session: Session) -> VideoGenerator:
    draft = session.modes.video
    draft.prompt = "a car chase"
    draft.aspect_ratio = "16:9"
    draft.director = "Ridley Scott"
    return session.videos


async def _generate_three(videos: VideoGenerator) -> list[VeoHistoryItem]:
    items = []
    for prompt in ("first", "second", "third"):
        videos.modes.video.prompt = prompt
        items.append(await videos.generate())
    return items


class TestGenerate:
    async def test_success_updates_history_and_display(
        self, videos: VideoGenerator, fake_backend: AsyncMock
    ) -> None:
        item = await videos.generate()

        assert videos.history == [item]
        assert videos.current == item
        assert item.prompt == f"a car chase {RIDLEY}"
        assert videos.last_success is not None
        assert videos.last_success.prompt == item.prompt
        assert videos.is_busy is False
        fake_backend.generate_video.assert_awaited_once()

    async def test_newest_first(self, videos: VideoGenerator) -> None:
        items = await _generate_three(videos)

        assert videos.history == list(reversed(items))

    @pytest.mark.parametrize(("prompt", "ratio"), [("  ", "16:9"), ("a chase", None)])
    async def test_invalid_draft_never_reaches_backend(
        self,
        videos: VideoGenerator,
        fake_backend: AsyncMock,
        prompt: str,
        ratio: str | None,
    ) -> None:
        videos.modes.video.prompt = prompt
        videos.modes.video.aspect_ratio = ratio

        with pytest.raises(InputValidationError):
            await videos.generate()
        fake_backend.generate_video.assert_not_awaited()

    async def test_failure_leaves_history_untouched(
        self, videos: VideoGenerator, fake_backend: AsyncMock
    ) -> None:
        first = await videos.generate()
        fake_backend.generate_video.side_effect = BackendError("Veo quota exceeded")

        with pytest.raises(BackendError):
            await videos.generate()

        assert videos.history == [first]
        assert videos.current == first
        assert videos.error == "Veo quota exceeded"

    async def test_rejects_concurrent_dispatch(
        self, videos: VideoGenerator, fake_backend: AsyncMock, tmp_path
    ) -> None:
        release = asyncio.Event()

        async def slow(params: VeoParams, progress: object = None) -> VeoHistoryItem:
            await release.wait()
            return VeoHistoryItem(video_path=str(tmp_path / "v.mp4"), prompt=params.prompt)

        fake_backend.generate_video.side_effect = slow
        first = asyncio.create_task(videos.generate())
        await asyncio.sleep(0)

        with pytest.raises(OrchestratorBusyError):
            await videos.generate()

        release.set()
        await first
        assert fake_backend.generate_video.await_count == 1


class TestRestoreAndRegenerate:
    def test_restore_without_source(self, videos: VideoGenerator) -> None:
        assert videos.restore() is False

    async def test_restore_prefers_displayed_clip(self, videos: VideoGenerator) -> None:
        first, second, _ = await _generate_three(videos)
        videos.current = first
        videos.modes.video.prompt = "edited"

        assert videos.restore() is True

        assert videos.modes.video.prompt == first.prompt

    async def test_restore_falls_back_to_last_success(self, videos: VideoGenerator) -> None:
        await _generate_three(videos)
        videos.use_text_only()
        videos.modes.video.prompt = "edited"

        assert videos.restore() is True
        assert videos.modes.video.prompt == videos.last_success.prompt

    async def test_regenerate_dispatches_displayed_params(
        self, videos: VideoGenerator, fake_backend: AsyncMock
    ) -> None:
        first, _, _ = await _generate_three(videos)
        videos.current = first

        again = await videos.regenerate()

        assert again is not None
        dispatched = fake_backend.generate_video.call_args.args[0]
        assert dispatched.prompt.startswith(first.prompt)
        assert videos.history[0] == again

    async def test_regenerate_without_source(
        self, videos: VideoGenerator, fake_backend: AsyncMock
    ) -> None:
        assert await videos.regenerate() is None
        fake_backend.generate_video.assert_not_awaited()


class TestUseTextOnly:
    async def test_keeps_prompt_and_clears_frames(
        self, videos: VideoGenerator, uploaded_image: UploadedImage
    ) -> None:
        videos.modes.video.start_frame = uploaded_image
        videos.modes.video.end_frame = uploaded_image
        item = await videos.generate()
        videos.modes.video.prompt = "something else"

        assert videos.use_text_only() is True

        draft = videos.modes.video
        assert draft.prompt == item.prompt
        assert draft.start_frame is None and draft.end_frame is None
        assert videos.current is None
        assert videos.history == [item]

    def test_nothing_displayed(self, videos: VideoGenerator) -> None:
        assert videos.use_text_only() is False
        assert videos.modes.video.prompt == "a car chase"


class TestDelete:
    async def test_displayed_middle_clip_repoints_to_previous(
        self, videos: VideoGenerator
    ) -> None:
        await _generate_three(videos)
        newest, middle, oldest = videos.history
        videos.current = middle

        assert videos.delete(middle.id) is True

        assert videos.current == newest
        assert videos.history == [newest, oldest]

    async def test_displayed_head_repoints_to_next(self, videos: VideoGenerator) -> None:
        await _generate_three(videos)
        newest, middle, _ = videos.history

        videos.delete(newest.id)

        assert videos.current == middle
        assert newest not in videos.history

    async def test_lone_clip_leaves_nothing_displayed(self, videos: VideoGenerator) -> None:
        item = await videos.generate()

        videos.delete(item.id)

        assert videos.current is None
        assert videos.history == []

    async def test_undisplayed_clip_keeps_display(self, videos: VideoGenerator) -> None:
        await _generate_three(videos)
        newest, _, oldest = videos.history

        videos.delete(oldest.id)

        assert videos.current == newest
        assert len(videos.history) == 2

    def test_unknown_id(self, videos: VideoGenerator) -> None:
        assert videos.delete("missing") is False


class TestSendImageToVideo:
    async def test_start_frame_switches_mode_and_asks_advisor(
        self, session: Session, fake_backend: AsyncMock, png_src: str
    ) -> None:
        image = GeneratedImage(src=png_src, width=100, height=100)

        await session.videos.send_image_to_video(image)

        assert session.modes.mode == AppMode.VIDEO
        assert session.modes.video.start_frame is not None
        assert session.modes.video.start_frame.name == "veo-frame-start.png"
        assert session.advisor.pending is not None
        assert session.advisor.pending.target == "video"
        fake_backend.get_editing_suggestion.assert_awaited_once()

    async def test_end_frame(self, session: Session, png_src: str) -> None:
        await session.videos.send_image_to_video(GeneratedImage(src=png_src), frame="end")

        assert session.modes.video.end_frame is not None
        assert session.modes.video.start_frame is None
