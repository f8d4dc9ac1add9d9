"""Integration tests for the studio session: reuse, history inspection, uploads."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from legendstudio.config.settings import OutputSettings, Settings, StorageSettings
from legendstudio.core.catalogs import CINEMATIC_REALISM_CLAUSE
from legendstudio.core.modes import MAX_CUSTOM_IMAGES, AppMode
from legendstudio.core.session import ImageAction, Session, is_structured_prompt
from legendstudio.errors import BackendError, InputValidationError
from legendstudio.models.images import GeneratedImage, UploadedImage
from legendstudio.models.toast import ToastSeverity
from legendstudio.state.storage import MemoryStorage
from legendstudio.utils.imaging import get_image_dimensions


@pytest.fixture
def result(make_png: Callable[..., str]) -> GeneratedImage:
    return GeneratedImage(
        id="res-1",
        src=make_png("3:4"),
        prompt="A character in a cyberpunk setting., rain",
        aspect_ratio="3:4",
        width=300,
        height=400,
    )


class TestConstruction:
    def test_loads_persisted_history(
        self, fake_backend: AsyncMock, png_src: str
    ) -> None:
        storage = MemoryStorage()
        first = Session(fake_backend, storage)
        first.history.commit([GeneratedImage(src=png_src, prompt="kept")])

        second = Session(fake_backend, storage)

        assert [item.prompt for item in second.history.items] == ["kept"]

    def test_from_settings_uses_file_storage(
        self, fake_backend: AsyncMock, tmp_path: Path
    ) -> None:
        settings = Settings(
            storage=StorageSettings(storage_dir=str(tmp_path / "state")),
            output=OutputSettings(output_dir=str(tmp_path / "out")),
        )

        session = Session.from_settings(settings, backend=fake_backend, seed=3)

        assert session.backend is fake_backend
        assert session.images.output_dir == tmp_path / "out"
        assert session.images.variants == settings.generation.variants


class TestUseImage:
    async def test_reference_selects_ratio_and_switches(
        self, session: Session, result: GeneratedImage
    ) -> None:
        await session.use_image(result, ImageAction.REFERENCE)

        draft = session.modes.generate
        assert session.modes.mode == AppMode.GENERATE
        assert draft.aspect_ratio == "3:4"
        assert draft.placeholder is not None
        assert [img.src for img in draft.user_references()] == [result.src]
        assert session.advisor.pending is not None

    async def test_remove_background(self, session: Session, result: GeneratedImage) -> None:
        await session.use_image(result, ImageAction.REMOVE_BACKGROUND)

        assert session.modes.mode == AppMode.BACKGROUND_REMOVAL
        assert session.modes.background_removal.image.src == result.src

    async def test_draw_background(self, session: Session, result: GeneratedImage) -> None:
        await session.use_image(result, ImageAction.DRAW_BACKGROUND)

        assert session.modes.mode == AppMode.DRAW
        assert session.modes.draw.background_image == result.src

    async def test_other_drafts_untouched(self, session: Session, result: GeneratedImage) -> None:
        session.modes.video.prompt = "keep"

        await session.use_image(result, ImageAction.DRAW_BACKGROUND)

        assert session.modes.video.prompt == "keep"


class TestHistoryReuse:
    async def test_structured_keeps_existing_character(
        self, session: Session, uploaded_image: UploadedImage, result: GeneratedImage
    ) -> None:
        (item,) = session.history.commit([result])
        session.modes.scene.character_image = uploaded_image

        await session.use_history_image(item, AppMode.STRUCTURED_SCENE)

        assert session.modes.mode == AppMode.STRUCTURED_SCENE
        assert session.modes.scene.character_image == uploaded_image

    async def test_structured_fills_empty_character(
        self, session: Session, result: GeneratedImage
    ) -> None:
        (item,) = session.history.commit([result])

        await session.use_history_image(item, AppMode.STRUCTURED_SCENE)

        assert session.modes.scene.character_image.name == "history-img.png"

    async def test_generate_appends_reference(
        self, session: Session, result: GeneratedImage
    ) -> None:
        (item,) = session.history.commit([result])

        await session.use_history_image(item, AppMode.GENERATE)

        assert len(session.modes.generate.user_references()) == 1

    async def test_video_is_not_a_target(self, session: Session, result: GeneratedImage) -> None:
        (item,) = session.history.commit([result])

        with pytest.raises(ValueError):
            await session.use_history_image(item, AppMode.VIDEO)


class TestInspectHistory:
    async def test_analyzes_once(
        self, session: Session, fake_backend: AsyncMock, result: GeneratedImage
    ) -> None:
        session.history.commit([result])

        first = await session.inspect_history_item("res-1")
        second = await session.inspect_history_item("res-1")

        assert first.analysis == "A neon portrait"
        assert second.analysis == "A neon portrait"
        assert session.modes.history_view.selected_id == "res-1"
        fake_backend.analyze_image.assert_awaited_once()

    async def test_analysis_failure_recorded(
        self, session: Session, fake_backend: AsyncMock, result: GeneratedImage
    ) -> None:
        session.history.commit([result])
        fake_backend.analyze_image.side_effect = BackendError("vision offline")

        item = await session.inspect_history_item("res-1")

        assert item.analysis is None
        assert session.modes.history_view.analysis_error == "vision offline"

    async def test_unknown_item(self, session: Session) -> None:
        with pytest.raises(InputValidationError):
            await session.inspect_history_item("nope")


class TestCinematicUpgrade:
    def test_structured_prompt_detection(self) -> None:
        assert is_structured_prompt("FACIAL REPLICATION. rest")
        assert not is_structured_prompt("a bowl of fruit")

    async def test_loads_upgrade_settings(
        self, session: Session, result: GeneratedImage
    ) -> None:
        draft = session.modes.scene
        draft.weapon = "Mantis blades"
        draft.selected_scenes = ["Afterlife Bar"]

        assert await session.prepare_cinematic_upgrade(result) is True

        assert session.modes.mode == AppMode.STRUCTURED_SCENE
        assert draft.prompt == f"{result.prompt}, {CINEMATIC_REALISM_CLAUSE}"
        assert draft.aspect_ratio == "3:4"
        assert draft.cinematic_realism is True
        assert draft.weapon is None
        assert draft.selected_scenes == []
        assert draft.character_image.name == "upgrade-ref.png"

    async def test_rejects_flat_result(self, session: Session, png_src: str) -> None:
        image = GeneratedImage(src=png_src, prompt="a bowl of fruit")

        assert await session.prepare_cinematic_upgrade(image) is False

        assert session.modes.mode == AppMode.GENERATE
        assert session.toasts.active()[-1].severity == ToastSeverity.ERROR


class TestCustomImages:
    async def test_single_upload_is_processed(
        self, session: Session, fake_backend: AsyncMock, uploaded_image: UploadedImage
    ) -> None:
        await session.upload_custom_images([uploaded_image], "weapon")

        (slot,) = session.modes.scene.custom_weapon_images
        assert slot.name == "processed-face.png"
        assert slot.is_processing is False
        assert slot.has_error is False
        fake_backend.remove_background.assert_awaited_once()
        assert session.advisor.pending is not None

    async def test_failed_removal_flags_slot(
        self, session: Session, fake_backend: AsyncMock, uploaded_image: UploadedImage, png_src: str
    ) -> None:
        other = UploadedImage(src=png_src, name="drone.png")
        fake_backend.remove_background.side_effect = [BackendError("busy"), png_src]

        await session.upload_custom_images([uploaded_image, other], "companion")

        first, second = session.modes.scene.custom_companion_images
        assert first.has_error is True and first.is_processing is False
        assert second.name == "processed-drone.png"
        assert session.advisor.chips == ["Use as jacket", "Use as backdrop"]

    async def test_capped_at_limit(
        self, session: Session, fake_backend: AsyncMock, png_src: str
    ) -> None:
        uploads = [UploadedImage(src=png_src, name=f"{i}.png") for i in range(MAX_CUSTOM_IMAGES + 2)]

        await session.upload_custom_images(uploads, "weapon")

        assert len(session.modes.scene.custom_weapon_images) == MAX_CUSTOM_IMAGES
        assert fake_backend.remove_background.await_count == MAX_CUSTOM_IMAGES


class TestPaste:
    async def test_requires_ratio(self, session: Session, uploaded_image: UploadedImage) -> None:
        with pytest.raises(InputValidationError):
            await session.paste_image(uploaded_image)

    async def test_generate_mode_crops_to_reference(
        self, session: Session, uploaded_image: UploadedImage
    ) -> None:
        session.modes.generate.aspect_ratio = "16:9"

        pasted = await session.paste_image(uploaded_image)

        assert get_image_dimensions(pasted.src) == (100, 56)
        assert session.modes.generate.user_references()[-1].src == pasted.src

    async def test_video_fills_frames_in_order(
        self, session: Session, uploaded_image: UploadedImage
    ) -> None:
        session.modes.switch(AppMode.VIDEO)
        session.modes.video.aspect_ratio = "9:16"

        await session.paste_image(uploaded_image)
        await session.paste_image(uploaded_image)

        draft = session.modes.video
        assert draft.start_frame is not None and draft.end_frame is not None
        assert (draft.start_frame.width, draft.start_frame.height) == (56, 100)

    async def test_structured_character_then_weapon(
        self, session: Session, uploaded_image: UploadedImage
    ) -> None:
        session.modes.switch(AppMode.STRUCTURED_SCENE)
        session.modes.scene.aspect_ratio = "1:1"

        await session.paste_image(uploaded_image)
        await session.paste_image(uploaded_image)

        scene = session.modes.scene
        assert scene.character_image is not None
        assert len(scene.custom_weapon_images) == 1


class TestClearSettings:
    def test_clears_only_active_mode(self, session: Session) -> None:
        session.modes.generate.prompt = "cat"
        session.modes.video.prompt = "chase"

        session.clear_settings()

        assert session.modes.generate.prompt == ""
        assert session.modes.video.prompt == "chase"
