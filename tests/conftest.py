"""Pytest configuration and fixtures for Legend Studio tests."""

import random
import struct
import zlib
from collections.abc import Callable, Sequence
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from legendstudio.core.session import Session
from legendstudio.models.advisor import EditingSuggestion
from legendstudio.models.images import GeneratedImage, UploadedImage
from legendstudio.models.video import VeoHistoryItem, VeoParams
from legendstudio.state.storage import MemoryStorage
from legendstudio.utils.imaging import create_placeholder, to_data_url


class ScriptedRandom:
    """Deterministic random source: always the first element / first k elements."""

    def __init__(self) -> None:
        self.choices: list[Sequence[object]] = []

    def choice(self, seq: Sequence[object]) -> object:
        self.choices.append(seq)
        return seq[0]

    def sample(self, population: Sequence[object], k: int) -> list[object]:
        return list(population[:k])


def _make_png(ratio: str = "1:1", color: str = "#336699") -> str:
    return create_placeholder(ratio, color)[0]


@pytest.fixture
def make_png() -> Callable[..., str]:
    """Factory for small, decodable PNG data URLs."""
    return _make_png


@pytest.fixture
def png_src() -> str:
    return _make_png()


@pytest.fixture
def oversized_png() -> str:
    """PNG header declaring 20000x20000 pixels, past Pillow's bomb limit."""

    def chunk(kind: bytes, body: bytes) -> bytes:
        crc = zlib.crc32(kind + body)
        return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", crc)

    header = struct.pack(">IIBBBBB", 20000, 20000, 8, 2, 0, 0, 0)
    data = b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IDAT", b"")
    return to_data_url(data + chunk(b"IEND", b""))


@pytest.fixture
def uploaded_image(png_src: str) -> UploadedImage:
    return UploadedImage(src=png_src, name="face.png", width=100, height=100)


@pytest.fixture
def scripted_rng() -> ScriptedRandom:
    return ScriptedRandom()


@pytest.fixture
def fake_backend(png_src: str, tmp_path: Path) -> AsyncMock:
    """Backend fake returning decodable images for every operation."""
    backend = AsyncMock()

    async def generate_images(
        prompt: str,
        aspect_ratio: str,
        reference_images: Sequence[UploadedImage],
        count: int,
    ) -> list[GeneratedImage]:
        return [
            GeneratedImage(src=png_src, alt=f"Generated image {i + 1}", prompt=prompt)
            for i in range(count)
        ]

    async def generate_video(params: VeoParams, progress: object = None) -> VeoHistoryItem:
        return VeoHistoryItem(
            video_path=str(tmp_path / "video.mp4"),
            **params.model_dump(exclude={"start_frame", "end_frame"}),
            start_frame=params.start_frame,
            end_frame=params.end_frame,
        )

    backend.generate_images = AsyncMock(side_effect=generate_images)
    backend.remove_background = AsyncMock(return_value=png_src)
    backend.upscale_image = AsyncMock(return_value=png_src)
    backend.zoom_out_image = AsyncMock(return_value=png_src)
    backend.analyze_image = AsyncMock(return_value="A neon portrait")
    backend.get_editing_suggestion = AsyncMock(
        return_value=EditingSuggestion(analysis="A rainy street", suggestion="Add neon signs")
    )
    backend.get_batch_suggestions = AsyncMock(return_value=["Use as jacket", "Use as backdrop"])
    backend.optimize_prompt = AsyncMock(return_value="An optimized prompt")
    backend.inspire_prompt = AsyncMock(return_value="A drone swarm over the bay")
    backend.generate_video = AsyncMock(side_effect=generate_video)
    return backend


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def session(fake_backend: AsyncMock, memory_storage: MemoryStorage) -> Session:
    return Session(fake_backend, memory_storage, rng=random.Random(7))
