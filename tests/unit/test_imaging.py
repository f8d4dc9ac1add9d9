"""Unit tests for Pillow-based image helpers."""

from collections.abc import Callable
from pathlib import Path

import pytest

from legendstudio.utils.imaging import (
    ImageDecodeError,
    aspect_ratio_from_dimensions,
    create_placeholder,
    crop_to_aspect_ratio,
    data_url_to_bytes,
    estimate_size_from_base64,
    get_image_dimensions,
    parse_ratio,
    read_image_file,
    save_data_url,
    split_data_url,
    to_data_url,
)


class TestDataUrls:
    def test_round_trip_bytes(self) -> None:
        src = to_data_url(b"\x89PNG", "image/png")
        assert src.startswith("data:image/png;base64,")
        assert data_url_to_bytes(src) == b"\x89PNG"

    def test_split_bare_base64(self) -> None:
        assert split_data_url("QUJD") == ("image/png", "QUJD")

    def test_invalid_payload(self) -> None:
        with pytest.raises(ImageDecodeError):
            data_url_to_bytes("data:image/png;base64,***")

    def test_size_estimate_accounts_for_padding(self) -> None:
        assert estimate_size_from_base64(to_data_url(b"abcd")) == 4
        assert estimate_size_from_base64(to_data_url(b"abcdef")) == 6


class TestDimensions:
    def test_placeholder_dimensions(self) -> None:
        src, width, height = create_placeholder("3:4")
        assert (width, height) == (300, 400)
        assert get_image_dimensions(src) == (300, 400)

    def test_decode_failure(self) -> None:
        with pytest.raises(ImageDecodeError):
            get_image_dimensions(to_data_url(b"not an image"))

    def test_oversized_image_is_a_decode_failure(self, oversized_png: str) -> None:
        with pytest.raises(ImageDecodeError):
            get_image_dimensions(oversized_png)
        with pytest.raises(ImageDecodeError):
            crop_to_aspect_ratio(oversized_png, "1:1")

    @pytest.mark.parametrize(
        ("width", "height", "expected"),
        [(1920, 1080, "16:9"), (1024, 1024, "1:1"), (768, 1024, "3:4")],
    )
    def test_aspect_ratio_reduced(self, width: int, height: int, expected: str) -> None:
        assert aspect_ratio_from_dimensions(width, height) == expected

    def test_parse_ratio_rejects_garbage(self) -> None:
        assert parse_ratio("9:16") == (9, 16)
        with pytest.raises(ValueError):
            parse_ratio("wide")
        with pytest.raises(ValueError):
            parse_ratio("0:1")

    def test_crop_to_aspect_ratio(self, make_png: Callable[..., str]) -> None:
        cropped = crop_to_aspect_ratio(make_png("16:9"), "1:1")
        assert get_image_dimensions(cropped) == (900, 900)


class TestFiles:
    def test_save_and_read(self, tmp_path: Path, png_src: str) -> None:
        path = save_data_url(png_src, tmp_path / "nested" / "out.png")
        assert path.exists()
        assert read_image_file(path) == png_src
