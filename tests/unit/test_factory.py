"""Unit tests for the backend factory."""

from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import SecretStr

from legendstudio.api.factory import create_backend
from legendstudio.config.settings import APISettings, OutputSettings, Settings


def _settings(gemini_key: str = "") -> Settings:
    s = Settings()
    s.api = APISettings.model_construct(gemini_api_key=SecretStr(gemini_key))
    s.output = OutputSettings(output_dir="out")
    return s


class TestCreateBackend:
    def test_returns_gemini_client(self) -> None:
        with patch("legendstudio.api.gemini_client.GeminiClient") as mock_cls:
            mock_cls.return_value = mock_cls
            client = create_backend(_settings(gemini_key="gk-test-key"))
            mock_cls.assert_called_once_with(
                api_key="gk-test-key",
                image_model="gemini-2.5-flash-image",
                text_model="gemini-2.5-flash",
                video_model="veo-3.1-fast-generate-preview",
                video_dir=Path("out") / "videos",
                poll_interval=10,
            )
            assert client is mock_cls

    def test_missing_key_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            create_backend(_settings(gemini_key=""))
