"""Factory for creating the generative backend from settings."""

from pathlib import Path

from legendstudio.api.base import GenerationBackendProtocol
from legendstudio.config.settings import Settings


def create_backend(settings: Settings) -> GenerationBackendProtocol:
    """Create the Gemini/Veo backend client.

    Args:
        settings: Resolved application settings.

    Returns:
        A client implementing ``GenerationBackendProtocol``.

    Raises:
        ValueError: If ``GEMINI_API_KEY`` is not set.
    """
    api_key = settings.api.gemini_api_key.get_secret_value()
    if not api_key:
        raise ValueError(
            "GEMINI_API_KEY is not set. "
            "Set it in your .env file or environment variables."
        )

    from legendstudio.api.gemini_client import GeminiClient

    return GeminiClient(
        api_key=api_key,
        image_model=settings.generation.image_model,
        text_model=settings.generation.text_model,
        video_model=settings.video.model,
        video_dir=Path(settings.output_dir) / "videos",
        poll_interval=settings.video.poll_interval,
    )
