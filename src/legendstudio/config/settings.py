"""Pydantic settings models for Legend Studio configuration."""

from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from legendstudio.models.video import DEFAULT_VIDEO_DURATION, supported_durations


class APISettings(BaseSettings):
    """API key configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    gemini_api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias="GEMINI_API_KEY",
        description="Google Gemini/Veo API key (image, text and video generation)",
    )


class GenerationSettings(BaseSettings):
    """Image generation and advisor model settings."""

    model_config = SettingsConfigDict(extra="ignore")

    image_model: str = Field(
        default="gemini-2.5-flash-image",
        description="Model ID used for image generation and image effects",
    )
    text_model: str = Field(
        default="gemini-2.5-flash",
        description="Model ID used for analysis, suggestions and prompt rewriting",
    )
    variants: int = Field(
        default=4,
        ge=1,
        le=8,
        description="Number of variants requested for a single generation",
    )
    random_scene_count: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Scenes picked by random scene generation",
    )


class VideoSettings(BaseSettings):
    """Video generation settings."""

    model_config = SettingsConfigDict(extra="ignore")

    model: str = Field(
        default="veo-3.1-fast-generate-preview",
        description="Video generation model ID",
    )
    aspect_ratio: Literal["16:9", "9:16"] | None = Field(
        default=None,
        description="Default aspect ratio for new video drafts",
    )
    duration: int = Field(
        default=DEFAULT_VIDEO_DURATION,
        ge=1,
        le=8,
        description="Default clip duration in seconds",
    )
    poll_interval: int = Field(
        default=10,
        ge=0,
        le=60,
        description="Seconds between operation polls",
    )

    @model_validator(mode="after")
    def validate_duration_for_model(self) -> "VideoSettings":
        """Reject a default duration the configured model cannot render."""
        allowed = supported_durations(self.model)
        if allowed is not None and self.duration not in allowed:
            raise ValueError(
                f"{self.model} accepts durations {allowed}, got {self.duration}"
            )
        return self


class StorageSettings(BaseSettings):
    """Durable history and preference storage settings."""

    model_config = SettingsConfigDict(extra="ignore")

    storage_dir: str = Field(
        default=".legendstudio",
        description="Directory holding the persisted history and preference records",
    )
    quota_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=0,
        description="Maximum size of a single persisted record; 0 disables the check",
    )


class OutputSettings(BaseSettings):
    """Where generated files are written."""

    model_config = SettingsConfigDict(extra="ignore")

    output_dir: str = Field(
        default="outputs",
        description="Directory for downloaded images and generated videos",
    )
    auto_download: bool = Field(
        default=True,
        description="Write every generated image to the output directory",
    )


class Settings(BaseSettings):
    """Root settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    api: APISettings = Field(default_factory=APISettings)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    video: VideoSettings = Field(default_factory=VideoSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)

    @property
    def storage_dir(self) -> str:
        """Convenience accessor for the storage directory."""
        return self.storage.storage_dir

    @property
    def output_dir(self) -> str:
        """Convenience accessor for the output directory."""
        return self.output.output_dir

    def has_required_api_keys(self) -> bool:
        """Check if required API keys are configured."""
        return bool(self.api.gemini_api_key.get_secret_value())

    def get_missing_api_keys(self) -> list[str]:
        """Return list of missing required API keys."""
        missing = []
        if not self.api.gemini_api_key.get_secret_value():
            missing.append("GEMINI_API_KEY")
        return missing
