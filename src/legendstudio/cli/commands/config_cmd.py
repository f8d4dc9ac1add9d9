"""Config command: view current configuration settings."""

import typer

from legendstudio.cli.ui.console import (
    console,
    print_header,
    print_key_value_table,
    print_muted,
)
from legendstudio.cli.ui.setup import run_setup_check
from legendstudio.config import load_settings


def config(
    check: bool = typer.Option(
        False,
        "--check",
        help="Validate that the required API key is set.",
    ),
    config_file: str | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration YAML file.",
    ),
) -> None:
    """View current configuration and validate setup.

    Displays all configuration values loaded from environment variables
    and config files. The API key is masked.
    """
    settings = load_settings(config_file)

    if check:
        if not run_setup_check(settings):
            raise typer.Exit(code=1)
        return

    print_header("Legend Studio Configuration")

    gemini = settings.api.gemini_api_key.get_secret_value()
    print_key_value_table(
        "API Keys",
        {"GEMINI_API_KEY": _mask_key(gemini) if gemini else "[red]not set[/red]"},
    )
    console.print()

    print_key_value_table(
        "Image Generation",
        {
            "Image Model": settings.generation.image_model,
            "Text Model": settings.generation.text_model,
            "Variants": str(settings.generation.variants),
            "Random Scenes": str(settings.generation.random_scene_count),
        },
    )
    console.print()

    print_key_value_table(
        "Video Generation",
        {
            "Model": settings.video.model,
            "Aspect Ratio": settings.video.aspect_ratio or "[dim]choose per clip[/dim]",
            "Duration": f"{settings.video.duration}s",
            "Poll Interval": f"{settings.video.poll_interval}s",
        },
    )
    console.print()

    print_key_value_table(
        "Storage",
        {
            "Storage Directory": settings.storage_dir,
            "Quota": f"{settings.storage.quota_bytes} bytes",
            "Output Directory": settings.output_dir,
            "Auto Download": str(settings.output.auto_download),
        },
    )

    print_muted("\nTip: use 'legendstudio config --check' to validate your setup.")
    print_muted("Config file: use --config to specify a custom YAML config.")


def _mask_key(key: str) -> str:
    """Mask an API key, showing only the last 4 characters."""
    if len(key) <= 4:
        return "****"
    return f"{'*' * (len(key) - 4)}{key[-4:]}"
