"""Theme command: show or change the saved UI theme preference."""

import typer

from legendstudio.cli.ui.console import print_error, print_info, print_success
from legendstudio.config import load_settings
from legendstudio.state.history import PreferencesStore
from legendstudio.state.storage import JsonFileStorage

THEMES = ("cyberpunk", "classic")


def theme(
    name: str | None = typer.Argument(None, help="cyberpunk or classic; omit to show."),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Path to configuration YAML file."
    ),
) -> None:
    """Show or set the theme preference."""
    settings = load_settings(config_file)
    preferences = PreferencesStore(
        JsonFileStorage(settings.storage_dir, settings.storage.quota_bytes)
    )
    if name is None:
        print_info(f"Current theme: {preferences.load_theme()}")
        return
    if name not in THEMES:
        print_error(f"Unknown theme {name!r}; choose from {', '.join(THEMES)}")
        raise typer.Exit(code=1)
    preferences.save_theme(name)
    print_success(f"Theme set to {name}")
