"""Main Typer application for the Legend Studio CLI."""

import typer

from legendstudio import __version__
from legendstudio.cli.commands.config_cmd import config
from legendstudio.cli.commands.effects import remove_bg, upscale, zoom_out
from legendstudio.cli.commands.generate import generate, scene
from legendstudio.cli.commands.history import history_app
from legendstudio.cli.commands.theme import theme
from legendstudio.cli.commands.video import video
from legendstudio.cli.ui.console import console
from legendstudio.cli.ui.setup import configure_logging

app = typer.Typer(
    name="legendstudio",
    help="Compose cyberpunk scene prompts and generate images and videos with Gemini.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"legendstudio version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show progress logging from the generation engine.",
    ),
) -> None:
    """Legend Studio: structured prompt composition and generation.

    Quick start: [bold]legendstudio generate "a neon alley at dusk"[/bold]
    for free-text images, or [bold]legendstudio scene --random --count 5[/bold]
    for a batch of structured scenes.

    Setup: run [bold]legendstudio config --check[/bold] to verify the
    GEMINI_API_KEY is configured.
    """
    configure_logging(verbose)


# Register commands from individual modules
app.command()(generate)
app.command()(scene)
app.command()(video)
app.command(name="remove-bg")(remove_bg)
app.command()(upscale)
app.command(name="zoom-out")(zoom_out)
app.command()(theme)
app.command()(config)
app.add_typer(history_app, name="history")
