"""Single-image effect commands: background removal, upscale and zoom-out."""

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path

import typer

from legendstudio.cli.ui.console import print_error, print_success
from legendstudio.cli.ui.progress import spinner
from legendstudio.cli.ui.setup import open_session, run_setup_check
from legendstudio.config import load_settings
from legendstudio.core.session import Session
from legendstudio.errors import StudioError
from legendstudio.models.images import GeneratedImage, UploadedImage


def _run_effect(
    image: Path,
    config_file: str | None,
    message: str,
    effect: Callable[[Session, UploadedImage], Awaitable[GeneratedImage]],
) -> None:
    if not image.exists():
        print_error(f"Image not found: {image}")
        raise typer.Exit(code=1)
    settings = load_settings(config_file)
    if not run_setup_check(settings):
        raise typer.Exit(code=1)
    upload = UploadedImage.from_path(image)

    async def _run(session: Session) -> GeneratedImage:
        with spinner(message):
            return await effect(session, upload)

    try:
        session = open_session(settings)
        result = asyncio.run(_run(session))
    except (StudioError, ValueError) as exc:
        print_error(str(exc))
        raise typer.Exit(code=1)

    print_success(f"{result.id}  {result.alt or result.prompt}")


def remove_bg(
    image: Path = typer.Argument(..., help="Image to cut out."),
    green_screen: bool = typer.Option(
        False, "--green-screen", help="Replace the background with solid green."
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Path to configuration YAML file."
    ),
) -> None:
    """Remove the background from an image."""

    async def effect(session: Session, upload: UploadedImage) -> GeneratedImage:
        draft = session.modes.background_removal
        draft.image = upload
        draft.green_screen = green_screen
        return await session.images.remove_background(draft)

    _run_effect(image, config_file, "Removing background...", effect)


def upscale(
    image: Path = typer.Argument(..., help="Image to upscale."),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Path to configuration YAML file."
    ),
) -> None:
    """Upscale an image."""

    async def effect(session: Session, upload: UploadedImage) -> GeneratedImage:
        return await session.images.upscale(upload)

    _run_effect(image, config_file, "Upscaling...", effect)


def zoom_out(
    image: Path = typer.Argument(..., help="Image to extend."),
    prompt: str = typer.Option("", "--prompt", "-p", help="Prompt recorded with the result."),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Path to configuration YAML file."
    ),
) -> None:
    """Outpaint an image to reveal a wider view."""

    async def effect(session: Session, upload: UploadedImage) -> GeneratedImage:
        source = GeneratedImage(src=upload.src, alt=upload.name, prompt=prompt)
        return await session.images.zoom_out(source)

    _run_effect(image, config_file, "Zooming out...", effect)
