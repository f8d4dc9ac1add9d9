"""Video command: generate a clip from a prompt and optional frames."""

import asyncio
from pathlib import Path

import typer

from legendstudio.cli.ui.console import print_error, print_muted, print_success
from legendstudio.cli.ui.progress import spinner
from legendstudio.cli.ui.setup import open_session, run_setup_check
from legendstudio.config import load_settings
from legendstudio.core.session import Session
from legendstudio.errors import StudioError
from legendstudio.models.images import UploadedImage
from legendstudio.models.video import VIDEO_ASPECT_RATIOS, VeoHistoryItem


def video(
    prompt: str = typer.Argument(..., help="What happens in the clip."),
    aspect_ratio: str | None = typer.Option(
        None, "--aspect-ratio", "-a", help="16:9 or 9:16 (default from config)."
    ),
    duration: int | None = typer.Option(
        None, "--duration", "-d", min=1, max=8, help="Clip length in seconds."
    ),
    start_frame: Path | None = typer.Option(None, "--start-frame", help="First frame image."),
    end_frame: Path | None = typer.Option(None, "--end-frame", help="Last frame image."),
    director: str | None = typer.Option(
        None, "--director", help="Director style (default: random)."
    ),
    seed: int | None = typer.Option(None, "--seed", help="Seed for the random director."),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Path to configuration YAML file."
    ),
) -> None:
    """Generate a video clip with the Veo model.

    Video generation can take several minutes; progress updates are printed
    while the operation is polled.
    """
    settings = load_settings(config_file)
    ratio = aspect_ratio or settings.video.aspect_ratio
    if ratio is not None and ratio not in VIDEO_ASPECT_RATIOS:
        print_error(f"Unsupported video aspect ratio {ratio!r}")
        raise typer.Exit(code=1)
    for frame in (start_frame, end_frame):
        if frame is not None and not frame.exists():
            print_error(f"Image not found: {frame}")
            raise typer.Exit(code=1)
    if not run_setup_check(settings):
        raise typer.Exit(code=1)

    async def _run(session: Session) -> VeoHistoryItem:
        draft = session.modes.video
        draft.prompt = prompt
        draft.aspect_ratio = ratio
        draft.duration = duration or settings.video.duration
        draft.director = director
        if start_frame is not None:
            draft.start_frame = UploadedImage.from_path(start_frame)
        if end_frame is not None:
            draft.end_frame = UploadedImage.from_path(end_frame)
        with spinner("Generating video..."):
            return await session.videos.generate()

    try:
        session = open_session(settings, seed=seed)
        result = asyncio.run(_run(session))
    except (StudioError, ValueError) as exc:
        print_error(str(exc))
        raise typer.Exit(code=1)

    print_success(f"Video saved: {result.video_path}")
    print_muted(f"Prompt: {result.prompt}")
