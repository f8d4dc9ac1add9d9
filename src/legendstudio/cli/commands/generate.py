"""Image commands: free-text generation and structured scene generation."""

import asyncio
from pathlib import Path

import typer

from legendstudio.assets.generator import GenerationSummary
from legendstudio.cli.ui.console import (
    console,
    print_error,
    print_header,
    print_info,
    print_muted,
    print_success,
)
from legendstudio.cli.ui.progress import create_progress, spinner
from legendstudio.cli.ui.setup import open_session, run_setup_check
from legendstudio.config import load_settings
from legendstudio.core.catalogs import ATTRIBUTE_LABELS, DIRECTOR_STYLES, all_scenes
from legendstudio.core.modes import AppMode
from legendstudio.core.session import Session
from legendstudio.errors import StudioError, TotalBatchFailure
from legendstudio.models.images import ASPECT_RATIOS, GeneratedImage, UploadedImage


def _load_images(paths: list[Path]) -> list[UploadedImage]:
    missing = [p for p in paths if not p.exists()]
    if missing:
        print_error(f"Image not found: {missing[0]}")
        raise typer.Exit(code=1)
    return [UploadedImage.from_path(p) for p in paths]


def _check_ratio(ratio: str | None) -> None:
    if ratio is not None and ratio not in ASPECT_RATIOS:
        print_error(f"Unsupported aspect ratio {ratio!r}; choose from {', '.join(ASPECT_RATIOS)}")
        raise typer.Exit(code=1)


def _print_results(images: list[GeneratedImage]) -> None:
    for image in images:
        label = image.alt or image.prompt[:60]
        print_success(f"{image.id}  {label}")


def _parse_attributes(values: list[str]) -> dict[str, str]:
    attributes: dict[str, str] = {}
    for value in values:
        key, sep, choice = value.partition("=")
        key = key.strip().replace("-", "_")
        if not sep or key not in ATTRIBUTE_LABELS:
            print_error(
                f"Invalid attribute {value!r}; use KEY=VALUE with KEY one of "
                f"{', '.join(ATTRIBUTE_LABELS)}"
            )
            raise typer.Exit(code=1)
        attributes[key] = choice.strip()
    return attributes


def generate(
    prompt: str = typer.Argument("", help="What to generate."),
    aspect_ratio: str = typer.Option(
        "1:1", "--aspect-ratio", "-a", help="One of 1:1, 3:4, 4:3, 9:16, 16:9."
    ),
    reference: list[Path] = typer.Option(
        [], "--reference", "-r", help="Reference image (repeatable, up to 7)."
    ),
    seed: int | None = typer.Option(None, "--seed", help="Seed for random prompt choices."),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Path to configuration YAML file."
    ),
) -> None:
    """Generate image variants from a free-text prompt and reference images."""
    _check_ratio(aspect_ratio)
    settings = load_settings(config_file)
    if not run_setup_check(settings):
        raise typer.Exit(code=1)
    references = _load_images(reference)

    async def _run(session: Session) -> list[GeneratedImage]:
        draft = session.modes.generate
        draft.prompt = prompt
        draft.select_aspect_ratio(aspect_ratio)
        draft.add_reference_images(references)
        with spinner(f"Generating {session.images.variants} variants..."):
            return await session.images.generate_flat(draft)

    try:
        session = open_session(settings, seed=seed)
        images = asyncio.run(_run(session))
    except (StudioError, ValueError) as exc:
        print_error(str(exc))
        raise typer.Exit(code=1)

    _print_results(images)
    print_muted(f"Saved to history ({len(session.history)} items).")


def scene(
    prompt: str = typer.Option("", "--prompt", "-p", help="Character description."),
    character: Path | None = typer.Option(
        None, "--character", help="Character image whose face is replicated."
    ),
    aspect_ratio: str = typer.Option("9:16", "--aspect-ratio", "-a", help="Image aspect ratio."),
    scenes: list[str] = typer.Option([], "--scene", "-s", help="Scene to render (repeatable)."),
    random_pick: bool = typer.Option(
        False, "--random", help="Render randomly picked scenes instead of --scene."
    ),
    count: int | None = typer.Option(
        None, "--count", min=1, help="Number of random scenes (default from config)."
    ),
    attribute: list[str] = typer.Option(
        [], "--attr", help="Appearance choice as KEY=VALUE, e.g. hair_color=silver."
    ),
    weapon: str | None = typer.Option(None, "--weapon", help="Weapon (default: none)."),
    vehicle: str | None = typer.Option(None, "--vehicle", help="Vehicle (default: none)."),
    companion: str | None = typer.Option(None, "--companion", help="Companion (default: solo)."),
    weapon_image: list[Path] = typer.Option(
        [], "--weapon-image", help="Custom weapon image (repeatable)."
    ),
    companion_image: list[Path] = typer.Option(
        [], "--companion-image", help="Custom companion image (repeatable)."
    ),
    director: str | None = typer.Option(None, "--director", help="Director style (default: random)."),
    mission: str | None = typer.Option(None, "--mission", help="Mission text (default: random)."),
    cinematic: bool = typer.Option(False, "--cinematic", help="Add the cinematic realism clause."),
    override: str | None = typer.Option(
        None, "--override", help="Use this prompt verbatim for a single image."
    ),
    list_catalog: bool = typer.Option(
        False, "--list", help="List known scenes and directors and exit."
    ),
    seed: int | None = typer.Option(None, "--seed", help="Seed for random prompt choices."),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Path to configuration YAML file."
    ),
) -> None:
    """Generate structured cyberpunk scenes, one image per selected scene.

    Scenes run one after another; a failed scene is reported and skipped,
    and only a batch where every scene fails is an error.
    """
    if list_catalog:
        print_header("Scenes")
        for name in all_scenes():
            console.print(f"  {name}")
        print_header("Directors")
        for name in DIRECTOR_STYLES:
            console.print(f"  {name}")
        return

    _check_ratio(aspect_ratio)
    attributes = _parse_attributes(attribute)
    settings = load_settings(config_file)
    if not run_setup_check(settings):
        raise typer.Exit(code=1)
    random_count = (count or settings.generation.random_scene_count) if random_pick else 0
    character_images = _load_images([character]) if character else []
    weapon_images = _load_images(weapon_image)
    companion_images = _load_images(companion_image)

    async def _run(session: Session) -> list[GeneratedImage] | GenerationSummary:
        session.modes.switch(AppMode.STRUCTURED_SCENE)
        draft = session.modes.scene
        draft.prompt = prompt
        draft.aspect_ratio = aspect_ratio
        for key, value in attributes.items():
            setattr(draft, key, value)
        draft.weapon, draft.vehicle = weapon, vehicle
        draft.companion = None if (companion or "solo").lower() == "solo" else companion
        draft.director, draft.mission = director, mission
        draft.cinematic_realism = cinematic
        draft.selected_scenes = list(scenes)
        if character_images:
            draft.character_image = character_images[0]
        if weapon_images:
            with spinner("Removing weapon image backgrounds..."):
                await session.upload_custom_images(weapon_images, "weapon")
        if companion_images:
            with spinner("Removing companion image backgrounds..."):
                await session.upload_custom_images(companion_images, "companion")

        total = random_count or len(draft.selected_scenes)
        if not total:
            with spinner("Generating..."):
                return await session.images.generate_structured(draft, override_prompt=override)

        progress = create_progress()
        with progress:
            task = progress.add_task("Generating scenes", total=total)
            if random_count:
                result = await session.images.generate_random_scenes(
                    draft, random_count, on_result=lambda _: progress.advance(task)
                )
            else:
                result = await session.images.generate_structured(
                    draft, on_result=lambda _: progress.advance(task)
                )
            progress.update(task, completed=total)
        return result

    try:
        session = open_session(settings, seed=seed)
        result = asyncio.run(_run(session))
    except TotalBatchFailure as exc:
        print_error(exc.summary.format_summary())
        raise typer.Exit(code=1)
    except (StudioError, ValueError) as exc:
        print_error(str(exc))
        raise typer.Exit(code=1)

    if isinstance(result, GenerationSummary):
        _print_results(result.images)
        console.print(result.format_summary())
        print_info(f"Batch status: {result.status.value}")
    else:
        _print_results(result)
