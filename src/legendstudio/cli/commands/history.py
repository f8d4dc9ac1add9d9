"""History commands: list, inspect, export and prune saved results."""

import asyncio
from pathlib import Path

import typer
from rich.table import Table

from legendstudio.cli.ui.console import (
    BRAND_COLOR,
    console,
    print_error,
    print_info,
    print_key_value_table,
    print_muted,
    print_success,
    print_toast,
)
from legendstudio.cli.ui.progress import spinner
from legendstudio.cli.ui.setup import open_session
from legendstudio.config import Settings, load_settings
from legendstudio.core.toasts import ToastCenter
from legendstudio.errors import StudioError
from legendstudio.models.images import HistoryItem
from legendstudio.state.history import HistoryStore
from legendstudio.state.storage import JsonFileStorage
from legendstudio.utils.imaging import save_data_url, split_data_url, suffix_for_mime

history_app = typer.Typer(
    help="Browse and manage the saved image history.",
    no_args_is_help=True,
)

ConfigOption = typer.Option(None, "--config", "-c", help="Path to configuration YAML file.")


def _open_store(settings: Settings) -> HistoryStore:
    toasts = ToastCenter()
    toasts.subscribe(print_toast)
    storage = JsonFileStorage(settings.storage_dir, settings.storage.quota_bytes)
    store = HistoryStore(storage, toasts)
    store.load()
    return store


def _require(store: HistoryStore, item_id: str) -> HistoryItem:
    item = store.get(item_id)
    if item is None:
        print_error(f"No history item with id {item_id}")
        raise typer.Exit(code=1)
    return item


def _format_size(size: int | None) -> str:
    if size is None:
        return "?"
    if size < 1024 * 1024:
        return f"{size / 1024:.0f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


@history_app.command("list")
def list_items(config_file: str | None = ConfigOption) -> None:
    """List saved results, newest first."""
    store = _open_store(load_settings(config_file))
    if not len(store):
        print_info("History is empty.")
        return

    table = Table(title="History", title_style=BRAND_COLOR)
    table.add_column("ID", style="bold")
    table.add_column("Ratio")
    table.add_column("Size", justify="right")
    table.add_column("Prompt")
    for item in store.items:
        table.add_row(
            item.id,
            item.aspect_ratio or "?",
            _format_size(item.size),
            (item.alt or item.prompt)[:60],
        )
    console.print(table)


@history_app.command("show")
def show(
    item_id: str = typer.Argument(..., help="History item ID."),
    analyze: bool = typer.Option(
        False, "--analyze", help="Ask the model to describe the image if not yet analyzed."
    ),
    config_file: str | None = ConfigOption,
) -> None:
    """Show one saved result and its analysis."""
    settings = load_settings(config_file)
    if analyze:
        try:
            session = open_session(settings)
            with spinner("Analyzing image..."):
                item = asyncio.run(session.inspect_history_item(item_id))
        except (StudioError, ValueError) as exc:
            print_error(str(exc))
            raise typer.Exit(code=1)
        if session.modes.history_view.analysis_error:
            print_error(f"Analysis failed: {session.modes.history_view.analysis_error}")
    else:
        item = _require(_open_store(settings), item_id)

    print_key_value_table(
        f"History item {item.id}",
        {
            "Prompt": item.prompt or "[dim]none[/dim]",
            "Alt": item.alt or "[dim]none[/dim]",
            "Aspect Ratio": item.aspect_ratio or "?",
            "Dimensions": f"{item.width}x{item.height}" if item.width else "?",
            "Size": _format_size(item.size),
            "Analysis": item.analysis or "[dim]not analyzed[/dim]",
        },
    )


@history_app.command("export")
def export(
    item_id: str = typer.Argument(..., help="History item ID."),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Destination file (default: output directory)."
    ),
    config_file: str | None = ConfigOption,
) -> None:
    """Write a saved result to an image file."""
    settings = load_settings(config_file)
    item = _require(_open_store(settings), item_id)
    if output is None:
        suffix = suffix_for_mime(split_data_url(item.src)[0])
        output = Path(settings.output_dir) / f"history-{item.id[:8]}{suffix}"
    save_data_url(item.src, output)
    print_success(f"Saved {output}")


@history_app.command("delete")
def delete(
    item_id: str = typer.Argument(..., help="History item ID."),
    config_file: str | None = ConfigOption,
) -> None:
    """Delete one saved result."""
    store = _open_store(load_settings(config_file))
    if not store.delete(item_id):
        print_error(f"No history item with id {item_id}")
        raise typer.Exit(code=1)
    print_success(f"Deleted {item_id} ({len(store)} items left).")


@history_app.command("clear")
def clear(
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmation prompt and clear immediately."
    ),
    config_file: str | None = ConfigOption,
) -> None:
    """Delete every saved result."""
    store = _open_store(load_settings(config_file))
    if not len(store):
        print_info("History is already empty. Nothing to remove.")
        return
    if not force:
        confirmed = typer.confirm(f"Remove all {len(store)} history items?", default=False)
        if not confirmed:
            print_muted("Aborted.")
            raise typer.Exit()
    store.clear()
    print_success("History cleared.")
