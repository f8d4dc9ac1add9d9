"""API key checks, logging setup and session construction for CLI commands."""

import logging
from pathlib import Path

from rich.logging import RichHandler

from legendstudio.config.settings import Settings
from legendstudio.core.session import Session

from .console import console, print_error, print_info, print_muted, print_success, print_toast


def configure_logging(verbose: bool) -> None:
    """Route library logging through Rich; INFO and up when verbose."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # Toasts are already printed to the console by the session listener
    logging.getLogger("legendstudio.core.toasts").setLevel(
        logging.INFO if verbose else logging.CRITICAL
    )


def run_setup_check(settings: Settings) -> bool:
    """Check API keys, printing guidance for anything missing.

    Returns:
        True if all required configuration is present, False otherwise.
    """
    missing_keys = settings.get_missing_api_keys()
    if not missing_keys:
        print_success("All required configuration is present.")
        return True

    print_error("Missing required API keys:")
    console.print()
    for key in missing_keys:
        print_error(_KEY_HELP.get(key, f"  {key} is not set."))
    console.print()
    print_info("Set keys using one of these methods:")
    print_muted("  1. Add GEMINI_API_KEY=... to a .env file in this directory")
    print_muted("  2. Export in your shell: export GEMINI_API_KEY=...")
    if Path(".env").exists():
        print_info("Tip: a .env file exists here but does not set GEMINI_API_KEY.")
    console.print()
    return False


def open_session(settings: Settings, seed: int | None = None) -> Session:
    """Build a session for a command and echo its notifications to the console.

    Raises:
        ValueError: The Gemini API key is not configured.
    """
    session = Session.from_settings(settings, seed=seed)
    session.toasts.subscribe(print_toast)
    return session


_KEY_HELP: dict[str, str] = {
    "GEMINI_API_KEY": (
        "GEMINI_API_KEY is not set. "
        "Get one at https://aistudio.google.com/apikey"
    ),
}
