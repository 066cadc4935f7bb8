"""
Melody - command-line entry point

Without a subcommand the interactive player starts. ``add`` and ``open`` add a
single track to the saved playlist and exit.
"""

import argparse
import sys
from pathlib import Path
from typing import Callable, Optional

from rich.live import Live
from rich.text import Text

from melody import __version__


def _resolve_now(
    track_id: str, source_uri: str, on_resolved: Callable[[str, float], None]
) -> None:
    """Duration lookup on the calling thread, for one-shot commands."""
    from melody.domain.library.metadata import read_duration, uri_to_path

    path = uri_to_path(source_uri)
    seconds = read_duration(path) if path is not None else None
    if seconds is not None:
        on_resolved(track_id, seconds)


def download_bar(percent: float, bar_width: int = 30) -> Text:
    """Block progress bar for a running download."""
    filled = int(bar_width * min(100.0, percent) / 100)
    bar = Text("Downloading ", style="cyan")
    bar.append("█" * filled, style="green")
    bar.append("░" * (bar_width - filled), style="dim")
    bar.append(f" {percent:5.1f}%")
    return bar


def run_add(url: str) -> int:
    """Download ``url`` and append it to the saved playlist.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    from melody.context import AppContext
    from melody.core.console import get_console, safe_print
    from melody.domain.library.providers import ytdlp
    from melody.main import init_app

    cfg = init_app()
    ctx = AppContext.create(cfg)

    with Live(download_bar(0.0), console=get_console(), transient=True) as live:
        result = ytdlp.fetch_track(
            url,
            Path(cfg.library.download_dir).expanduser(),
            timeout=cfg.library.fetch_timeout_seconds,
            progress_callback=lambda percent: live.update(download_bar(percent)),
        )

    outcome = ctx.controller.add_fetched(result)
    if outcome.ok:
        safe_print(f"✓ {outcome.message}", style="green")
        return 0
    safe_print(f"❌ {outcome.message}", style="red")
    return 1


def run_open(path: str) -> int:
    """Add a local audio file to the saved playlist.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    from melody.context import AppContext
    from melody.core.console import safe_print
    from melody.domain.library.local import select_local_file
    from melody.main import init_app

    cfg = init_app()
    ctx = AppContext.create(cfg, duration_resolver=_resolve_now)

    pick = select_local_file(path, cfg.library.supported_formats)
    outcome = ctx.controller.add_local_file(pick)
    ctx.pump_events()

    if outcome.ok:
        safe_print(f"✓ {outcome.message}", style="green")
        return 0
    if outcome.message:
        safe_print(f"❌ {outcome.message}", style="red")
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="melody",
        description="Melody - playlist music player",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    add_parser = subparsers.add_parser("add", help="Download audio from a URL and add it")
    add_parser.add_argument("url", help="Video or audio page URL")

    open_parser = subparsers.add_parser("open", help="Add a local audio file")
    open_parser.add_argument("path", help="Path to an audio file")

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.subcommand == "add":
        sys.exit(run_add(args.url))

    elif args.subcommand == "open":
        sys.exit(run_open(args.path))

    # No subcommand - start interactive mode
    from .main import interactive_mode

    sys.exit(interactive_mode())


if __name__ == "__main__":
    main()
