"""
Playlist command handlers for Melody.

Handles: list, add <url>, open <path>, remove, move
"""

from pathlib import Path
from typing import List, Tuple

from rich.table import Table
from rich.text import Text

from melody.context import AppContext
from melody.core.output import log
from melody.domain.exceptions import FetchError
from melody.domain.library.local import select_local_file
from melody.domain.library.metadata import format_duration
from melody.domain.library.providers import ytdlp
from melody.domain.playback import DownloadProgress, FetchCompleted, PlayerStatus

from .playback import parse_position, report


def handle_list_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    """Handle list command - show the playlist as a table.

    Args:
        ctx: Application context

    Returns:
        (updated_context, should_continue)
    """
    with ctx.lock:
        tracks = ctx.playlist.tracks
        current = ctx.controller.current_index
        status = ctx.controller.status

    if not tracks:
        log("Playlist is empty. Use 'add <url>' or 'open <path>' to add tracks.", "info")
        return ctx, True

    table = Table(title=f"Playlist ({len(tracks)} tracks)")
    table.add_column("#", style="dim", width=4)
    table.add_column("", width=2)
    table.add_column("Title", style="bold")
    table.add_column("Artist")
    table.add_column("Time", justify="right", style="dim")
    table.add_column("♥", width=2, style="red")

    for i, track in enumerate(tracks):
        marker = ""
        if i == current:
            marker = "▶" if status is PlayerStatus.PLAYING else "•"
        table.add_row(
            str(i + 1),
            marker,
            Text(track.title),
            Text(track.artist),
            format_duration(track.duration),
            "♥" if ctx.favorites.is_favorite(track.id) else "",
        )

    ctx.console.print(table)
    return ctx, True


def handle_add_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Handle add command - fetch audio from a URL in the background.

    The download runs on a worker thread; its result and progress are posted
    to the controller and applied by the interactive loop.

    Args:
        ctx: Application context
        args: The URL to fetch

    Returns:
        (updated_context, should_continue)
    """
    if not args:
        log("Usage: add <url>", "warning")
        return ctx, True

    try:
        url = ytdlp.validate_url(" ".join(args))
    except FetchError as e:
        ctx.notifier.error(f"Error adding song: {e}")
        log(f"❌ {e}", "error")
        return ctx, True

    controller = ctx.controller
    ytdlp.fetch_track_async(
        url,
        Path(ctx.config.library.download_dir).expanduser(),
        on_done=lambda result: controller.post(FetchCompleted(result)),
        timeout=ctx.config.library.fetch_timeout_seconds,
        progress_callback=lambda percent: controller.post(DownloadProgress(percent)),
    )
    log(f"⏬ Downloading {url} ...", "info")
    return ctx, True


def handle_open_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Handle open command - add a local audio file.

    An empty path cancels silently.
    """
    pick = select_local_file(" ".join(args), ctx.config.library.supported_formats)
    with ctx.lock:
        outcome = ctx.controller.add_local_file(pick)
    report(outcome, "success")
    return ctx, True


def handle_remove_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Handle remove command - remove the track at a 1-indexed position."""
    if not args:
        log("Usage: remove <position>", "warning")
        return ctx, True

    with ctx.lock:
        index = parse_position(args[0], len(ctx.playlist))
        if index is None:
            log(f"Invalid position: '{args[0]}'", "warning")
            return ctx, True
        report(ctx.controller.remove_track(index))
    return ctx, True


def handle_move_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Handle move command - move a track from one position to another."""
    if len(args) != 2:
        log("Usage: move <from> <to>", "warning")
        return ctx, True

    with ctx.lock:
        length = len(ctx.playlist)
        src = parse_position(args[0], length)
        dst = parse_position(args[1], length)
        if src is None or dst is None:
            log(f"Positions must be between 1 and {length}", "warning")
            return ctx, True
        report(ctx.controller.move_track(src, dst))
    return ctx, True
