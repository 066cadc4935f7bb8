"""
Favorites and history command handlers for Melody.

Handles: fav, favorites, recent
"""

from typing import List, Tuple

from loguru import logger

from melody.context import AppContext
from melody.core.output import log
from melody.domain.library.metadata import format_duration

from .playback import parse_position, report


def handle_fav_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Handle fav command - toggle favorite on the current track or a position.

    Args:
        ctx: Application context
        args: Optional 1-indexed playlist position

    Returns:
        (updated_context, should_continue)
    """
    with ctx.lock:
        if args:
            index = parse_position(args[0], len(ctx.playlist))
            if index is None:
                log(f"Invalid position: '{args[0]}'", "warning")
                return ctx, True
            track = ctx.playlist[index]
        else:
            track = ctx.controller.current_track

        if track is None:
            log("No track selected", "warning")
            return ctx, True

        is_favorite = ctx.favorites.toggle(track.id)

    if is_favorite:
        log(f"♥ Added to favorites: {track.title}", "success")
    else:
        log(f"♡ Removed from favorites: {track.title}", "info")
    return ctx, True


def handle_favorites_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    """Handle favorites command - list favorite tracks still in the playlist."""
    with ctx.lock:
        favorites = [
            (i, track)
            for i, track in enumerate(ctx.playlist)
            if ctx.favorites.is_favorite(track.id)
        ]

    if not favorites:
        log("No favorites yet. Use 'fav' to mark the current track.", "info")
        return ctx, True

    log(f"♥ Favorites ({len(favorites)}):", "info")
    for i, track in favorites:
        log(f"  {i + 1:>3}. {track.title} - {track.artist}", "info")
    return ctx, True


def handle_recent_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Handle recent command - list, clear, or replay recently played tracks.

    ``recent <n>`` plays the n-th entry when that track is still in the
    playlist; entries whose track was removed are ignored.
    """
    if args and args[0].lower() == "clear":
        with ctx.lock:
            ctx.history.clear()
        log("Recently played cleared", "info")
        return ctx, True

    if args:
        return _play_recent(ctx, args[0])

    entries = ctx.history.entries()
    if not entries:
        log("Nothing played yet.", "info")
        return ctx, True

    log("🕘 Recently played:", "info")
    for i, track in enumerate(entries, 1):
        log(
            f"  {i:>2}. {track.title} - {track.artist} [{format_duration(track.duration)}]",
            "info",
        )
    return ctx, True


def _play_recent(ctx: AppContext, raw: str) -> Tuple[AppContext, bool]:
    with ctx.lock:
        entries = ctx.history.entries()
        position = parse_position(raw, len(entries))
        if position is None:
            log(f"Invalid position: '{raw}'. Use 1-{len(entries)}", "warning")
            return ctx, True

        snapshot = entries[position]
        index = ctx.playlist.find_index(snapshot.id)
        if index is None:
            logger.debug(f"Recent entry {snapshot.id} is no longer in the playlist")
            return ctx, True

        outcome = ctx.controller.play_song(index)
    report(outcome, "success")
    return ctx, True
