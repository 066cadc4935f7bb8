"""
Playback command handlers for Melody.

Handles: play, pause, resume, toggle, next, prev, seek, volume, mute,
shuffle, repeat, stop, status
"""

from typing import List, Optional, Tuple

from melody.context import AppContext
from melody.core.output import log
from melody.domain.exceptions import Outcome
from melody.domain.library.metadata import format_time
from melody.domain.playback import PlayerStatus


def report(outcome: Outcome, success_level: str = "info") -> None:
    """Print an operation outcome; empty failure messages stay silent."""
    if outcome.ok:
        if outcome.message:
            log(outcome.message, success_level)
    elif outcome.message:
        log(outcome.message, "warning")


def parse_position(raw: str, length: int) -> Optional[int]:
    """Convert a 1-indexed user position into a 0-based index.

    Returns:
        The index, or None when ``raw`` is not a valid position
    """
    try:
        position = int(raw)
    except ValueError:
        return None
    if position < 1 or position > length:
        return None
    return position - 1


def handle_play_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Handle play command - start a track by position, or toggle when none given.

    Args:
        ctx: Application context
        args: Command arguments (optional 1-indexed position)

    Returns:
        (updated_context, should_continue)
    """
    if not args:
        return handle_toggle_command(ctx)

    index = parse_position(args[0], len(ctx.playlist))
    if index is None:
        log(f"Invalid position: '{args[0]}'. Use 1-{len(ctx.playlist)}", "warning")
        return ctx, True

    with ctx.lock:
        report(ctx.controller.play_song(index))
    return ctx, True


def handle_toggle_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    with ctx.lock:
        report(ctx.controller.toggle_play())
    return ctx, True


def handle_pause_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    with ctx.lock:
        report(ctx.controller.pause())
    return ctx, True


def handle_resume_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    with ctx.lock:
        report(ctx.controller.resume())
    return ctx, True


def handle_next_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    with ctx.lock:
        report(ctx.controller.next())
    return ctx, True


def handle_prev_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    with ctx.lock:
        report(ctx.controller.previous())
    return ctx, True


def handle_stop_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    with ctx.lock:
        report(ctx.controller.stop())
    return ctx, True


def handle_seek_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Handle seek command - jump to a percentage of the current track.

    Args:
        ctx: Application context
        args: Percentage of the track (0-100)

    Returns:
        (updated_context, should_continue)
    """
    if not args:
        log("Usage: seek <percent>", "warning")
        return ctx, True

    try:
        percent = float(args[0].rstrip("%"))
    except ValueError:
        log(f"Invalid percentage: '{args[0]}'", "warning")
        return ctx, True

    with ctx.lock:
        report(ctx.controller.seek(percent / 100))
    return ctx, True


def handle_volume_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Handle volume command - show or set the volume (0-100)."""
    if not args:
        session = ctx.controller.session
        suffix = " (muted)" if session.muted else ""
        log(f"🔊 Volume: {round(session.volume * 100)}%{suffix}", "info")
        return ctx, True

    try:
        level = float(args[0].rstrip("%"))
    except ValueError:
        log(f"Invalid volume: '{args[0]}'. Use 0-100", "warning")
        return ctx, True

    with ctx.lock:
        report(ctx.controller.set_volume(level / 100))
    return ctx, True


def handle_mute_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    with ctx.lock:
        report(ctx.controller.toggle_mute())
    return ctx, True


def handle_shuffle_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    with ctx.lock:
        enabled = ctx.controller.toggle_shuffle()
    if enabled:
        log("🔀 Shuffle enabled", "info")
    else:
        log("🔁 Shuffle disabled (play in order)", "info")
    return ctx, True


def handle_repeat_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    with ctx.lock:
        enabled = ctx.controller.toggle_repeat()
    log(f"🔂 Repeat {'on' if enabled else 'off'}", "info")
    return ctx, True


def handle_status_command(ctx: AppContext) -> Tuple[AppContext, bool]:
    """Handle status command - show current player and track status.

    Args:
        ctx: Application context

    Returns:
        (updated_context, should_continue)
    """
    with ctx.lock:
        controller = ctx.controller
        session = controller.session
        track = controller.current_track
        position, duration, percent = controller.progress()

    log("Melody Status:", "info")
    log("─" * 40, "info")
    log(f"♪ Player: {session.status.value.capitalize()}", "info")

    if track is None:
        log("♫ Track: None", "info")
    else:
        heart = " ♥" if ctx.favorites.is_favorite(track.id) else ""
        log(f"♫ Track: {track.title} - {track.artist}{heart}", "info")
        if duration:
            progress_bar = "▓" * int(percent / 5) + "░" * (20 - int(percent / 5))
            log(
                f"⏱  Progress: [{progress_bar}] {format_time(position)} / {format_time(duration)}",
                "info",
            )

    if session.status is PlayerStatus.ERROR and session.last_error:
        log(f"⚠  Last error: {session.last_error}", "warning")

    muted = " (muted)" if session.muted else ""
    log(f"🔊 Volume: {round(session.volume * 100)}%{muted}", "info")
    log(
        f"🔀 Shuffle: {'on' if session.shuffle else 'off'}   "
        f"🔂 Repeat: {'on' if session.repeat else 'off'}",
        "info",
    )
    log(f"📋 Playlist: {len(ctx.playlist)} tracks", "info")
    return ctx, True
