"""
Command routing for Melody.

Routes user commands to appropriate handler functions.
"""

from typing import List, Tuple

from melody.commands import playback, playlist, tracker
from melody.context import AppContext
from melody.core.console import safe_print


def print_help() -> None:
    """Display help information for available commands."""
    help_text = """
Melody - Playlist Music Player

Playback:
  play [n]          Play track n (1-indexed), or toggle play/pause
  pause             Pause current playback
  resume            Resume paused playback
  next              Skip to the next track
  prev              Go back to the previous track
  seek <percent>    Jump to a point in the current track (0-100)
  volume [0-100]    Show or set the volume
  mute              Toggle mute
  shuffle           Toggle shuffle
  repeat            Toggle repeat of the current track
  stop              Stop playback and clear the selection
  status            Show current track and player status

Playlist:
  list              Show the playlist
  add <url>         Download audio from a URL and add it
  open <path>       Add a local audio file
  remove <n>        Remove track n
  move <from> <to>  Move a track to another position

Favorites & history:
  fav [n]           Toggle favorite on the current track (or track n)
  favorites         List favorite tracks
  recent            Show recently played tracks
  recent clear      Clear recently played
  recent <n>        Play the n-th recently played track

  help              Show this help message
  quit, exit        Exit the program

Examples:
  add https://www.youtube.com/watch?v=dQw4w9WgXcQ
  open "~/Music/My Song.mp3"
  play 3
"""
    safe_print(help_text.strip())


def handle_command(ctx: AppContext, command: str, args: List[str]) -> Tuple[AppContext, bool]:
    """
    Handle a single command with explicit state passing.

    Args:
        ctx: Application context
        command: Command name
        args: Command arguments

    Returns:
        (updated_context, should_continue) - Updated context and whether to continue
    """
    if command in ("quit", "exit"):
        safe_print("Goodbye!")
        return ctx, False

    elif command == "help":
        print_help()
        return ctx, True

    elif command == "play":
        return playback.handle_play_command(ctx, args)

    elif command in ("toggle", "p"):
        return playback.handle_toggle_command(ctx)

    elif command == "pause":
        return playback.handle_pause_command(ctx)

    elif command == "resume":
        return playback.handle_resume_command(ctx)

    elif command in ("next", "skip"):
        return playback.handle_next_command(ctx)

    elif command in ("prev", "previous"):
        return playback.handle_prev_command(ctx)

    elif command == "seek":
        return playback.handle_seek_command(ctx, args)

    elif command in ("volume", "vol"):
        return playback.handle_volume_command(ctx, args)

    elif command == "mute":
        return playback.handle_mute_command(ctx)

    elif command == "shuffle":
        return playback.handle_shuffle_command(ctx)

    elif command == "repeat":
        return playback.handle_repeat_command(ctx)

    elif command == "stop":
        return playback.handle_stop_command(ctx)

    elif command == "status":
        return playback.handle_status_command(ctx)

    elif command in ("list", "ls"):
        return playlist.handle_list_command(ctx)

    elif command == "add":
        return playlist.handle_add_command(ctx, args)

    elif command == "open":
        return playlist.handle_open_command(ctx, args)

    elif command in ("remove", "rm"):
        return playlist.handle_remove_command(ctx, args)

    elif command == "move":
        return playlist.handle_move_command(ctx, args)

    elif command == "fav":
        return tracker.handle_fav_command(ctx, args)

    elif command == "favorites":
        return tracker.handle_favorites_command(ctx)

    elif command == "recent":
        return tracker.handle_recent_command(ctx, args)

    elif command == "":
        # Empty command, do nothing
        return ctx, True

    else:
        safe_print(f"Unknown command: '{command}'. Type 'help' for available commands.")
        return ctx, True
