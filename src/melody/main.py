"""
Melody - Main entry point and interactive loop
"""

import threading
from typing import Callable, List, Optional

from loguru import logger

from melody import router
from melody.context import AppContext
from melody.core import config, signals
from melody.core.console import get_console, safe_print
from melody.core.output import setup_loguru
from melody.domain.exceptions import PlaybackError
from melody.domain.playback import MpvOutput, check_mpv_available
from melody.utils import parsers

_NOTIFICATION_STYLES = {"success": "green", "error": "red", "info": "cyan"}


def init_app(cfg: Optional[config.Config] = None) -> config.Config:
    """Load configuration, start logging and create directories."""
    cfg = cfg or config.load_config()
    setup_loguru(
        config.get_log_file_path(cfg),
        level=cfg.logging.level,
        max_file_size_mb=cfg.logging.max_file_size_mb,
        backup_count=cfg.logging.backup_count,
    )
    config.ensure_directories(cfg)
    return cfg


def _in_background() -> bool:
    return threading.current_thread() is not threading.main_thread()


def subscribe_console(ctx: AppContext) -> List[Callable[[], None]]:
    """Print state changes applied by the background poller.

    Commands typed at the prompt report their own outcome, so only changes
    applied off the main thread (auto-advance, finished downloads, output
    errors) are printed here.

    Returns:
        Unsubscribe functions
    """

    def on_notification(message: str, kind: str, expires_in: float) -> None:
        if _in_background():
            safe_print(f"\n🔔 {message}", style=_NOTIFICATION_STYLES.get(kind))

    def on_now_playing(track, index: int) -> None:
        if _in_background() and track is not None:
            safe_print(f"\n♪ Now playing: {track.title} - {track.artist}", style="cyan")

    return [
        ctx.bus.subscribe(signals.NOTIFICATION, on_notification),
        ctx.bus.subscribe(signals.NOW_PLAYING, on_now_playing),
    ]


class OutputPoller:
    """Background thread that feeds output events to the controller."""

    def __init__(self, ctx: AppContext, output: MpvOutput, interval: float) -> None:
        self.ctx = ctx
        self.output = output
        self.interval = interval
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="mpv-poller", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        self._thread.join(timeout=2.0)

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            with self.ctx.lock:
                for event in self.output.poll():
                    self.ctx.controller.post(event)
                self.ctx.controller.pump()


def interactive_mode() -> int:
    """Run the interactive command loop.

    Returns:
        Exit code
    """
    cfg = init_app()
    console = get_console()

    if not check_mpv_available():
        safe_print("❌ mpv is not installed. Install it to play audio.", style="red")
        return 1

    output = MpvOutput(cfg.player.mpv_socket_path, cfg.player.volume)
    try:
        output.start()
    except PlaybackError as e:
        logger.error(f"Could not start audio output: {e}")
        safe_print(f"❌ Could not start audio output: {e}", style="red")
        return 1

    ctx = AppContext.create(cfg, output=output, console=console)
    unsubscribers = subscribe_console(ctx)
    poller = OutputPoller(ctx, output, cfg.player.poll_interval)
    poller.start()

    console.print("[bold green]Welcome to Melody![/bold green]")
    console.print(
        f"{len(ctx.playlist)} tracks in your playlist. "
        "Type 'help' for available commands, or 'quit' to exit."
    )
    console.print()

    try:
        should_continue = True
        while should_continue:
            try:
                user_input = input("melody> ")
            except KeyboardInterrupt:
                console.print("\n[yellow]Use 'quit' or 'exit' to leave gracefully.[/yellow]")
                continue
            except EOFError:
                console.print("\n[green]Goodbye![/green]")
                break

            ctx.pump_events()
            command, args = parsers.parse_command(user_input)
            try:
                ctx, should_continue = router.handle_command(ctx, command, args)
            except Exception as e:
                logger.exception(f"Command '{command}' failed")
                console.print(f"[red]An unexpected error occurred: {e}[/red]", markup=True)
    finally:
        poller.stop()
        for unsubscribe in unsubscribers:
            unsubscribe()
        output.shutdown()
        logger.info("Melody stopped")

    return 0
