"""Shared Rich Console for the terminal front end."""

from rich.console import Console

_console: Console | None = None


def get_console() -> Console:
    """Return the process-wide Console, creating it on first use."""
    global _console
    if _console is None:
        _console = Console(highlight=False)
    return _console


def safe_print(message: str, style: str | None = None, markup: bool = False) -> None:
    """Print a message through the shared console.

    Track titles routinely contain square brackets ("[Official Video]"), so
    Rich markup is off unless the caller asks for it.

    Args:
        message: The message to print
        style: Optional Rich style string (e.g., "bold red", "green")
        markup: Interpret Rich markup tags in ``message``
    """
    get_console().print(message, style=style, markup=markup)
