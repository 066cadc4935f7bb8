"""
Command-line parsing for the interactive prompt.

File paths and titles often contain spaces, so arguments honour shell-style
quoting ("open '~/Music/My Song.mp3'").
"""

import shlex
from typing import List, Tuple


def split_args(user_input: str) -> List[str]:
    """Split input into words, respecting quotes.

    Unbalanced quotes fall back to plain whitespace splitting.
    """
    try:
        return shlex.split(user_input)
    except ValueError:
        return user_input.split()


def parse_command(user_input: str) -> Tuple[str, List[str]]:
    """
    Parse user input into command and arguments.

    Args:
        user_input: Raw user input string

    Returns:
        Tuple of (command, args) where command is lowercase
    """
    parts = split_args(user_input.strip())
    if not parts:
        return "", []
    return parts[0].lower(), parts[1:]
