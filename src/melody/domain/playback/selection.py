"""
Next/previous track selection.

Sequential mode wraps around at both ends. Shuffle draws a fresh random
position each time (there is no shuffle history to step back through),
rejecting a draw equal to the current position unless the playlist has a
single track.
"""

import random
from typing import Optional


def _shuffle_index(current_index: int, length: int, rng: random.Random) -> int:
    candidate = rng.randrange(length)
    # A single-track playlist has no other position to draw
    while candidate == current_index and length > 1:
        candidate = rng.randrange(length)
    return candidate


def next_index(
    current_index: int,
    length: int,
    shuffle: bool,
    rng: Optional[random.Random] = None,
) -> Optional[int]:
    """
    Position of the track after ``current_index``.

    Args:
        current_index: Current position, or -1 when nothing is selected
        length: Playlist length
        shuffle: Draw randomly instead of stepping forward
        rng: Random source (the module-level generator when omitted)

    Returns:
        Next position, or None for an empty playlist
    """
    if length <= 0:
        return None
    if shuffle:
        return _shuffle_index(current_index, length, rng or random)
    return (current_index + 1) % length


def previous_index(
    current_index: int,
    length: int,
    shuffle: bool,
    rng: Optional[random.Random] = None,
) -> Optional[int]:
    """
    Position of the track before ``current_index``; mirrors next_index.

    From -1 (nothing selected) this lands on the last track.
    """
    if length <= 0:
        return None
    if shuffle:
        return _shuffle_index(current_index, length, rng or random)
    if current_index < 0:
        return length - 1
    return (current_index - 1 + length) % length
