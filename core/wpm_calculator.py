"""WPM and accuracy calculation utilities."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 always rounding up.

    Unlike round(), which rounds exact halves to even (round(2.5) == 2).

    Args:
        value: Non-negative value to round

    Returns:
        Rounded integer
    """
    return int(math.floor(value + 0.5))


def calculate_wpm(character_count: int, elapsed_seconds: float) -> float:
    """Calculate words per minute.

    Standard: 5 characters = 1 word

    Args:
        character_count: Number of non-delete keystrokes
        elapsed_seconds: Typing time in seconds

    Returns:
        WPM (words per minute), or 0.0 if elapsed time is zero
    """
    if elapsed_seconds <= 0:
        return 0.0

    words = character_count / 5.0
    minutes = elapsed_seconds / 60.0
    return words / minutes


def calculate_accuracy(correct_keystrokes: int, total_keystrokes: int) -> int:
    """Calculate accuracy as a whole percentage.

    Args:
        correct_keystrokes: Keystrokes that matched the text
        total_keystrokes: All keystrokes, including backspaces

    Returns:
        Accuracy 0-100, or 0 if nothing was typed
    """
    if total_keystrokes <= 0:
        return 0
    return round_half_up(correct_keystrokes / total_keystrokes * 100)
