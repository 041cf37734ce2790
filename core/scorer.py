"""Session scoring: keystroke log to SessionResult."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from core.models import Keystroke, SessionResult, StrugglingKey
from core.wpm_calculator import calculate_accuracy, calculate_wpm, round_half_up

log = logging.getLogger("typecoach.scorer")

MAX_STRUGGLING_KEYS = 5


@dataclass
class KeyErrorBucket:
    """Mistypes collected for one expected character."""

    key: str
    errors: int = 0
    delays_ms: list[int] = field(default_factory=list)

    def average_delay_ms(self) -> int:
        if not self.delays_ms:
            return 0
        return round_half_up(sum(self.delays_ms) / len(self.delays_ms))


def find_struggling_keys(
    keystrokes: Sequence[Keystroke], limit: int = MAX_STRUGGLING_KEYS
) -> list[StrugglingKey]:
    """Find the expected characters mistyped most often.

    Backspaces are never counted. The delay for a mistype is measured from
    the keystroke immediately before it, whatever its type.

    Args:
        keystrokes: Keystrokes in the order they were typed
        limit: Maximum number of keys to return

    Returns:
        Keys sorted by error count, worst first; ties keep first-seen order
    """
    buckets: dict[str, KeyErrorBucket] = {}

    for i, keystroke in enumerate(keystrokes):
        if keystroke.is_correct or keystroke.is_delete:
            continue

        key = keystroke.expected_character.lower()
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = KeyErrorBucket(key=key)
        bucket.errors += 1

        if i > 0:
            bucket.delays_ms.append(keystroke.timestamp_ms - keystrokes[i - 1].timestamp_ms)

    # sorted() is stable, dict preserves insertion order
    ranked = sorted(buckets.values(), key=lambda b: b.errors, reverse=True)
    return [
        StrugglingKey(key=b.key, error_count=b.errors, average_delay_ms=max(0, b.average_delay_ms()))
        for b in ranked[:limit]
    ]


def score_session(
    keystrokes: Sequence[Keystroke],
    elapsed_seconds: float,
    completed_word_count: int,
    total_word_count: int,
    max_struggling_keys: int = MAX_STRUGGLING_KEYS,
) -> SessionResult:
    """Score a finished typing session.

    Never fails: an empty session scores zero across the board.

    Args:
        keystrokes: Complete keystroke log in typing order
        elapsed_seconds: Typing time, 0 if typing never started
        completed_word_count: Words finished before the session ended
        total_word_count: Words presented
        max_struggling_keys: How many weak keys to report

    Returns:
        SessionResult for the session
    """
    elapsed_seconds = max(0.0, elapsed_seconds)
    total = len(keystrokes)
    correct = sum(1 for k in keystrokes if k.is_correct)
    characters_typed = sum(1 for k in keystrokes if not k.is_delete)

    wpm = round_half_up(calculate_wpm(characters_typed, elapsed_seconds))
    accuracy = calculate_accuracy(correct, total)
    struggling = find_struggling_keys(keystrokes, max_struggling_keys)

    log.debug(
        f"Scored session: {total} keystrokes, {correct} correct, "
        f"{elapsed_seconds:.1f}s, {wpm} WPM, {accuracy}% accuracy"
    )

    return SessionResult(
        words_per_minute=wpm,
        accuracy_percent=accuracy,
        struggling_keys=struggling,
        total_keystrokes=total,
        correct_keystrokes=correct,
        elapsed_seconds=elapsed_seconds,
        completed_word_count=max(0, completed_word_count),
        total_word_count=max(0, total_word_count),
    )
