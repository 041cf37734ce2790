"""Aggregate scored challenges into a performance profile."""

import logging
from collections import deque
from collections.abc import Iterable

from core.models import Challenge, KeyErrorCount, PerformanceProfile
from core.wpm_calculator import round_half_up

log = logging.getLogger("typecoach.aggregator")

MAX_PROFILE_KEYS = 8
RECENT_ERRORS_LIMIT = 50


class ProfileAccumulator:
    """Running totals over scored challenges.

    Challenges must be added oldest first; unscored challenges are ignored.
    """

    def __init__(
        self,
        max_keys: int = MAX_PROFILE_KEYS,
        recent_errors_limit: int = RECENT_ERRORS_LIMIT,
    ):
        """Initialize accumulator.

        Args:
            max_keys: Maximum struggling keys kept in the profile
            recent_errors_limit: Size of the trailing mistyped-character window
        """
        self.max_keys = max_keys
        self.key_errors: dict[str, int] = {}
        self.recent_errors: deque[str] = deque(maxlen=recent_errors_limit)
        self.total_accuracy = 0
        self.total_wpm = 0
        self.session_count = 0

    def add(self, challenge: Challenge) -> None:
        """Fold one challenge into the running totals.

        Args:
            challenge: Challenge to add, skipped if not yet scored
        """
        result = challenge.result
        if result is None:
            return

        self.session_count += 1
        self.total_accuracy += result.accuracy_percent
        self.total_wpm += result.words_per_minute

        for struggling in result.struggling_keys:
            self.key_errors[struggling.key] = (
                self.key_errors.get(struggling.key, 0) + struggling.error_count
            )

        for keystroke in challenge.keystrokes:
            if (
                not keystroke.is_correct
                and not keystroke.is_delete
                and keystroke.expected_character
            ):
                self.recent_errors.append(keystroke.expected_character)

    def profile(self) -> PerformanceProfile | None:
        """Build the profile for everything added so far.

        Returns:
            PerformanceProfile, or None if no scored challenge was added
        """
        if self.session_count == 0:
            return None

        ranked = sorted(self.key_errors.items(), key=lambda item: item[1], reverse=True)
        return PerformanceProfile(
            struggling_keys=[
                KeyErrorCount(key=key, error_count=count)
                for key, count in ranked[: self.max_keys]
            ],
            accuracy_percent=round_half_up(self.total_accuracy / self.session_count),
            words_per_minute=round_half_up(self.total_wpm / self.session_count),
            recent_errors=list(self.recent_errors),
            session_count=self.session_count,
        )


def build_profile(
    challenges: Iterable[Challenge],
    max_keys: int = MAX_PROFILE_KEYS,
    recent_errors_limit: int = RECENT_ERRORS_LIMIT,
) -> PerformanceProfile | None:
    """Recompute the performance profile from a challenge list.

    Args:
        challenges: Challenges in chronological order, scored or not
        max_keys: Maximum struggling keys kept in the profile
        recent_errors_limit: Size of the trailing mistyped-character window

    Returns:
        PerformanceProfile, or None if no challenge has a result
    """
    accumulator = ProfileAccumulator(max_keys, recent_errors_limit)
    for challenge in challenges:
        accumulator.add(challenge)

    profile = accumulator.profile()
    if profile is not None:
        log.debug(
            f"Profile over {profile.session_count} sessions: "
            f"{profile.accuracy_percent}% accuracy, weak keys {profile.weak_keys}"
        )
    return profile
