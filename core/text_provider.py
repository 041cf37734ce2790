"""Practice text acquisition with fallback and single-slot prefetch."""

import logging
import random
import threading
from collections.abc import Callable
from typing import Protocol

from core.models import PerformanceProfile, PracticeText
from core.text_normalizer import (
    MAX_WORD_LENGTH,
    TARGET_WORD_COUNT,
    fallback_words,
    normalize_words,
)

log = logging.getLogger("typecoach.text_provider")


class TextSource(Protocol):
    """Upstream producer of raw practice text."""

    def fetch_practice_text(self, profile: PerformanceProfile | None) -> str: ...


class PracticeTextProvider:
    """Fetches practice text and guarantees a normalized result."""

    def __init__(
        self,
        source: TextSource | None = None,
        word_count: int = TARGET_WORD_COUNT,
        max_word_length: int = MAX_WORD_LENGTH,
        rng: random.Random | None = None,
    ):
        """Initialize provider.

        Args:
            source: Upstream text source, None to always use the fallback
            word_count: Number of words per practice text
            max_word_length: Maximum length of any word
            rng: Random source for alphabet patches
        """
        self.source = source
        self.word_count = word_count
        self.max_word_length = max_word_length
        self.rng = rng

    def fallback(self) -> PracticeText:
        """Deterministic text used whenever the source fails."""
        return PracticeText(words=fallback_words(self.word_count))

    def fetch(self, profile: PerformanceProfile | None = None) -> PracticeText:
        """Fetch and normalize practice text. Never raises.

        Args:
            profile: Aggregate performance to bias the text, or None

        Returns:
            Normalized PracticeText, the fallback text if the source failed
        """
        if self.source is None:
            return self.fallback()

        target_keys = profile.weak_keys if profile is not None else []

        try:
            raw_text = self.source.fetch_practice_text(profile)
        except Exception as e:
            log.warning(f"Text source failed, using fallback text: {e}")
            return self.fallback()

        words = normalize_words(raw_text, self.word_count, self.max_word_length, self.rng)
        log.info(
            f"Fetched practice text ({len(words)} words, targets: {target_keys or 'none'})"
        )
        return PracticeText(
            words=words,
            is_personalized=bool(target_keys),
            target_keys=target_keys,
        )


class PrefetchCache:
    """Single-slot cache for the next practice text.

    At most one fetch runs at a time; begin_prefetch() is refused while one
    is in flight. invalidate() makes the in-flight result stale so it is
    dropped instead of cached.
    """

    def __init__(self, fetch: Callable[[PerformanceProfile | None], PracticeText]):
        """Initialize cache.

        Args:
            fetch: Function producing practice text for a profile
        """
        self._fetch = fetch
        self._lock = threading.Lock()
        self._cached: PracticeText | None = None
        self._in_flight = False
        self._generation = 0
        self._thread: threading.Thread | None = None

    @property
    def in_flight(self) -> bool:
        with self._lock:
            return self._in_flight

    @property
    def has_cached(self) -> bool:
        with self._lock:
            return self._cached is not None

    def begin_prefetch(self, profile: PerformanceProfile | None) -> bool:
        """Start fetching the next text in a background thread.

        Args:
            profile: Profile to bias the text toward

        Returns:
            True if a fetch was started, False if one is already running
        """
        with self._lock:
            if self._in_flight:
                log.debug("Prefetch already in flight, not starting another")
                return False
            self._in_flight = True
            generation = self._generation

        self._thread = threading.Thread(
            target=self._run, args=(profile, generation), daemon=True
        )
        self._thread.start()
        return True

    def _run(self, profile: PerformanceProfile | None, generation: int) -> None:
        text = None
        try:
            text = self._fetch(profile)
        except Exception as e:
            log.error(f"Prefetch failed: {e}")
        finally:
            with self._lock:
                if text is not None and generation == self._generation:
                    self._cached = text
                elif text is not None:
                    log.debug("Discarding stale prefetched text")
                self._in_flight = False

    def try_take_cached(self) -> PracticeText | None:
        """Take the cached text, leaving the slot empty.

        Returns:
            Cached PracticeText, or None if nothing is ready
        """
        with self._lock:
            cached = self._cached
            self._cached = None
            return cached

    def invalidate(self) -> None:
        """Drop the cached text and mark any in-flight fetch as stale."""
        with self._lock:
            self._cached = None
            self._generation += 1

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for the in-flight fetch to settle.

        Args:
            timeout: Seconds to wait, None to wait indefinitely

        Returns:
            True if no fetch is in flight afterwards
        """
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
        return not self.in_flight
