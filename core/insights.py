"""Session insight enrichment with a templated fallback."""

import logging
from typing import Protocol

from core.models import SessionResult

log = logging.getLogger("typecoach.insights")

HIGH_ACCURACY_THRESHOLD = 95

HIGH_ACCURACY_MESSAGE = "Excellent accuracy! Try increasing your speed gradually."
NEEDS_PRACTICE_MESSAGE = "Focus on accuracy first, speed will follow with practice."


class InsightSource(Protocol):
    """Upstream producer of a qualitative session summary."""

    def summarize(self, result: SessionResult) -> str: ...


def fallback_insight(
    accuracy_percent: int, threshold: int = HIGH_ACCURACY_THRESHOLD
) -> str:
    """Pick the templated insight for an accuracy value."""
    if accuracy_percent >= threshold:
        return HIGH_ACCURACY_MESSAGE
    return NEEDS_PRACTICE_MESSAGE


class InsightProvider:
    """Attaches an insight to scored results."""

    def __init__(
        self,
        source: InsightSource | None = None,
        high_accuracy_threshold: int = HIGH_ACCURACY_THRESHOLD,
    ):
        self.source = source
        self.high_accuracy_threshold = high_accuracy_threshold

    def summarize(self, result: SessionResult) -> str:
        """Get an insight for a result. Never raises."""
        if self.source is not None:
            try:
                insight = self.source.summarize(result).strip()
                if insight:
                    return insight
                log.warning("Insight source returned empty text, using template")
            except Exception as e:
                log.warning(f"Insight source failed, using template: {e}")
        return fallback_insight(result.accuracy_percent, self.high_accuracy_threshold)

    def enrich(self, result: SessionResult) -> SessionResult:
        """Return a copy of result with its insight filled in."""
        return result.model_copy(update={"insight": self.summarize(result)})
