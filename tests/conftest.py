"""Shared test fixtures for TypeCoach tests."""

import random

import pytest

from core.models import Keystroke, KeystrokeType


def make_keystroke(
    character: str,
    expected: str,
    timestamp_ms: int = 0,
    word_index: int = 0,
    char_index: int = 0,
) -> Keystroke:
    """Build a letter keystroke, correct when character matches expected."""
    return Keystroke(
        character=character,
        expected_character=expected,
        timestamp_ms=timestamp_ms,
        is_correct=character == expected,
        word_index=word_index,
        char_index=char_index,
        type=KeystrokeType.LETTER,
    )


def make_backspace(timestamp_ms: int = 0) -> Keystroke:
    return Keystroke(
        character="",
        expected_character="",
        timestamp_ms=timestamp_ms,
        is_correct=True,
        type=KeystrokeType.BACKSPACE,
    )


class FakeTextSource:
    """Text source returning canned text, or raising if text is None."""

    def __init__(self, text: str | None = "hello world"):
        self.text = text
        self.calls = []

    def fetch_practice_text(self, profile):
        self.calls.append(profile)
        if self.text is None:
            raise ConnectionError("Connection refused")
        return self.text


class FakeInsightSource:
    """Insight source returning canned text, or raising if text is None."""

    def __init__(self, text: str | None = "Nice work."):
        self.text = text

    def summarize(self, result):
        if self.text is None:
            raise ConnectionError("Connection refused")
        return self.text


@pytest.fixture
def rng():
    """Seeded random source for reproducible alphabet patches."""
    return random.Random(42)


@pytest.fixture
def text_source():
    return FakeTextSource()


@pytest.fixture
def failing_text_source():
    return FakeTextSource(text=None)
