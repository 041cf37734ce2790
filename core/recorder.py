"""Keystroke recording against the presented practice words."""

import logging
from dataclasses import dataclass, field

from core.models import Keystroke, KeystrokeType

log = logging.getLogger("typecoach.recorder")

BACKSPACE_KEYS = frozenset({"BACKSPACE", "Backspace"})
SPACE = " "


@dataclass
class TypedWord:
    """Characters typed so far for one presented word."""

    characters: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.characters)


class KeystrokeRecorder:
    """Turns key events into Keystroke records and tracks the cursor.

    Space advances to the next word only if something was typed for the
    current one. Backspace at the start of a word steps back to the end of
    the previous word. Every backspace is recorded as a correct keystroke.
    """

    def __init__(self, words: list[str]):
        """Initialize recorder.

        Args:
            words: Practice words in presentation order
        """
        self.words = list(words)
        self.word_index = 0
        self.char_index = 0
        self.typed: list[TypedWord] = [TypedWord() for _ in self.words]
        self.keystrokes: list[Keystroke] = []

    @property
    def is_finished(self) -> bool:
        """True once the cursor has moved past the last word."""
        return self.word_index >= len(self.words)

    @property
    def completed_word_count(self) -> int:
        return min(self.word_index, len(self.words))

    def process_key(self, key: str, timestamp_ms: int) -> Keystroke | None:
        """Record a key event.

        Args:
            key: Key name: a single character, " " or BACKSPACE
            timestamp_ms: Timestamp in milliseconds

        Returns:
            The recorded Keystroke, or None if the key was ignored
        """
        if key in BACKSPACE_KEYS:
            return self._process_backspace(timestamp_ms)
        if self.is_finished:
            return None
        if key == SPACE:
            return self._process_space(timestamp_ms)
        if len(key) == 1:
            return self._process_character(key, timestamp_ms)

        log.debug(f"Ignoring non-printable key: {key}")
        return None

    def _record(self, keystroke: Keystroke) -> Keystroke:
        self.keystrokes.append(keystroke)
        return keystroke

    def _process_backspace(self, timestamp_ms: int) -> Keystroke:
        keystroke = self._record(
            Keystroke(
                character="",
                expected_character="",
                timestamp_ms=timestamp_ms,
                is_correct=True,
                word_index=self.word_index,
                char_index=self.char_index,
                type=KeystrokeType.BACKSPACE,
            )
        )

        if self.char_index > 0:
            self.char_index -= 1
            self.typed[self.word_index].characters.pop()
        elif self.word_index > 0:
            self.word_index -= 1
            self.char_index = len(self.typed[self.word_index])

        return keystroke

    def _process_space(self, timestamp_ms: int) -> Keystroke | None:
        if len(self.typed[self.word_index]) == 0:
            return None

        keystroke = self._record(
            Keystroke(
                character=SPACE,
                expected_character=SPACE,
                timestamp_ms=timestamp_ms,
                is_correct=True,
                word_index=self.word_index,
                char_index=self.char_index,
                type=KeystrokeType.SPACE,
            )
        )
        self.word_index += 1
        self.char_index = 0
        return keystroke

    def _process_character(self, key: str, timestamp_ms: int) -> Keystroke:
        word = self.words[self.word_index]
        # Characters typed past the end of a word have nothing to match
        expected = word[self.char_index] if self.char_index < len(word) else ""

        keystroke = self._record(
            Keystroke(
                character=key,
                expected_character=expected,
                timestamp_ms=timestamp_ms,
                is_correct=key == expected,
                word_index=self.word_index,
                char_index=self.char_index,
                type=KeystrokeType.LETTER,
            )
        )
        self.typed[self.word_index].characters.append(key)
        self.char_index += 1
        return keystroke
