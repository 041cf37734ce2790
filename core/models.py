"""Pydantic models for TypeCoach data structures."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class KeystrokeType(str, Enum):
    """Kind of input event recorded during a session."""

    LETTER = "letter"
    SPACE = "space"
    BACKSPACE = "backspace"


class Keystroke(BaseModel):
    """Single input event captured while typing."""

    character: str = Field(..., description="Key pressed, empty for backspace")
    expected_character: str = Field(
        ..., description="Character required at the cursor, empty for backspace"
    )
    timestamp_ms: int = Field(..., description="Timestamp in milliseconds")
    is_correct: bool = Field(..., description="Whether the key matched the text")
    word_index: int = Field(default=0, ge=0, description="Word under the cursor")
    char_index: int = Field(
        default=0, ge=0, description="Character position within the word"
    )
    type: KeystrokeType = Field(
        default=KeystrokeType.LETTER, description="Type: letter, space or backspace"
    )

    model_config = ConfigDict(extra="ignore", frozen=True)

    @property
    def is_delete(self) -> bool:
        """Backspace events are corrections, never errors."""
        return self.type == KeystrokeType.BACKSPACE


class StrugglingKey(BaseModel):
    """Expected character that was mistyped during a session."""

    key: str = Field(..., description="Lowercased expected character")
    error_count: int = Field(..., ge=0, description="Number of mistypes")
    average_delay_ms: int = Field(
        default=0, ge=0, description="Mean delay before the mistype in ms"
    )

    model_config = ConfigDict(extra="ignore", frozen=True)


class KeyErrorCount(BaseModel):
    """Struggling key merged across sessions."""

    key: str = Field(..., description="Lowercased expected character")
    error_count: int = Field(..., ge=0, description="Summed error count")

    model_config = ConfigDict(extra="ignore", frozen=True)


class SessionResult(BaseModel):
    """Scored outcome of one completed session."""

    words_per_minute: int = Field(..., ge=0, description="Net speed in WPM")
    accuracy_percent: int = Field(..., ge=0, le=100, description="Accuracy 0-100")
    struggling_keys: list[StrugglingKey] = Field(
        default_factory=list, description="Most mistyped keys, worst first"
    )
    total_keystrokes: int = Field(..., ge=0, description="All recorded keystrokes")
    correct_keystrokes: int = Field(..., ge=0, description="Correct keystrokes")
    elapsed_seconds: float = Field(..., ge=0, description="Typing time in seconds")
    completed_word_count: int = Field(..., ge=0, description="Words finished")
    total_word_count: int = Field(..., ge=0, description="Words presented")
    insight: str | None = Field(
        default=None, description="Short coaching message for the user"
    )

    model_config = ConfigDict(extra="ignore", frozen=True)

    @model_validator(mode="after")
    def check_counts(self) -> "SessionResult":
        """Correct keystrokes can never exceed the total."""
        if self.correct_keystrokes > self.total_keystrokes:
            raise ValueError(
                f"correct_keystrokes ({self.correct_keystrokes}) exceeds "
                f"total_keystrokes ({self.total_keystrokes})"
            )
        return self


class Challenge(BaseModel):
    """One practice round: presented text, keystroke log and result."""

    id: str = Field(..., description="Challenge identifier")
    text: str = Field(..., description="Practice text shown to the user")
    keystrokes: list[Keystroke] = Field(
        default_factory=list, description="Keystrokes recorded for this text"
    )
    result: SessionResult | None = Field(
        default=None, description="Scored result, None until scoring completes"
    )
    start_time_ms: int | None = Field(default=None, description="Typing start")
    end_time_ms: int | None = Field(default=None, description="Typing end")
    is_personalized: bool = Field(
        default=False, description="Whether the text targeted weak keys"
    )
    target_keys: list[str] = Field(
        default_factory=list, description="Keys the text was biased toward"
    )

    model_config = ConfigDict(extra="ignore", frozen=True)

    @property
    def is_scored(self) -> bool:
        return self.result is not None


class PerformanceProfile(BaseModel):
    """Aggregate performance across all scored challenges."""

    struggling_keys: list[KeyErrorCount] = Field(
        default_factory=list, description="Merged weak keys, worst first"
    )
    accuracy_percent: int = Field(..., ge=0, le=100, description="Mean accuracy")
    words_per_minute: int = Field(..., ge=0, description="Mean WPM")
    recent_errors: list[str] = Field(
        default_factory=list, description="Most recent mistyped characters"
    )
    session_count: int = Field(..., ge=1, description="Scored challenges")

    model_config = ConfigDict(extra="ignore", frozen=True)

    @property
    def weak_keys(self) -> list[str]:
        return [k.key for k in self.struggling_keys if k.key.strip()]


class PracticeText(BaseModel):
    """Normalized practice text ready to be typed."""

    words: list[str] = Field(..., description="Normalized practice words")
    is_personalized: bool = Field(
        default=False, description="Whether the request targeted weak keys"
    )
    target_keys: list[str] = Field(
        default_factory=list, description="Keys the request was biased toward"
    )

    model_config = ConfigDict(extra="ignore", frozen=True)

    @property
    def text(self) -> str:
        return " ".join(self.words)
