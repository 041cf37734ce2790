"""Session state machine driving recording, scoring and text acquisition."""

import logging
import time
import uuid
from collections.abc import Callable
from enum import Enum
from typing import Optional

from PySide6.QtCore import QObject, Signal

from core.aggregator import ProfileAccumulator
from core.errors import InvalidTransitionError, SessionBlockedError
from core.insights import InsightProvider
from core.models import Challenge, Keystroke, PerformanceProfile, PracticeText, SessionResult
from core.recorder import SPACE, KeystrokeRecorder
from core.scorer import score_session
from core.text_provider import PracticeTextProvider, PrefetchCache
from core.wpm_calculator import round_half_up
from utils.config import AppSettings

log = logging.getLogger("typecoach.session")


class SessionState(str, Enum):
    """Lifecycle of one practice round."""

    IDLE = "idle"
    READY = "ready"
    TYPING = "typing"
    SCORING = "scoring"
    REVIEWING = "reviewing"


def current_time_ms() -> int:
    return int(time.time() * 1000)


class SessionController(QObject):
    """Owns the session state and the challenge history.

    Time is passed in explicitly (timestamp_ms / now_ms) so the controller can
    be driven by any event loop; when omitted, the wall clock is used.
    """

    signal_state_changed = Signal(str)  # New SessionState value
    signal_result_ready = Signal(object)  # SessionResult

    def __init__(
        self,
        text_provider: PracticeTextProvider,
        insight_provider: Optional[InsightProvider] = None,
        settings: Optional[AppSettings] = None,
        entry_gate: Optional[Callable[[], bool]] = None,
        clock: Callable[[], int] = current_time_ms,
    ):
        """Initialize session controller.

        Args:
            text_provider: Source of normalized practice text
            insight_provider: Enrichment for scored results
            settings: Application settings, defaults if None
            entry_gate: Returns False to refuse starting a session
            clock: Wall clock in milliseconds
        """
        super().__init__()
        self.settings = settings or AppSettings()
        self.text_provider = text_provider
        self.insight_provider = insight_provider or InsightProvider(
            high_accuracy_threshold=self.settings.high_accuracy_threshold
        )
        self.entry_gate = entry_gate
        self.clock = clock
        self.prefetch = PrefetchCache(self.text_provider.fetch)

        self._state = SessionState.IDLE
        self._accumulator = ProfileAccumulator(
            max_keys=self.settings.profile_struggling_keys,
            recent_errors_limit=self.settings.recent_errors_limit,
        )
        self._challenges: list[Challenge] = []
        self._practice_text: Optional[PracticeText] = None
        self._recorder: Optional[KeystrokeRecorder] = None
        self._challenge_id: Optional[str] = None
        self._start_time_ms: Optional[int] = None
        self._result: Optional[SessionResult] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def practice_text(self) -> Optional[PracticeText]:
        return self._practice_text

    @property
    def recorder(self) -> Optional[KeystrokeRecorder]:
        return self._recorder

    @property
    def current_result(self) -> Optional[SessionResult]:
        return self._result

    @property
    def challenges(self) -> list[Challenge]:
        """Completed challenges, oldest first."""
        return list(self._challenges)

    @property
    def profile(self) -> Optional[PerformanceProfile]:
        return self._accumulator.profile()

    def _set_state(self, state: SessionState) -> None:
        log.debug(f"Session state: {self._state.value} -> {state.value}")
        self._state = state
        self.signal_state_changed.emit(state.value)

    def load_challenge(self) -> PracticeText:
        """Load practice text: Idle -> Ready.

        Uses the prefetched text if one is ready, otherwise fetches now.

        Returns:
            The PracticeText to be typed

        Raises:
            InvalidTransitionError: If not idle
            SessionBlockedError: If the entry gate refuses
        """
        if self._state != SessionState.IDLE:
            raise InvalidTransitionError(self._state.value, "load a challenge")

        if self.entry_gate is not None and not self.entry_gate():
            log.warning("Entry gate refused to start a session")
            raise SessionBlockedError("Session entry was refused")

        practice_text = self.prefetch.try_take_cached()
        if practice_text is not None:
            log.info("Using prefetched practice text")
        else:
            # Anything still in flight was requested for an older profile
            self.prefetch.invalidate()
            practice_text = self.text_provider.fetch(self.profile)

        self._practice_text = practice_text
        self._recorder = KeystrokeRecorder(practice_text.words)
        self._challenge_id = uuid.uuid4().hex
        self._start_time_ms = None
        self._result = None
        self._set_state(SessionState.READY)
        return practice_text

    def handle_key(self, key: str, timestamp_ms: Optional[int] = None) -> Optional[Keystroke]:
        """Feed one key event into the session.

        In Ready, a space starts the timer and is not recorded; other keys are
        ignored. In Typing, the key is recorded unless the time budget has
        already run out. Keys in any other state are ignored.

        Args:
            key: Key name: a single character, " " or BACKSPACE
            timestamp_ms: Event time, wall clock if None

        Returns:
            The recorded Keystroke, or None
        """
        if timestamp_ms is None:
            timestamp_ms = self.clock()

        if self._state == SessionState.READY:
            if key == SPACE:
                self._start_time_ms = timestamp_ms
                self._set_state(SessionState.TYPING)
            return None

        if self._state != SessionState.TYPING:
            log.debug(f"Ignoring key while {self._state.value}")
            return None

        if self.tick(timestamp_ms):
            return None

        keystroke = self._recorder.process_key(key, timestamp_ms)
        if self._recorder.is_finished:
            # Typing happened, so elapsed time is at least one second
            elapsed_seconds = max(1, round_half_up(self._elapsed_ms(timestamp_ms) / 1000))
            self._finish(elapsed_seconds, timestamp_ms)
        return keystroke

    def _elapsed_ms(self, now_ms: int) -> int:
        """Milliseconds since typing started, never negative."""
        elapsed = now_ms - self._start_time_ms
        if elapsed < 0:
            log.warning(f"Clock went backwards: start={self._start_time_ms}, now={now_ms}")
            return 0
        return elapsed

    def tick(self, now_ms: Optional[int] = None) -> bool:
        """End the session if its time budget has run out.

        Args:
            now_ms: Current time, wall clock if None

        Returns:
            True if this call ended the session
        """
        if self._state != SessionState.TYPING:
            return False
        if now_ms is None:
            now_ms = self.clock()

        budget_ms = self.settings.session_seconds * 1000
        if self._elapsed_ms(now_ms) < budget_ms:
            return False

        self._finish(self.settings.session_seconds, self._start_time_ms + budget_ms)
        return True

    def remaining_seconds(self, now_ms: Optional[int] = None) -> int:
        """Whole seconds left in the time budget."""
        if self._state == SessionState.READY:
            return self.settings.session_seconds
        if self._state != SessionState.TYPING:
            return 0
        if now_ms is None:
            now_ms = self.clock()
        elapsed_ms = self._elapsed_ms(now_ms)
        return max(0, self.settings.session_seconds - elapsed_ms // 1000)

    def _finish(self, elapsed_seconds: float, end_time_ms: int) -> None:
        """Typing -> Scoring -> Reviewing."""
        self._set_state(SessionState.SCORING)
        recorder = self._recorder

        result = score_session(
            recorder.keystrokes,
            elapsed_seconds,
            recorder.completed_word_count,
            len(recorder.words),
            max_struggling_keys=self.settings.max_struggling_keys,
        )
        result = self.insight_provider.enrich(result)

        challenge = Challenge(
            id=self._challenge_id,
            text=self._practice_text.text,
            keystrokes=list(recorder.keystrokes),
            result=result,
            start_time_ms=self._start_time_ms,
            end_time_ms=end_time_ms,
            is_personalized=self._practice_text.is_personalized,
            target_keys=self._practice_text.target_keys,
        )
        self._challenges.append(challenge)
        self._accumulator.add(challenge)
        self._result = result

        log.info(
            f"Session complete: {result.words_per_minute} WPM, "
            f"{result.accuracy_percent}% accuracy, "
            f"{result.completed_word_count}/{result.total_word_count} words"
        )

        self._set_state(SessionState.REVIEWING)
        self.signal_result_ready.emit(result)

        if self.settings.prefetch_enabled:
            self.prefetch.begin_prefetch(self.profile)

    def new_challenge(self) -> PracticeText:
        """Leave the results: Reviewing -> Idle -> Ready.

        Returns:
            The next PracticeText

        Raises:
            InvalidTransitionError: If not reviewing
        """
        if self._state != SessionState.REVIEWING:
            raise InvalidTransitionError(self._state.value, "start a new challenge")

        self._recorder = None
        self._practice_text = None
        self._set_state(SessionState.IDLE)
        return self.load_challenge()
