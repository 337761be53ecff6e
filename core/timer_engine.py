# -*- coding: utf-8 -*-

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from core.clock import remaining_seconds

FOCUS = "focus"
SHORT_BREAK = "shortBreak"
LONG_BREAK = "longBreak"
MODES = (FOCUS, SHORT_BREAK, LONG_BREAK)

LONG_BREAK_EVERY = 4


@dataclass(frozen=True)
class Durations:
    focus: int = 25 * 60
    short_break: int = 5 * 60
    long_break: int = 15 * 60

    def for_mode(self, mode: str) -> int:
        if mode == FOCUS:
            return self.focus
        if mode == SHORT_BREAK:
            return self.short_break
        if mode == LONG_BREAK:
            return self.long_break
        raise ValueError(f"Unknown mode: {mode!r}")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class TimerState:
    mode: str = FOCUS  # focus | shortBreak | longBreak
    remaining_seconds: int = 25 * 60
    running: bool = False
    deadline: Optional[int] = None  # epoch ms, only while running
    completed_focus_count: int = 0
    has_started: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "remainingSeconds": self.remaining_seconds,
            "running": self.running,
            "deadline": self.deadline,
            "completedFocusCount": self.completed_focus_count,
            "hasStarted": self.has_started,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "TimerState":
        """
        Rebuild a persisted record. Raises ValueError for anything partial or
        inconsistent so callers can discard it and start fresh.
        """
        if not isinstance(data, dict):
            raise ValueError("Timer snapshot must be an object.")

        try:
            mode = data["mode"]
            remaining = data["remainingSeconds"]
            running = data["running"]
            deadline = data["deadline"]
            count = data["completedFocusCount"]
            has_started = data["hasStarted"]
        except KeyError as e:
            raise ValueError(f"Timer snapshot is missing {e.args[0]!r}.") from e

        if mode not in MODES:
            raise ValueError(f"Unknown mode: {mode!r}")
        if not _is_int(remaining) or remaining < 0:
            raise ValueError("remainingSeconds must be a non-negative integer.")
        if not _is_int(count) or count < 0:
            raise ValueError("completedFocusCount must be a non-negative integer.")
        if not isinstance(running, bool) or not isinstance(has_started, bool):
            raise ValueError("running/hasStarted must be booleans.")
        if deadline is not None and (not _is_int(deadline) or deadline < 0):
            raise ValueError("deadline must be epoch milliseconds or null.")
        if running != (deadline is not None):
            raise ValueError("running and deadline disagree.")

        return cls(
            mode=mode,
            remaining_seconds=remaining,
            running=running,
            deadline=deadline,
            completed_focus_count=count,
            has_started=has_started,
        )


def next_mode(completed_mode: str, completed_focus_count: int) -> str:
    """
    Mode that follows a completed phase. `completed_focus_count` is the count
    after the completion was recorded.
    """
    if completed_mode == FOCUS:
        if completed_focus_count % LONG_BREAK_EVERY == 0:
            return LONG_BREAK
        return SHORT_BREAK
    return FOCUS


class TimerEngine:
    """
    Pure countdown state machine (no Tkinter, no threads, no clock).
    Callers pass `now` in epoch ms; remaining time is always derived from the
    absolute deadline, never decremented.
    """

    def __init__(
        self,
        durations: Optional[Durations] = None,
        state: Optional[TimerState] = None,
    ):
        self.durations = durations or Durations()
        self.state = state or self._default_state()
        self._completing = False

    def _default_state(self) -> TimerState:
        return TimerState(mode=FOCUS, remaining_seconds=self.durations.focus)

    @property
    def completing(self) -> bool:
        return self._completing

    def snapshot(self) -> TimerState:
        return replace(self.state)

    def load(self, state: TimerState) -> None:
        self.state = replace(state)
        self._completing = False

    # ----- commands -----
    def start(self, now: int) -> bool:
        st = self.state
        if st.running:
            return False
        st.deadline = now + st.remaining_seconds * 1000
        st.running = True
        st.has_started = True
        # a freshly armed deadline ends any in-flight completion
        self._completing = False
        return True

    def pause(self, now: int) -> bool:
        st = self.state
        if not st.running:
            return False
        st.remaining_seconds = remaining_seconds(st.deadline, now)
        st.running = False
        st.deadline = None
        return True

    def reset(self) -> None:
        st = self.state
        st.remaining_seconds = self.durations.for_mode(st.mode)
        st.running = False
        st.deadline = None
        st.has_started = False
        self._completing = False

    def full_reset(self) -> None:
        self.state = self._default_state()
        self._completing = False

    def switch_mode(self, target: str) -> bool:
        """Returns True if a running phase was abandoned."""
        duration = self.durations.for_mode(target)
        st = self.state
        was_running = st.running
        st.mode = target
        st.remaining_seconds = duration
        st.running = False
        st.deadline = None
        st.has_started = False
        self._completing = False
        return was_running

    def refresh(self, now: int) -> int:
        st = self.state
        if st.running:
            st.remaining_seconds = remaining_seconds(st.deadline, now)
        return st.remaining_seconds

    def on_tick(self, now: int) -> Optional[str]:
        """
        Returns the mode that just finished when this tick crosses the deadline
        and no completion is already in flight; None otherwise.
        """
        if not self.state.running:
            return None
        if self.refresh(now) > 0:
            return None
        if self._completing:
            return None
        self._completing = True
        return self.state.mode

    # ----- completion policy -----
    def complete(self, completed_mode: str) -> str:
        st = self.state
        if completed_mode == FOCUS:
            st.completed_focus_count += 1
        nxt = next_mode(completed_mode, st.completed_focus_count)

        st.mode = nxt
        st.remaining_seconds = self.durations.for_mode(nxt)
        st.running = False
        st.deadline = None
        st.has_started = True
        return nxt

    def finish_completion(self) -> None:
        self._completing = False

    # ----- settings -----
    def apply_durations(self, durations: Durations) -> bool:
        """Returns True if the untouched current phase was resized."""
        self.durations = durations
        st = self.state
        if st.running or st.has_started:
            return False
        st.remaining_seconds = durations.for_mode(st.mode)
        return True
