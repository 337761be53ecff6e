# -*- coding: utf-8 -*-

import logging
from typing import Any, Callable, List, Optional

from core.clock import now_ms
from core.ticker_protocol import Check, Complete, Event, Start, Stop, ensure_event
from core.timer_engine import Durations, TimerEngine, TimerState
from services.settings_service import AutoStartPolicy
from storage.repos import TimerStateStore

LOGGER = logging.getLogger(__name__)


class TimerService:
    """
    Orchestrates:
    - TimerEngine state (the only place it is mutated)
    - the ticker (START / STOP / CHECK out, TICK / COMPLETE in)
    - snapshot persistence after every mutation
    - completion listeners (alarm, session log) and auto-start

    Everything runs on the Tk thread; ticker events arrive one at a time.
    """

    def __init__(
        self,
        store: TimerStateStore,
        scheduler: Any,
        ticker: Any,
        durations: Optional[Durations] = None,
        clock: Callable[[], int] = now_ms,
        auto_start: Optional[AutoStartPolicy] = None,
    ):
        self.store = store
        self.scheduler = scheduler
        self.ticker = ticker
        self.clock = clock
        self.auto_start = auto_start or AutoStartPolicy()

        self.engine = TimerEngine(durations=durations)
        self._auto_start_job = None

        self._on_tick: Optional[Callable[[TimerState], None]] = None
        self._on_phase_change: Optional[Callable[[TimerState], None]] = None
        self._on_state_change: Optional[Callable[[TimerState], None]] = None
        self._on_complete: List[Callable[[str], None]] = []

        self.ticker.set_listener(self.handle_event)

    # ----- Callbacks -----
    def set_on_tick(self, fn: Callable[[TimerState], None]) -> None:
        self._on_tick = fn

    def set_on_phase_change(self, fn: Callable[[TimerState], None]) -> None:
        self._on_phase_change = fn

    def set_on_state_change(self, fn: Callable[[TimerState], None]) -> None:
        self._on_state_change = fn

    def add_on_complete(self, fn: Callable[[str], None]) -> None:
        self._on_complete.append(fn)

    def _emit_tick(self) -> None:
        if self._on_tick:
            self._on_tick(self.engine.snapshot())

    def _emit_phase_change(self) -> None:
        if self._on_phase_change:
            self._on_phase_change(self.engine.snapshot())

    def _emit_state_change(self) -> None:
        if self._on_state_change:
            self._on_state_change(self.engine.snapshot())

    def _emit_complete(self, completed_mode: str) -> None:
        for fn in list(self._on_complete):
            try:
                fn(completed_mode)
            except Exception:
                LOGGER.exception("Completion listener failed for %s", completed_mode)

    # ----- Public API -----
    def get_snapshot(self) -> TimerState:
        return self.engine.snapshot()

    @property
    def auto_start_pending(self) -> bool:
        return self._auto_start_job is not None

    def start(self) -> bool:
        self._cancel_auto_start()
        if not self.engine.start(self.clock()):
            return False
        st = self.engine.state
        LOGGER.info("Timer started: mode=%s remaining=%ss", st.mode, st.remaining_seconds)
        self.ticker.send(Start(st.deadline))
        self._changed()
        return True

    def pause(self) -> bool:
        self._cancel_auto_start()
        if not self.engine.pause(self.clock()):
            return False
        self.ticker.send(Stop())
        st = self.engine.state
        LOGGER.info("Timer paused: mode=%s remaining=%ss", st.mode, st.remaining_seconds)
        self._changed()
        return True

    def reset(self) -> None:
        self._cancel_auto_start()
        self.engine.reset()
        self.ticker.send(Stop())
        LOGGER.info("Timer reset: mode=%s", self.engine.state.mode)
        self._changed()

    def full_reset(self) -> None:
        self._cancel_auto_start()
        self.engine.full_reset()
        self.ticker.send(Stop())
        LOGGER.info("Timer fully reset")
        self._changed()

    def switch_mode(self, target: str) -> None:
        self._cancel_auto_start()
        abandoned = self.engine.switch_mode(target)
        self.ticker.send(Stop())
        if abandoned:
            LOGGER.info("Running phase abandoned by switch to %s", target)
        self._changed()

    def check(self) -> None:
        """Immediate re-evaluation, e.g. when the window becomes visible again."""
        if self.engine.state.running:
            self.ticker.send(Check())

    def on_config_change(self, durations: Durations) -> None:
        if self.engine.apply_durations(durations):
            self._changed()

    def set_auto_start(self, policy: AutoStartPolicy) -> None:
        self.auto_start = policy

    def handle_event(self, event: Event) -> None:
        event = ensure_event(event)
        if isinstance(event, Complete):
            LOGGER.debug("ticker reported COMPLETE")
        self.on_tick()

    def on_tick(self, now: Optional[int] = None) -> None:
        """
        Recomputes remaining time from the deadline. Stale ticks (timer not
        running any more) are ignored.
        """
        st = self.engine.state
        if not st.running:
            return
        before = st.remaining_seconds
        completed = self.engine.on_tick(self.clock() if now is None else now)
        if completed is not None:
            self._emit_tick()
            self._complete(completed)
            return
        if st.remaining_seconds != before:
            self._persist()
        self._emit_tick()

    def restore(self) -> TimerState:
        """
        Load the persisted snapshot and reconcile it against the clock:
        - nothing saved / unreadable -> fresh state
        - running, deadline ahead     -> keep counting down
        - running, deadline passed    -> complete now
        """
        saved = self.store.load()
        if saved is None:
            self.engine.full_reset()
            LOGGER.info("No timer snapshot, starting fresh")
            self._changed()
            return self.engine.snapshot()

        self.engine.load(saved)
        st = self.engine.state
        if not st.running:
            # an untouched phase follows the current settings
            self.engine.apply_durations(self.engine.durations)
            LOGGER.info("Timer restored: mode=%s remaining=%ss", st.mode, st.remaining_seconds)
            self._changed()
            return self.engine.snapshot()

        now = self.clock()
        if st.deadline > now:
            self.engine.refresh(now)
            LOGGER.info("Timer resumed: mode=%s remaining=%ss", st.mode, st.remaining_seconds)
            self.ticker.send(Start(st.deadline))
            self._changed()
        else:
            LOGGER.info("Phase %s elapsed while closed, completing", st.mode)
            self.on_tick(now)
        return self.engine.snapshot()

    def close(self) -> None:
        self._cancel_auto_start()
        self.ticker.close()

    # ----- internals -----
    def _persist(self) -> None:
        self.store.save(self.engine.snapshot())

    def _changed(self) -> None:
        self._persist()
        self._emit_state_change()
        self._emit_tick()

    def _complete(self, completed_mode: str) -> None:
        self.ticker.send(Stop())
        self._emit_complete(completed_mode)

        nxt = self.engine.complete(completed_mode)
        LOGGER.info(
            "Phase complete: %s -> %s (focus count %s)",
            completed_mode,
            nxt,
            self.engine.state.completed_focus_count,
        )
        self._persist()
        self._emit_phase_change()

        if self.auto_start.enabled:
            self._auto_start_job = self.scheduler.after(
                self.auto_start.delay_ms, self._run_auto_start
            )
        else:
            self.engine.finish_completion()

    def _run_auto_start(self) -> None:
        self._auto_start_job = None
        if self.engine.start(self.clock()):
            st = self.engine.state
            LOGGER.info("Auto-started %s", st.mode)
            self.ticker.send(Start(st.deadline))
        else:
            self.engine.finish_completion()
        self._changed()

    def _cancel_auto_start(self) -> None:
        if self._auto_start_job is not None:
            self.scheduler.after_cancel(self._auto_start_job)
            self._auto_start_job = None
            self.engine.finish_completion()
