# -*- coding: utf-8 -*-

import logging
import queue
import threading
import time
from typing import Any, Callable, List, Optional

from core.clock import now_ms, remaining_seconds
from core.ticker_protocol import (
    Check,
    Command,
    Complete,
    Event,
    Start,
    Stop,
    Tick,
    ensure_command,
    ensure_event,
    from_message,
    to_message,
)

LOGGER = logging.getLogger(__name__)

THREAD_POLL_MS = 100
SCHEDULED_POLL_MS = 200
PUMP_MS = 50

Listener = Callable[[Event], None]

_SHUTDOWN = object()


def _evaluate(deadline: Optional[int], now: int) -> List[Event]:
    if deadline is None:
        return []
    remaining = remaining_seconds(deadline, now)
    if remaining <= 0:
        return [Tick(0), Complete()]
    return [Tick(remaining)]


class ThreadDriver:
    """
    Polling loop in a daemon worker thread.
    - Commands arrive on an inbound queue.
    - Events are queued for the owning thread, which calls drain().
    Any exception inside the worker marks the driver failed and ends the loop.
    """

    name = "thread"

    def __init__(self, clock: Callable[[], int] = now_ms, poll_ms: int = THREAD_POLL_MS):
        self.clock = clock
        self.poll_ms = poll_ms
        self._commands: "queue.Queue[Any]" = queue.Queue()
        self.events: "queue.Queue[Event]" = queue.Queue()
        self._failed = threading.Event()
        self._thread = threading.Thread(target=self._run, name="timer-ticker", daemon=True)

    @property
    def failed(self) -> bool:
        return self._failed.is_set()

    def open(self) -> None:
        self._thread.start()

    def send(self, command: Command) -> None:
        # crosses the thread boundary as a plain message
        self._commands.put(to_message(ensure_command(command)))

    def drain(self, listener: Listener) -> int:
        n = 0
        while True:
            try:
                event = self.events.get_nowait()
            except queue.Empty:
                return n
            listener(event)
            n += 1

    def close(self) -> None:
        self._commands.put(_SHUTDOWN)
        if self._thread.is_alive():
            self._thread.join(timeout=1)

    # ----- worker side -----
    def _check(self, deadline: Optional[int]) -> Optional[int]:
        events = _evaluate(deadline, self.clock())
        for event in events:
            self.events.put(event)
        if events and isinstance(events[-1], Complete):
            return None
        return deadline

    def _run(self) -> None:
        deadline: Optional[int] = None
        next_poll: Optional[float] = None
        try:
            while True:
                timeout = None
                if deadline is not None and next_poll is not None:
                    timeout = max(0.0, next_poll - time.monotonic())
                try:
                    cmd = self._commands.get(timeout=timeout)
                except queue.Empty:
                    cmd = None

                if cmd is _SHUTDOWN:
                    return
                if cmd is not None:
                    cmd = from_message(cmd)
                if isinstance(cmd, Start):
                    deadline = self._check(cmd.deadline)
                    next_poll = time.monotonic() + self.poll_ms / 1000
                elif isinstance(cmd, Stop):
                    deadline = None
                    next_poll = None
                elif isinstance(cmd, Check):
                    deadline = self._check(deadline)
                else:
                    deadline = self._check(deadline)
                    next_poll = time.monotonic() + self.poll_ms / 1000
        except Exception:
            LOGGER.exception("Ticker worker thread failed")
            self._failed.set()


class ScheduledDriver:
    """
    In-context polling on a Tk-style scheduler (after / after_cancel).
    Events are delivered to the listener by direct call.
    """

    name = "scheduler"

    def __init__(
        self,
        scheduler: Any,
        listener: Listener,
        clock: Callable[[], int] = now_ms,
        poll_ms: int = SCHEDULED_POLL_MS,
    ):
        self.scheduler = scheduler
        self.listener = listener
        self.clock = clock
        self.poll_ms = poll_ms
        self._deadline: Optional[int] = None
        self._job = None

    @property
    def active(self) -> bool:
        return self._job is not None

    def send(self, command: Command) -> None:
        command = ensure_command(command)
        if isinstance(command, Start):
            self._cancel()
            self._deadline = command.deadline
            self._poll()
        elif isinstance(command, Stop):
            self._cancel()
            self._deadline = None
        elif isinstance(command, Check):
            self._check()

    def close(self) -> None:
        self._cancel()
        self._deadline = None

    def _cancel(self) -> None:
        if self._job is not None:
            self.scheduler.after_cancel(self._job)
            self._job = None

    def _check(self) -> None:
        events = _evaluate(self._deadline, self.clock())
        if events and isinstance(events[-1], Complete):
            self._cancel()
            self._deadline = None
        for event in events:
            self.listener(event)

    def _poll(self) -> None:
        self._job = None
        self._check()
        if self._deadline is not None and self._job is None:
            self._job = self.scheduler.after(self.poll_ms, self._poll)


class Ticker:
    """
    Engine-facing ticker.
    Prefers the worker thread; if it cannot start or dies later, switches to
    the in-context scheduler for good and re-arms the last deadline.
    """

    def __init__(
        self,
        scheduler: Any,
        clock: Callable[[], int] = now_ms,
        prefer_thread: bool = True,
        thread_factory: Callable[..., ThreadDriver] = ThreadDriver,
    ):
        self.scheduler = scheduler
        self.clock = clock
        self._listener: Optional[Listener] = None
        self._deadline: Optional[int] = None
        self._pump_job = None
        self._thread: Optional[ThreadDriver] = None
        self._fallback: Optional[ScheduledDriver] = None

        if prefer_thread:
            try:
                driver = thread_factory(clock=clock)
                driver.open()
                self._thread = driver
            except (RuntimeError, OSError):
                LOGGER.warning("Ticker thread unavailable, using in-context timer", exc_info=True)
        if self._thread is None:
            self._fallback = ScheduledDriver(scheduler, self._deliver, clock)
        else:
            self._pump_job = self.scheduler.after(PUMP_MS, self._pump)

    @property
    def driver_name(self) -> str:
        return self._thread.name if self._thread is not None else ScheduledDriver.name

    def set_listener(self, fn: Listener) -> None:
        self._listener = fn

    def send(self, command: Command) -> None:
        command = ensure_command(command)
        LOGGER.debug("ticker <- %s", to_message(command))
        if self._thread is not None and self._thread.failed:
            self._switch_to_fallback()

        if isinstance(command, Start):
            self._deadline = command.deadline
        elif isinstance(command, Stop):
            self._deadline = None

        if self._thread is not None:
            self._thread.send(command)
        else:
            self._fallback.send(command)

    def close(self) -> None:
        if self._pump_job is not None:
            self.scheduler.after_cancel(self._pump_job)
            self._pump_job = None
        if self._thread is not None:
            self._thread.close()
            self._thread = None
        if self._fallback is not None:
            self._fallback.close()

    def _deliver(self, event: Event) -> None:
        event = ensure_event(event)
        # a late COMPLETE for an earlier deadline must not drop the current one
        if (
            isinstance(event, Complete)
            and self._deadline is not None
            and self.clock() >= self._deadline
        ):
            self._deadline = None
        if self._listener is not None:
            self._listener(event)

    def _pump(self) -> None:
        self._pump_job = None
        if self._thread is None:
            return
        self._thread.drain(self._deliver)
        if self._thread.failed:
            self._switch_to_fallback()
            return
        self._pump_job = self.scheduler.after(PUMP_MS, self._pump)

    def _switch_to_fallback(self) -> None:
        LOGGER.warning("Ticker thread failed, switching to in-context timer")
        self._thread = None
        if self._pump_job is not None:
            self.scheduler.after_cancel(self._pump_job)
            self._pump_job = None
        self._fallback = ScheduledDriver(self.scheduler, self._deliver, self.clock)
        if self._deadline is not None:
            self._fallback.send(Start(self._deadline))
