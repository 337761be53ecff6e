# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import ttk
from typing import Callable

from core.clock import format_time
from core.timer_engine import FOCUS, LONG_BREAK, MODES, SHORT_BREAK, TimerState
from services.timer_service import TimerService

MODE_LABELS = {
    FOCUS: "Pomodoro",
    SHORT_BREAK: "Short Break",
    LONG_BREAK: "Long Break",
}

MODE_COLORS = {
    FOCUS: "#BA4949",
    SHORT_BREAK: "#38858A",
    LONG_BREAK: "#397097",
}


class PomodoroWidget(ttk.Frame):
    def __init__(
        self,
        master,
        timer_service: TimerService,
        on_request_refresh: Callable[[], None],
    ):
        super().__init__(master)

        self.timer_service = timer_service
        self.on_request_refresh = on_request_refresh

        self._build_ui()

        # wire callbacks from service -> widget UI
        self.timer_service.set_on_tick(self._on_tick)
        self.timer_service.set_on_phase_change(self._on_phase_change)
        self.timer_service.set_on_state_change(self._on_state_change)

        # window shown / focused again -> re-check the deadline right away
        top = self.winfo_toplevel()
        for ev in ("<Map>", "<FocusIn>"):
            top.bind(ev, lambda e: self.timer_service.check(), add="+")

        self._render(self.timer_service.get_snapshot())

    def _build_ui(self):
        self.columnconfigure(0, weight=1)

        self.time_var = tk.StringVar(value="25:00")
        self.info_var = tk.StringVar(value="Ready")
        self.count_var = tk.StringVar(value="#1")

        modes = ttk.Frame(self)
        modes.grid(row=0, column=0, sticky="w", pady=(0, 6))
        self.mode_btns = {}
        for i, mode in enumerate(MODES):
            b = ttk.Button(
                modes,
                text=MODE_LABELS[mode],
                command=lambda m=mode: self._switch(m),
            )
            b.grid(row=0, column=i, padx=(0, 6))
            self.mode_btns[mode] = b

        self.time_label = tk.Label(
            self, textvariable=self.time_var, font=("Sans", 40, "bold"), fg="white"
        )
        self.time_label.grid(row=1, column=0, sticky="ew", pady=(8, 4))

        ttk.Label(self, textvariable=self.info_var).grid(row=2, column=0, sticky="w")
        ttk.Label(self, textvariable=self.count_var).grid(
            row=3, column=0, sticky="w", pady=(0, 10)
        )

        btns = ttk.Frame(self)
        btns.grid(row=4, column=0, sticky="w")

        self.start_btn = ttk.Button(btns, text="Start", command=self._start)
        self.pause_btn = ttk.Button(btns, text="Pause", command=self._pause)
        self.reset_btn = ttk.Button(btns, text="Reset", command=self._reset)
        self.cycle_btn = ttk.Button(btns, text="Reset cycle", command=self._reset_cycle)

        self.start_btn.grid(row=0, column=0, padx=(0, 6))
        self.pause_btn.grid(row=0, column=1, padx=(0, 6))
        self.reset_btn.grid(row=0, column=2, padx=(0, 6))
        self.cycle_btn.grid(row=0, column=3)

    def _update_buttons(self, snap: TimerState):
        if snap.running:
            self.start_btn.state(["disabled"])
            self.pause_btn.state(["!disabled"])
        else:
            self.start_btn.state(["!disabled"])
            self.pause_btn.state(["disabled"])

        for mode, b in self.mode_btns.items():
            b.state(["pressed"] if mode == snap.mode else ["!pressed"])

    def _start(self):
        self.timer_service.start()

    def _pause(self):
        self.timer_service.pause()

    def _reset(self):
        self.timer_service.reset()

    def _reset_cycle(self):
        # back to focus #1; the only way the cycle count is cleared
        self.timer_service.full_reset()

    def _switch(self, mode: str):
        self.timer_service.switch_mode(mode)

    # ---- Service callbacks ----
    def _on_tick(self, snap: TimerState):
        self._render(snap)

    def _on_phase_change(self, snap: TimerState):
        if snap.mode == FOCUS:
            self.info_var.set("Break over! Back to work!")
        else:
            self.info_var.set("Focus complete! Take a break!")
        self._render(snap, keep_info=True)
        self.on_request_refresh()

    def _on_state_change(self, snap: TimerState):
        self._render(snap)
        self.on_request_refresh()

    def _render(self, snap: TimerState, keep_info: bool = False):
        self.time_var.set(format_time(snap.remaining_seconds))
        self.time_label.configure(bg=MODE_COLORS[snap.mode])
        self.count_var.set(f"#{snap.completed_focus_count + 1}")

        if not keep_info:
            if snap.running:
                self.info_var.set("Running...")
            elif snap.has_started:
                self.info_var.set("Paused")
            else:
                self.info_var.set("Ready")
        self._update_buttons(snap)
