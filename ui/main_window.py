# -*- coding: utf-8 -*-

import datetime as dt
import logging
import tkinter as tk
from tkinter import ttk
from typing import Any, Callable, Dict, List, Optional

from tkinterweb import HtmlFrame

from services.settings_service import SettingsService
from services.stats_service import StatsService
from services.task_service import TaskService
from services.timer_service import TimerService
from ui.markdown_renderer import MarkdownRenderer
from ui.pomodoro_widget import PomodoroWidget
from ui.settings_dialog import SettingsDialog

LOGGER = logging.getLogger(__name__)


def format_week(rows: List[Dict[str, Any]]) -> str:
    """One line per day from StatsService.daily_breakdown(), oldest first."""
    lines = []
    for r in rows:
        day = dt.date.fromisoformat(r["date"]).strftime("%a %d")
        lines.append(f"{day}  {r['count']:>2}  {r['minutes']}m")
    return "\n".join(lines)


class MainWindow:
    def __init__(
        self,
        root: tk.Tk,
        task_service: TaskService,
        timer_service: TimerService,
        stats_service: StatsService,
        settings_service: SettingsService,
        preview_sound: Optional[Callable[[str], None]] = None,
    ):
        self.root = root
        self.task_service = task_service
        self.timer_service = timer_service
        self.stats_service = stats_service
        self.settings_service = settings_service
        self.preview_sound = preview_sound

        self.root.title("Pomodoro")
        self.root.geometry("900x520")

        self._md = MarkdownRenderer()
        self._list_index_to_task_id: Dict[int, str] = {}
        self._note_task_id: Optional[str] = None

        self._build_ui()
        self._refresh_all()
        self.root.protocol("WM_DELETE_WINDOW", self._on_close)

    def _build_ui(self):
        root = self.root

        outer = ttk.Frame(root, padding=10)
        outer.pack(fill="both", expand=True)

        outer.columnconfigure(0, weight=1)
        outer.columnconfigure(1, weight=1)
        outer.rowconfigure(0, weight=1)

        # LEFT: Timer + Stats
        left = ttk.Frame(outer)
        left.grid(row=0, column=0, sticky="nsew", padx=(0, 10))
        left.columnconfigure(0, weight=1)
        left.rowconfigure(1, weight=1)

        self.pomodoro = PomodoroWidget(
            left,
            timer_service=self.timer_service,
            on_request_refresh=self._refresh_all,
        )
        self.pomodoro.grid(row=0, column=0, sticky="ew")

        stats = ttk.Labelframe(left, text="Today", padding=10)
        stats.grid(row=1, column=0, sticky="nsew", pady=(10, 0))

        self.stats_var = tk.StringVar(value="")
        ttk.Label(stats, textvariable=self.stats_var, font=("Sans", 11)).grid(
            row=0, column=0, sticky="w"
        )
        self.week_var = tk.StringVar(value="")
        ttk.Label(stats, textvariable=self.week_var, font=("Monospace", 9)).grid(
            row=1, column=0, sticky="w", pady=(6, 0)
        )
        self.active_var = tk.StringVar(value="Working on: (none)")
        ttk.Label(stats, textvariable=self.active_var).grid(
            row=2, column=0, sticky="w", pady=(8, 0)
        )
        ttk.Button(stats, text="Settings", command=self._open_settings).grid(
            row=3, column=0, sticky="w", pady=(10, 0)
        )

        # RIGHT: Tasks + note
        right = ttk.Labelframe(outer, text="Tasks", padding=10)
        right.grid(row=0, column=1, sticky="nsew")
        right.columnconfigure(0, weight=1)
        right.rowconfigure(2, weight=1)
        right.rowconfigure(4, weight=1)

        add_row = ttk.Frame(right)
        add_row.grid(row=0, column=0, sticky="ew")
        add_row.columnconfigure(0, weight=1)

        self.new_task_var = tk.StringVar()
        self.est_var = tk.StringVar(value="1")
        ttk.Entry(add_row, textvariable=self.new_task_var).grid(row=0, column=0, sticky="ew")
        ttk.Spinbox(add_row, from_=1, to=99, width=3, textvariable=self.est_var).grid(
            row=0, column=1, padx=(6, 0)
        )
        ttk.Button(add_row, text="Add", command=self._add_task).grid(
            row=0, column=2, padx=(6, 0)
        )

        self.err_var = tk.StringVar(value="")
        ttk.Label(right, textvariable=self.err_var, foreground="red").grid(
            row=1, column=0, sticky="w", pady=(6, 6)
        )

        self.task_list = tk.Listbox(right, height=8, exportselection=False)
        self.task_list.grid(row=2, column=0, sticky="nsew")
        self.task_list.bind("<<ListboxSelect>>", self._on_select_task)

        actions = ttk.Frame(right)
        actions.grid(row=3, column=0, sticky="ew", pady=(8, 8))
        ttk.Button(actions, text="Done", command=self._mark_done).pack(side="left")
        ttk.Button(actions, text="Delete", command=self._delete_task).pack(
            side="left", padx=(6, 0)
        )
        self.edit_btn = ttk.Button(actions, text="Edit note", command=self._toggle_note)
        self.edit_btn.pack(side="right")

        note_card = ttk.Frame(right)
        note_card.grid(row=4, column=0, sticky="nsew")
        self.md_view = HtmlFrame(note_card, horizontal_scrollbar="auto")
        self.md_view.pack(fill="both", expand=True)
        self.md_edit = tk.Text(note_card, wrap="word", undo=True, height=8)

    def run(self):
        self.root.mainloop()

    # ----- UI actions -----
    def _add_task(self):
        try:
            est = int(self.est_var.get() or 1)
            task = self.task_service.create_task(self.new_task_var.get(), est_pomodoros=est)
        except ValueError as e:
            self.err_var.set(str(e))
            return
        self.new_task_var.set("")
        self.err_var.set("")
        if not self.task_service.get_active_task_id():
            self.task_service.set_active_task(task.id)
        self._refresh_all()

    def _selected_task_id(self) -> Optional[str]:
        sel = self.task_list.curselection()
        if not sel:
            return None
        return self._list_index_to_task_id.get(int(sel[0]))

    def _on_select_task(self, event=None):
        task_id = self._selected_task_id()
        if not task_id:
            return
        self._save_note_if_editing()
        try:
            self.task_service.set_active_task(task_id)
            self.err_var.set("")
        except ValueError as e:
            self.err_var.set(str(e))
        self._show_note(task_id)
        self._refresh_stats_only()

    def _mark_done(self):
        task_id = self._selected_task_id()
        if not task_id:
            return
        self.task_service.set_completed(task_id, True)
        self._refresh_all()

    def _delete_task(self):
        task_id = self._selected_task_id()
        if not task_id:
            return
        self.task_service.delete_task(task_id)
        if self._note_task_id == task_id:
            self._note_task_id = None
        self._refresh_all()

    # ----- note (markdown) -----
    def _show_note(self, task_id: Optional[str]):
        self._note_task_id = task_id
        md_text = self.task_service.get_note(task_id) if task_id else ""
        self.md_view.load_html(self._md.to_html(md_text))

    def _toggle_note(self):
        if not self._note_task_id:
            return
        if self.md_edit.winfo_ismapped():
            self._save_note_if_editing()
            return
        self.md_edit.delete("1.0", tk.END)
        self.md_edit.insert("1.0", self.task_service.get_note(self._note_task_id))
        self.md_view.pack_forget()
        self.md_edit.pack(fill="both", expand=True)
        self.edit_btn.configure(text="Save note")

    def _save_note_if_editing(self):
        if not self.md_edit.winfo_ismapped():
            return
        if self._note_task_id:
            try:
                self.task_service.set_note(self._note_task_id, self.md_edit.get("1.0", "end-1c"))
            except ValueError as e:
                self.err_var.set(str(e))
        self.md_edit.pack_forget()
        self.md_view.pack(fill="both", expand=True)
        self.edit_btn.configure(text="Edit note")
        self._show_note(self._note_task_id)

    # ----- settings -----
    def _open_settings(self):
        SettingsDialog(
            self.root,
            self.settings_service,
            on_saved=self._on_settings_saved,
            preview=self.preview_sound,
        )

    def _on_settings_saved(self):
        self.timer_service.set_auto_start(self.settings_service.get_auto_start())

    # ----- Refresh -----
    def _refresh_all(self):
        self._refresh_tasks_only()
        self._refresh_stats_only()

    def _refresh_tasks_only(self):
        tasks = self.task_service.list_tasks()
        active = self.task_service.get_active_task_id()

        self.task_list.delete(0, tk.END)
        self._list_index_to_task_id.clear()

        selected_index = None
        for i, t in enumerate(tasks):
            mark = "✔" if t.completed else " "
            self.task_list.insert(
                tk.END, f"[{mark}] {t.title}  {t.act_pomodoros}/{t.est_pomodoros}"
            )
            self._list_index_to_task_id[i] = t.id
            if active and t.id == active:
                selected_index = i

        if selected_index is not None:
            self.task_list.selection_set(selected_index)
            self.task_list.activate(selected_index)
        self._show_note(active)

    def _refresh_stats_only(self):
        today = self.stats_service.today_summary()
        streak = self.stats_service.streak()
        self.stats_var.set(
            f"Pomodoros: {today['pomodoros']}   Focus: {today['hours']}h\n"
            f"Streak: {streak} day{'s' if streak != 1 else ''}"
        )
        self.week_var.set(format_week(self.stats_service.daily_breakdown(days=7)))

        active = self.task_service.get_active_task_id()
        task = self.task_service.get_task(active) if active else None
        if task:
            self.active_var.set(
                f"Working on: {task.title} ({task.act_pomodoros}/{task.est_pomodoros})"
            )
        else:
            self.active_var.set("Working on: (none)")

    def _on_close(self):
        self._save_note_if_editing()
        self.timer_service.close()
        LOGGER.info("Window closed")
        self.root.destroy()
