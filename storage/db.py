#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging
import sqlite3

LOGGER = logging.getLogger(__name__)


class Database:
    def __init__(self, db_path: str = "pomodoro.db"):
        self.db_path = db_path
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON;")

    def init_schema(self):
        cur = self.conn.cursor()

        # --- key/value state (timer snapshot, settings, active task) ---
        cur.execute("""
            CREATE TABLE IF NOT EXISTS app_state (
                key TEXT PRIMARY KEY,
                value TEXT
            );
        """)

        # --- tasks ---
        cur.execute("""
            CREATE TABLE IF NOT EXISTS tasks (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                note TEXT NOT NULL DEFAULT '',
                completed INTEGER NOT NULL DEFAULT 0,
                est_pomodoros INTEGER NOT NULL DEFAULT 1,
                act_pomodoros INTEGER NOT NULL DEFAULT 0,
                created_at INTEGER NOT NULL,
                updated_at INTEGER NOT NULL
            );
        """)

        # --- completed sessions ---
        cur.execute("""
            CREATE TABLE IF NOT EXISTS sessions (
                id TEXT PRIMARY KEY,
                task_id TEXT,
                kind TEXT NOT NULL,
                duration_min INTEGER NOT NULL,
                completed_at INTEGER NOT NULL,
                FOREIGN KEY(task_id) REFERENCES tasks(id) ON DELETE SET NULL
            );
        """)

        cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_completed ON tasks(completed);")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_sessions_task ON sessions(task_id);")
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_sessions_completed ON sessions(completed_at);"
        )

        self.conn.commit()

    def close(self):
        try:
            self.conn.close()
        except sqlite3.Error:
            LOGGER.warning("Closing %s failed", self.db_path, exc_info=True)
