# -*- coding: utf-8 -*-

import datetime as dt
import time
from typing import Any, Dict, List, Optional, Set

from core.timer_engine import FOCUS
from storage.repos import SessionRepo


def _start_of_day_ts(day: dt.date) -> int:
    return int(time.mktime(dt.datetime.combine(day, dt.time.min).timetuple()))


def _local_day(ts: int) -> dt.date:
    return dt.datetime.fromtimestamp(ts).date()


class StatsService:
    """Aggregates over completed focus sessions, recomputed on every call."""

    def __init__(self, sessions: SessionRepo):
        self.sessions = sessions

    def today_summary(self, today: Optional[dt.date] = None) -> Dict[str, Any]:
        today = today or dt.date.today()
        rows = [
            s
            for s in self.sessions.list_since(_start_of_day_ts(today), kind=FOCUS)
            if _local_day(s.completed_at) == today
        ]
        minutes = sum(s.duration_min for s in rows)
        return {
            "pomodoros": len(rows),
            "minutes": minutes,
            "hours": round(minutes / 60, 1),
        }

    def daily_breakdown(
        self, days: int = 7, today: Optional[dt.date] = None
    ) -> List[Dict[str, Any]]:
        if days <= 0:
            raise ValueError("days must be positive.")
        today = today or dt.date.today()
        first = today - dt.timedelta(days=days - 1)

        by_day: Dict[dt.date, Dict[str, Any]] = {}
        for i in range(days):
            d = first + dt.timedelta(days=i)
            by_day[d] = {"date": d.isoformat(), "count": 0, "minutes": 0}

        for s in self.sessions.list_since(_start_of_day_ts(first), kind=FOCUS):
            bucket = by_day.get(_local_day(s.completed_at))
            if bucket is None:
                continue
            bucket["count"] += 1
            bucket["minutes"] += s.duration_min

        return [by_day[d] for d in sorted(by_day)]

    def streak(self, today: Optional[dt.date] = None, lookback_days: int = 366) -> int:
        """
        Consecutive days with at least one focus session, counting back from
        today. A day without sessions yet today doesn't break the streak.
        """
        today = today or dt.date.today()
        first = today - dt.timedelta(days=lookback_days)
        active: Set[dt.date] = {
            _local_day(s.completed_at)
            for s in self.sessions.list_since(_start_of_day_ts(first), kind=FOCUS)
        }

        day = today
        if day not in active:
            day -= dt.timedelta(days=1)

        n = 0
        while day in active and day >= first:
            n += 1
            day -= dt.timedelta(days=1)
        return n
