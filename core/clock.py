# -*- coding: utf-8 -*-

import math
import time


def now_ms() -> int:
    """Wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def remaining_seconds(deadline_ms: int, now: int) -> int:
    return max(0, math.ceil((deadline_ms - now) / 1000))


def format_time(seconds: int) -> str:
    m = max(0, seconds) // 60
    s = max(0, seconds) % 60
    return f"{m:02d}:{s:02d}"
