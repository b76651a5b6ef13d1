"""Server-Sent Events helpers."""

from __future__ import annotations

import json
import queue
from typing import Any


def format_sse(data: dict[str, Any]) -> str:
    """Format a dict as one SSE frame."""
    return f"data: {json.dumps(data)}\n\n"


def clear_queue(q: queue.Queue) -> int:
    """Drain a queue and return how many items were dropped."""
    count = 0
    while True:
        try:
            q.get_nowait()
            count += 1
        except queue.Empty:
            return count
