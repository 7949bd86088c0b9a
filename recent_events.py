import json, threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List

from flask import render_template_string

from captions import format_instant, utc_now

CAPACITY = 50

PAGE = """<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <title>Recent TradingView alerts</title>
  <style>
    body { font-family: sans-serif; margin: 2em; }
    pre { background: #f4f4f4; padding: .75em; white-space: pre-wrap; }
    .event { border-bottom: 1px solid #ddd; padding-bottom: 1em; margin-bottom: 1em; }
  </style>
</head>
<body>
  <h1>Recent TradingView alerts</h1>
  <p>Last {{ capacity }} events seen by this process only. Not persisted, not shared between instances.</p>
  {% for event in events %}
  <div class="event">
    <h2>#{{ loop.index }} &middot; {{ event.when }}</h2>
    <h3>Payload</h3>
    <pre>{{ event.payload }}</pre>
    <h3>Caption</h3>
    <pre>{{ event.caption }}</pre>
  </div>
  {% else %}
  <p>No events yet.</p>
  {% endfor %}
</body>
</html>
"""


@dataclass(frozen=True)
class RecentEvent:
    timestamp: datetime
    payload: Dict[str, Any]
    caption: str


class RecentEvents:
    """Newest-first buffer of the last few alerts, for the debug page.

    The buffer lives in this process only: it is lost on restart and every
    replica of the webhook keeps its own. Treat it as a debugging aid, never
    as a record of what was received.
    """

    def __init__(self, capacity: int = CAPACITY, clock: Callable[[], datetime] = utc_now):
        self.capacity = capacity
        self._clock = clock
        self._events = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def record(self, payload: Dict[str, Any], caption: str) -> RecentEvent:
        event = RecentEvent(self._clock(), payload, caption)
        with self._lock:
            # appendleft on a full deque drops the oldest from the right
            self._events.appendleft(event)
        return event

    def snapshot(self) -> List[RecentEvent]:
        with self._lock:
            return list(self._events)

    def clear(self):
        with self._lock:
            self._events.clear()

    def __len__(self):
        with self._lock:
            return len(self._events)

    def render_html(self) -> str:
        """Render the buffer; must run inside a Flask app context."""
        events = [
            {
                "when": format_instant(e.timestamp),
                "payload": json.dumps(e.payload, indent=2, default=str),
                "caption": e.caption,
            }
            for e in self.snapshot()
        ]
        return render_template_string(PAGE, events=events, capacity=self.capacity)
