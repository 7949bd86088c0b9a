from datetime import datetime, timezone
from typing import Any, Dict, List

import pytest
import requests

from app import create_app
from recent_events import RecentEvents
from tiktok_poster import TikTokPoster
from webhook_config import Settings

FIXED_NOW = datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
FIXED_NOW_ISO = "2025-01-02T03:04:05.678Z"


class FakeResponse:
    def __init__(self, status_code: int = 200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")


class FakeSession:
    def __init__(self, response: FakeResponse = None, error: Exception = None):
        self.calls: List[Dict[str, Any]] = []
        self.response = response or FakeResponse()
        self.error = error

    def post(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def make_client(clock, session):
    def _make(events: bool = False, **overrides):
        settings = Settings(recent_events_enabled=events, **overrides)
        poster = TikTokPoster.from_settings(settings, session=session)
        buffer = RecentEvents(clock=clock) if events else None
        app = create_app(settings, poster=poster, events=buffer, clock=clock)
        app.testing = True
        return app.test_client()
    return _make


@pytest.fixture
def client(make_client):
    return make_client()
