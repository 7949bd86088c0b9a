import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from webhook_config import DEFAULT_PRIVACY_LEVEL, Settings

log = logging.getLogger("tv-webhook.poster")


@dataclass(frozen=True)
class PostResult:
    skipped: bool
    reason: Optional[str] = None
    mock: bool = False
    privacy_level: Optional[str] = None

    @classmethod
    def skip(cls, reason: str) -> "PostResult":
        return cls(skipped=True, reason=reason)

    @classmethod
    def posted(cls, mock: bool, privacy_level: str) -> "PostResult":
        return cls(skipped=False, mock=mock, privacy_level=privacy_level)

    def to_dict(self) -> Dict[str, Any]:
        if self.skipped:
            return {"skipped": True, "reason": self.reason}
        return {"ok": True, "mock": self.mock, "privacy_level": self.privacy_level}


class TikTokPoster:
    """Sends captions to TikTok's direct post API, at most once per call.

    Without an access token nothing leaves the process (safe mode). With a
    token but no post URL the call is simulated and only logged. Errors from
    the real call, timeouts included, propagate to the caller.
    """

    def __init__(self, access_token: Optional[str] = None,
                 privacy_level: str = DEFAULT_PRIVACY_LEVEL,
                 post_url: Optional[str] = None, timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        self.access_token = access_token
        self.privacy_level = privacy_level
        self.post_url = post_url
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "TikTokPoster":
        return cls(
            access_token=settings.access_token,
            privacy_level=settings.privacy_level,
            post_url=settings.post_url,
            timeout=settings.timeout,
            session=session,
        )

    def post(self, caption: str) -> PostResult:
        if not self.access_token:
            log.warning("TIKTOK_ACCESS_TOKEN not set; skipping TikTok post.")
            return PostResult.skip("no access token")

        if not self.post_url:
            log.info("Would post to TikTok (%s) with caption:\n%s", self.privacy_level, caption)
            return PostResult.posted(mock=True, privacy_level=self.privacy_level)

        resp = self.session.post(
            self.post_url,
            json={"post_info": {"title": caption, "privacy_level": self.privacy_level}},
            headers={"Authorization": f"Bearer {self.access_token}"},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        log.info("Posted to TikTok (%s, HTTP %s)", self.privacy_level, resp.status_code)
        return PostResult.posted(mock=False, privacy_level=self.privacy_level)
