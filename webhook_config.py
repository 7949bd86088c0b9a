import os, logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

log = logging.getLogger("tv-webhook.config")

ALERT_KINDS = ("auto", "limit", "liquidity")
DEFAULT_PRIVACY_LEVEL = "SELF_ONLY"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


# ---------------- Helpers ----------------
def _get(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None

def _flag(name: str, default: Optional[bool]) -> Optional[bool]:
    raw = _get(name)
    if raw is None:
        return default
    if raw.lower() in _TRUE:
        return True
    if raw.lower() in _FALSE:
        return False
    log.warning("Ignoring %s=%r; expected true/false", name, raw)
    return default

def _number(name: str, default: float, cast=float):
    raw = _get(name)
    if raw is None:
        return default
    try:
        value = cast(raw)
    except ValueError:
        log.warning("Ignoring %s=%r; expected a number", name, raw)
        return default
    if value <= 0:
        log.warning("Ignoring %s=%r; must be positive", name, raw)
        return default
    return value


# ---------------- Settings ----------------
@dataclass(frozen=True)
class Settings:
    secret: Optional[str] = None
    access_token: Optional[str] = None
    privacy_level: str = DEFAULT_PRIVACY_LEVEL
    post_url: Optional[str] = None
    timeout: float = 10.0
    alert_kind: str = "auto"
    omit_missing: Optional[bool] = None
    recent_events_enabled: bool = False
    port: int = 10000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()

        secret = _get("TRADINGVIEW_SECRET")
        if not secret:
            log.warning("Missing environment variable: TRADINGVIEW_SECRET; webhook endpoint is open to anyone")

        access_token = _get("TIKTOK_ACCESS_TOKEN")
        if not access_token:
            log.warning("Missing environment variable: TIKTOK_ACCESS_TOKEN; running in safe mode")

        alert_kind = (_get("ALERT_KIND") or "auto").lower()
        if alert_kind not in ALERT_KINDS:
            log.warning("Ignoring ALERT_KIND=%r; expected one of %s", alert_kind, ", ".join(ALERT_KINDS))
            alert_kind = "auto"

        return cls(
            secret=secret,
            access_token=access_token,
            privacy_level=_get("TIKTOK_PRIVACY_LEVEL") or DEFAULT_PRIVACY_LEVEL,
            post_url=_get("TIKTOK_POST_URL"),
            timeout=_number("TIKTOK_TIMEOUT", 10.0),
            alert_kind=alert_kind,
            omit_missing=_flag("CAPTION_OMIT_MISSING", None),
            recent_events_enabled=bool(_flag("RECENT_EVENTS_ENABLED", False)),
            port=_number("PORT", 10000, cast=int),
            log_level=_log_level(),
        )


def _log_level() -> str:
    level = (_get("LOG_LEVEL") or "INFO").upper()
    if level not in LOG_LEVELS:
        log.warning("Ignoring LOG_LEVEL=%r; expected one of %s", level, ", ".join(LOG_LEVELS))
        return "INFO"
    return level
