"""Turn TradingView alert payloads into TikTok captions.

TradingView sends whatever the alert message template contains, usually::

    {
      "type": "tiktok_alert",
      "symbol": "MESZ2024",
      "limit_low": "4825.25",
      "limit_high_next_open": "4860.75",
      "bar_time": "1732902300000"
    }

Every field is optional. A caption is always produced: missing or odd values
fall back to placeholder text instead of failing the request.
"""
import json, math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Optional, Tuple

from webhook_errors import InvalidBody, InvalidPayload

Clock = Callable[[], datetime]

DEFAULT_TYPE = "tiktok_alert"
DEFAULT_SYMBOL = "Unknown symbol"
MISSING = "n/a"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------- Payload ----------------
def _loads(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        raise InvalidBody(raw) from None

def normalize_payload(body: Any) -> Dict[str, Any]:
    """Return the alert as a dict, parsing it first when it arrives as text.

    A JSON document that is itself a JSON string is decoded one more time.
    Raises InvalidBody for unparsable text and InvalidPayload for anything
    that isn't an object.
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        body = _loads(body) if body.strip() else None
        if isinstance(body, str):
            body = _loads(body)
    if not isinstance(body, dict):
        raise InvalidPayload()
    return body


# ---------------- Field rendering ----------------
def _shortest_digits(number: float) -> Tuple[str, int]:
    # shortest round-trip digits, and where the decimal point goes
    _, digits, exponent = Decimal(repr(number)).normalize().as_tuple()
    digits = "".join(map(str, digits))
    return digits, exponent + len(digits)

def canonical_number(value: Any) -> Optional[str]:
    """Plain rendering of a numeric value, or None if it isn't one.

    Follows JavaScript's Number#toString: positional notation between 1e-7
    and 1e21, shortest digits padded with zeros, exponent form (``1e-7``,
    ``1.5e+21``) outside that range.
    """
    if isinstance(value, str):
        value = value.strip()
        if not value or "_" in value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    if number == 0:
        return "0"
    sign = "-" if number < 0 else ""
    digits, point = _shortest_digits(abs(number))
    if len(digits) <= point <= 21:
        return sign + digits + "0" * (point - len(digits))
    if 0 < point <= 21:
        return sign + digits[:point] + "." + digits[point:]
    if -6 < point <= 0:
        return sign + "0." + "0" * -point + digits
    exp = point - 1
    mantissa = digits if len(digits) == 1 else digits[0] + "." + digits[1:]
    return f"{sign}{mantissa}e{'+' if exp >= 0 else '-'}{abs(exp)}"

def render_value(value: Any) -> str:
    if value is None:
        return MISSING
    if value == "":
        return ""
    number = canonical_number(value)
    return number if number is not None else str(value)

def format_instant(moment: datetime) -> str:
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"

def render_time(value: Any, clock: Clock) -> str:
    # bar_time comes from TradingView's {{time}}: milliseconds since the epoch
    number = canonical_number(value) if value is not None else None
    if number is not None:
        try:
            return format_instant(_EPOCH + timedelta(milliseconds=int(float(number))))
        except OverflowError:
            pass
    return format_instant(clock())

def render_type(value: Any) -> str:
    # only the first underscore, matching the captions already in circulation
    return str(value or DEFAULT_TYPE).replace("_", " ", 1).upper()


# ---------------- Variants ----------------
@dataclass(frozen=True)
class CaptionVariant:
    kind: str
    fields: Tuple[Tuple[str, str], ...]
    hashtags: str
    omit_missing: bool = False

    def bullets(self, payload: Dict[str, Any], omit_missing: bool):
        for key, label in self.fields:
            value = payload.get(key)
            if omit_missing and (value is None or value == ""):
                continue
            yield f"• {label}: {render_value(value)}"

    def build(self, payload: Dict[str, Any], clock: Clock = utc_now,
              omit_missing: Optional[bool] = None) -> str:
        if omit_missing is None:
            omit_missing = self.omit_missing
        lines = [
            f"TikTok {render_type(payload.get('type'))} for {payload.get('symbol') or DEFAULT_SYMBOL}",
            *self.bullets(payload, omit_missing),
            f"Bar Time: {render_time(payload.get('bar_time'), clock)}",
            "",
            self.hashtags,
        ]
        return "\n".join(lines)


LIMIT = CaptionVariant(
    kind="limit",
    fields=(("limit_low", "Limit Low"), ("limit_high_next_open", "Limit High (Next Open)")),
    hashtags="#tradingview #futures #liquidity #tiktoktrading",
)

LIQUIDITY = CaptionVariant(
    kind="liquidity",
    fields=(("buy_liquidity", "Buy Liquidity"), ("sell_liquidity", "Sell Liquidity")),
    hashtags="#tradingview #futures #liquidity #orderflow #tiktoktrading",
    omit_missing=True,
)

VARIANTS = {v.kind: v for v in (LIMIT, LIQUIDITY)}


def select_variant(payload: Dict[str, Any], kind: str = "auto") -> CaptionVariant:
    """Pick the caption template for a payload.

    An explicit kind ("limit" / "liquidity") wins. With "auto" the payload's
    type is consulted first, then which fields it carries; limit is the default.
    """
    if kind in VARIANTS:
        return VARIANTS[kind]
    alert_type = str(payload.get("type") or "").lower()
    if "liquidity" in alert_type:
        return LIQUIDITY
    if "limit" in alert_type:
        return LIMIT
    if any(key in payload for key, _ in LIQUIDITY.fields):
        return LIQUIDITY
    return LIMIT

def build_caption(payload: Dict[str, Any], variant: Optional[CaptionVariant] = None,
                  clock: Optional[Clock] = None, omit_missing: Optional[bool] = None) -> str:
    variant = variant or select_variant(payload)
    return variant.build(payload, clock or utc_now, omit_missing)
