# app.py
import logging
from typing import Optional

from flask import Flask, Response, jsonify, request

from captions import Clock, build_caption, normalize_payload, select_variant, utc_now
from recent_events import RecentEvents
from tiktok_poster import TikTokPoster
from webhook_config import Settings
from webhook_errors import Forbidden, InternalError, MethodNotAllowed, WebhookError

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
log = logging.getLogger("tv-webhook")

WEBHOOK_PATHS = ("/api/tradingview-webhook", "/webhook")
ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(settings: Optional[Settings] = None, poster: Optional[TikTokPoster] = None,
               events: Optional[RecentEvents] = None, clock: Optional[Clock] = None) -> Flask:
    settings = settings or Settings.from_env()
    clock = clock or utc_now
    poster = poster or TikTokPoster.from_settings(settings)
    if events is None and settings.recent_events_enabled:
        events = RecentEvents(clock=clock)

    logging.getLogger().setLevel(settings.log_level)

    app = Flask(__name__)
    app.config["WEBHOOK_SETTINGS"] = settings
    app.extensions["recent_events"] = events

    # ---------------- Gate ----------------
    def check_method():
        allowed = {"POST", "GET"} if events is not None else {"POST"}
        if request.method not in allowed:
            raise MethodNotAllowed()

    def check_secret():
        if not settings.secret:
            return
        incoming = request.args.get("secret")
        if not incoming or incoming != settings.secret:
            log.warning("Invalid or missing secret on webhook request")
            raise Forbidden()

    # ---------------- Routes ----------------
    @app.get("/")
    def health():
        return "OK", 200

    def webhook():
        check_method()
        check_secret()

        if request.method == "GET":
            return Response(events.render_html(), mimetype="text/html")

        payload = normalize_payload(request.get_data(as_text=True))
        log.info("Received TradingView payload: %s", payload)

        variant = select_variant(payload, settings.alert_kind)
        caption = build_caption(payload, variant, clock, settings.omit_missing)
        if events is not None:
            events.record(payload, caption)

        try:
            result = poster.post(caption)
        except Exception as e:
            log.exception("Error posting to TikTok")
            raise InternalError(str(e)) from e

        return jsonify(ok=True, caption_preview=caption, tiktok=result.to_dict()), 200

    for path in WEBHOOK_PATHS:
        app.add_url_rule(path, view_func=webhook, methods=ALL_METHODS, provide_automatic_options=False)

    @app.errorhandler(WebhookError)
    def webhook_error(e: WebhookError):
        return jsonify(e.to_dict()), e.status_code

    return app


app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=app.config["WEBHOOK_SETTINGS"].port)
