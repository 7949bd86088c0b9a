from typing import Any, Dict


class WebhookError(Exception):
    """Base for every error the webhook answers with a JSON body."""

    status_code = 500
    message = "Internal error"

    def __init__(self, message: str = None, **extra: Any):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, **self.extra}


class MethodNotAllowed(WebhookError):
    status_code = 405
    message = "Method not allowed"


class Forbidden(WebhookError):
    status_code = 403
    message = "Forbidden"


class InvalidBody(WebhookError):
    status_code = 400
    message = "Invalid JSON in body"

    def __init__(self, raw: str):
        super().__init__(raw=raw)
        self.raw = raw


class InvalidPayload(WebhookError):
    status_code = 400
    message = "Missing or invalid payload"


class InternalError(WebhookError):
    status_code = 500
    message = "Internal error"

    def __init__(self, detail: str):
        super().__init__(detail=detail)
        self.detail = detail
