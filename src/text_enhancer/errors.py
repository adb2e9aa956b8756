"""Error taxonomy for the enhancement pipeline.

Only ``GatewayError`` subclasses are recoverable: the fallback loop moves on
to the next model when one is raised. Everything else ends the user action.
"""

from __future__ import annotations


class TextEnhancerError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(TextEnhancerError):
    """Missing API key, empty model list, or other unusable settings."""


class RequestValidationError(ConfigurationError, ValueError):
    """The enhancement request itself is invalid (e.g. empty or too long)."""


class GatewayError(TextEnhancerError):
    """A single model call failed in a way the next candidate may not."""

    kind = "GatewayError"

    def __init__(self, model_id: str, detail: str):
        self.model_id = model_id
        self.detail = detail
        super().__init__(f"{self.kind} from {model_id}: {detail}")

    @property
    def status_code(self) -> int | None:
        return None


class HttpError(GatewayError):
    """Non-2xx response, or a transport failure (status_code is None then)."""

    kind = "HttpError"

    def __init__(self, model_id: str, status_code: int | None, body: str = ""):
        self._status_code = status_code
        self.body = body
        if status_code is None:
            detail = body or "request failed before a response was received"
        else:
            detail = f"HTTP {status_code}: {body[:300]}" if body else f"HTTP {status_code}"
        super().__init__(model_id, detail)

    @property
    def status_code(self) -> int | None:
        return self._status_code


class MalformedResponse(GatewayError):
    kind = "MalformedResponse"


class EmptyResponse(GatewayError):
    kind = "EmptyResponse"


class FallbackExhausted(TextEnhancerError):
    """Every candidate model failed. Carries the last failure for diagnostics."""

    def __init__(self, last_error: GatewayError, attempts: list[GatewayError]):
        self.last_error = last_error
        self.attempts = list(attempts)
        super().__init__(
            f"All {len(self.attempts)} model(s) failed; "
            f"last error from {last_error.model_id}: {last_error.detail}"
        )

    @property
    def status_code(self) -> int | None:
        return self.last_error.status_code

    @property
    def model_id(self) -> str:
        return self.last_error.model_id


_STATUS_MESSAGES: dict[int, str] = {
    401: "Invalid API key. Please check your API key in settings.",
    402: "Insufficient credits. Please check your account balance.",
    429: "Rate limit exceeded. Please try again in a moment.",
    503: "Service temporarily unavailable. Please try again later.",
}


def user_message(exc: BaseException) -> str:
    """Map an exception to the single line shown to the user."""
    status = getattr(exc, "status_code", None)
    if isinstance(exc, (FallbackExhausted, GatewayError)) and status in _STATUS_MESSAGES:
        return _STATUS_MESSAGES[status]
    if isinstance(exc, TextEnhancerError):
        return str(exc)
    return f"Enhancement failed: {exc}" if str(exc) else "Enhancement failed: unexpected error"
