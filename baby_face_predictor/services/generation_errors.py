# baby_face_predictor/services/generation_errors.py
import asyncio
import re
from enum import Enum


class ErrorKind(str, Enum):
    RATE_LIMIT = "rate_limit"
    BILLING = "billing"
    CONTENT_SAFETY = "content_safety"
    TRANSIENT = "transient"

    @property
    def is_retryable(self) -> bool:
        """Only transient failures are worth handing to the next model."""
        return self is ErrorKind.TRANSIENT


_RATE_LIMIT_MARKERS = ("rate limit", "too many requests")
_BILLING_MARKERS = ("payment required", "billing")
# A bare status code in the message; ids that merely contain 402 do not count
_BILLING_STATUS_RE = re.compile(r"\b402\b")
_CONTENT_SAFETY_MARKERS = ("nsfw", "content safety", "safety checker", "inappropriate")

USER_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.RATE_LIMIT: "API rate limit exceeded. Please try again in a few minutes.",
    ErrorKind.BILLING: "AI service is currently unavailable due to billing limits. Please try again later.",
    ErrorKind.CONTENT_SAFETY: (
        "The AI service detected potentially inappropriate content. "
        "Please try different photos or try again."
    ),
}


class InvalidModelOutputError(Exception):
    """The model answered, but nothing in the answer is an http(s) image URL."""

    def __init__(self, model_name: str) -> None:
        super().__init__(f"Invalid image URL from {model_name}")
        self.model_name = model_name


class GenerationAbortedError(Exception):
    """A non-retryable failure stopped the fallback chain early."""

    def __init__(self, kind: ErrorKind, cause: BaseException) -> None:
        super().__init__(describe_error(cause))
        self.kind = kind
        self.cause = cause


class AllModelsFailedError(Exception):
    def __init__(self, attempted_models: list[str], last_error: BaseException | None) -> None:
        self.attempted_models = list(attempted_models)
        self.last_error = last_error
        super().__init__(
            f"Generation failed with all {len(self.attempted_models)} configured models. "
            f"Last error: {describe_error(last_error) if last_error else 'unknown'}"
        )


def describe_error(exc: BaseException) -> str:
    if isinstance(exc, asyncio.TimeoutError):
        return "model call timed out"
    return str(exc) or type(exc).__name__


def classify_error(exc: BaseException) -> ErrorKind:
    if isinstance(exc, asyncio.TimeoutError):
        return ErrorKind.TRANSIENT

    status = getattr(exc, "status", None) or getattr(exc, "status_code", None)
    if status == 429:
        return ErrorKind.RATE_LIMIT
    if status == 402:
        return ErrorKind.BILLING

    message = str(exc).lower()
    if any(marker in message for marker in _RATE_LIMIT_MARKERS):
        return ErrorKind.RATE_LIMIT
    if any(marker in message for marker in _BILLING_MARKERS) or _BILLING_STATUS_RE.search(message):
        return ErrorKind.BILLING
    if any(marker in message for marker in _CONTENT_SAFETY_MARKERS):
        return ErrorKind.CONTENT_SAFETY
    return ErrorKind.TRANSIENT


def user_message(exc: BaseException) -> str:
    """Maps any pipeline failure to the text shown to the end user."""
    if isinstance(exc, GenerationAbortedError):
        return USER_MESSAGES[exc.kind]
    if isinstance(exc, AllModelsFailedError):
        return str(exc)
    kind = classify_error(exc)
    if kind in USER_MESSAGES:
        return USER_MESSAGES[kind]
    return f"Generation failed: {describe_error(exc)}"
