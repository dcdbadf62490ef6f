# baby_face_predictor/services/output_normalizer.py
"""
Turns whatever a generation model returned into a single image URL.

Replicate models disagree on output shape: a bare URL, a list of URLs, a
file-like object, a dict with a `url` key, or an object whose str() is the
URL. Each shape is classified once and handled in one place.
"""
import base64
import inspect
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

URL_KEYS: tuple[str, ...] = (
    "url", "href", "download_url", "file_url", "image",
    "src", "output_url", "imageUrl", "data", "path",
)
MAX_DEPTH = 5


class OutputShape(Enum):
    STRING = "string"
    SEQUENCE = "sequence"
    STREAM = "stream"
    STRUCTURED = "structured"
    UNRECOGNIZED = "unrecognized"


def _has_custom_str(value: Any) -> bool:
    return type(value).__str__ is not object.__str__


def _has_url_attribute(value: Any) -> bool:
    for key in URL_KEYS:
        attr = getattr(value, key, None)
        if attr is not None and not callable(attr):
            return True
    return False


def _exposes_http_url(value: Any) -> bool:
    """True for file objects that carry their URL (Replicate's FileOutput)."""
    if any(is_http_url(getattr(value, key, None)) for key in URL_KEYS):
        return True
    return _has_custom_str(value) and is_http_url(str(value))


def classify_output(output: Any) -> OutputShape:
    if output is None or isinstance(output, (bool, int, float)):
        return OutputShape.UNRECOGNIZED
    if isinstance(output, str):
        return OutputShape.STRING
    if isinstance(output, (bytes, bytearray, memoryview)):
        return OutputShape.STREAM
    if isinstance(output, Mapping):
        return OutputShape.STRUCTURED
    # Readable objects that expose a URL are resolved by it, never drained
    if callable(getattr(output, "read", None)) or hasattr(output, "__aiter__"):
        return OutputShape.STRUCTURED if _exposes_http_url(output) else OutputShape.STREAM
    if isinstance(output, Sequence):
        return OutputShape.SEQUENCE
    if _has_url_attribute(output) or _has_custom_str(output):
        return OutputShape.STRUCTURED
    return OutputShape.UNRECOGNIZED


def is_http_url(value: Any) -> bool:
    return isinstance(value, str) and value.startswith("http")


async def normalize_to_url(output: Any) -> str | None:
    """
    Returns an absolute http(s) URL found in `output`, or None.

    Binary streams resolve to a `data:` reference, which is not an http URL
    and therefore also ends as None.
    """
    reference = await _extract_reference(output, depth=0)
    if is_http_url(reference):
        return reference
    if reference is not None:
        logger.warning("Model output is not an http URL", reference=reference[:80])
    return None


async def _extract_reference(output: Any, depth: int) -> str | None:
    if depth > MAX_DEPTH:
        return None

    shape = classify_output(output)
    logger.debug("Normalizing model output", shape=shape.value, depth=depth)

    if shape is OutputShape.STRING:
        return output.strip() or None
    if shape is OutputShape.SEQUENCE:
        if not output:
            return None
        return await _extract_reference(output[0], depth + 1)
    if shape is OutputShape.STREAM:
        return _reference_from_bytes(await _drain_stream(output))
    if shape is OutputShape.STRUCTURED:
        return await _reference_from_structured(output, depth)
    return None


async def _reference_from_structured(output: Any, depth: int) -> str | None:
    for key in URL_KEYS:
        if isinstance(output, Mapping):
            value = output.get(key)
        else:
            value = getattr(output, key, None)
        if value is None or callable(value):
            continue
        reference = await _extract_reference(value, depth + 1)
        if is_http_url(reference):
            return reference

    if not isinstance(output, Mapping) and _has_custom_str(output):
        text = str(output).strip()
        if is_http_url(text):
            return text
    return None


def _reference_from_bytes(data: bytes) -> str | None:
    if not data:
        return None
    try:
        text = data.decode("utf-8").strip()
    except UnicodeDecodeError:
        text = ""
    if is_http_url(text) and not any(ch.isspace() for ch in text):
        return text
    return f"data:image/png;base64,{base64.b64encode(data).decode('ascii')}"


async def _drain_stream(stream: Any) -> bytes:
    if isinstance(stream, (bytes, bytearray, memoryview)):
        return bytes(stream)
    try:
        if callable(getattr(stream, "read", None)):
            data = stream.read()
            if inspect.isawaitable(data):
                data = await data
        else:
            chunks = []
            async for chunk in stream:
                chunks.append(chunk if isinstance(chunk, (bytes, bytearray)) else str(chunk).encode())
            data = b"".join(chunks)
    finally:
        await _close_stream(stream)
    return bytes(data) if isinstance(data, (bytes, bytearray)) else str(data).encode()


async def _close_stream(stream: Any) -> None:
    for name in ("aclose", "close"):
        closer = getattr(stream, name, None)
        if callable(closer):
            result = closer()
            if inspect.isawaitable(result):
                await result
            return
