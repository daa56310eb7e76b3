"""
Base AI Provider Module

Defines the provider interface shared by the Gemini and simulated providers,
the canonical ModelResponse record, and the decoder that turns whatever a
provider SDK returns into that record.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class ModelInferenceError(RuntimeError):
    """Raised when the hosted model call itself fails."""


class UnrecognizedResponseError(ValueError):
    """Raised when a model response has no shape we know how to read."""


class ResponseShape(str, Enum):
    """Known shapes of raw model output"""

    TEXT = "text"  # plain string, or an object exposing ``.text``
    CONTENT = "content"  # mapping with a ``text`` or ``content`` key
    CANDIDATES = "candidates"  # Gemini-style candidates[0].content.parts[*].text


@dataclass
class ModelResponse:
    """
    Canonical model output.

    Attributes:
        text: Generated text, never empty
        raw_response: Provider response object, kept for debugging only
        metadata: Provider-specific details (shape, candidate count, ...)
    """

    text: str
    raw_response: Any = None
    metadata: dict[str, Any] = field(default_factory=dict)


def _candidate_text(raw: Any) -> str | None:
    candidates = getattr(raw, "candidates", None)
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    texts = [getattr(p, "text", None) for p in parts]
    return "".join(t for t in texts if isinstance(t, str))


def classify_response(raw: Any) -> tuple[ResponseShape, str]:
    """
    Identify the shape of ``raw`` and extract its text.

    Raises:
        UnrecognizedResponseError: If no known shape applies
    """
    if isinstance(raw, str):
        return ResponseShape.TEXT, raw
    if isinstance(raw, Mapping):
        for key in ("text", "content"):
            value = raw.get(key)
            if isinstance(value, str):
                return ResponseShape.CONTENT, value
        raise UnrecognizedResponseError(f"mapping without text: keys={sorted(raw)}")

    text = _candidate_text(raw)
    if text is not None:
        return ResponseShape.CANDIDATES, text

    try:
        text = getattr(raw, "text", None)
    except ValueError as e:
        # Gemini raises here when the response was blocked
        raise UnrecognizedResponseError(str(e)) from e
    if isinstance(text, str):
        return ResponseShape.TEXT, text
    raise UnrecognizedResponseError(f"unsupported response type {type(raw).__name__}")


def decode_model_output(raw: Any, **metadata: Any) -> ModelResponse:
    """
    Decode a raw provider response into a ModelResponse.

    Raises:
        UnrecognizedResponseError: If the shape is unknown or the text is empty
    """
    try:
        shape, text = classify_response(raw)
    except UnrecognizedResponseError as e:
        logger.error("unrecognized_model_response", error=str(e))
        raise
    if not text.strip():
        logger.error("empty_model_response", shape=shape.value)
        msg = "model returned empty text"
        raise UnrecognizedResponseError(msg)
    return ModelResponse(
        text=text, raw_response=raw, metadata={"shape": shape.value, **metadata}
    )


class BaseAIProvider(ABC):
    """Interface every model provider implements."""

    @abstractmethod
    def generate(self, prompt: str) -> ModelResponse:
        """
        Generate a completion for ``prompt``.

        Raises:
            ModelInferenceError: If the provider call fails
            UnrecognizedResponseError: If the output cannot be decoded
        """
