from .base import (
    BaseAIProvider,
    ModelInferenceError,
    ModelResponse,
    ResponseShape,
    UnrecognizedResponseError,
    decode_model_output,
)
from .dummy import DummyAIProvider
from .gemini import GeminiProvider

__all__ = [
    "BaseAIProvider",
    "DummyAIProvider",
    "GeminiProvider",
    "ModelInferenceError",
    "ModelResponse",
    "ResponseShape",
    "UnrecognizedResponseError",
    "decode_model_output",
]
