"""
Gemini AI Provider Module

This module implements the Gemini AI provider for the YieldForge agent API,
integrating with Google's Generative AI service. Each call is a single,
stateless prompt: the agent keeps no conversation history between requests.
"""

from typing import override

import google.generativeai as genai
import structlog

from yieldforge.ai.base import (
    BaseAIProvider,
    ModelInferenceError,
    ModelResponse,
    decode_model_output,
)

logger = structlog.get_logger(__name__)


SYSTEM_INSTRUCTION = """
You are YieldForge, an assistant that helps users explore DeFi yield
opportunities. You work with live data from DeFiLlama, CoinGecko and the
Fraxtal testnet, which the backend fetches and hands to you as JSON.

When helping users:
- Ground every number in the LIVE_DATA block when one is provided
- Never invent APYs, prices, TVLs or chain state that is not in the data
- If a data block reports an error, say which source was unavailable
- Show gas costs alongside every return projection
- Explain impermanent loss and smart contract risk where relevant
- Highlight Frax Finance pools when they are relevant to the question

This is a demo: simulations are projections, not executed trades, and past
performance does not guarantee future results. You are not a financial
advisor; never tell the user to buy, sell or hold.

Keep answers concise and readable, and cite the data source and timestamp
for live figures.
"""


class GeminiProvider(BaseAIProvider):
    """
    Provider class for Google's Gemini AI service.

    Constructed once by the application factory and shared by every request;
    it holds no per-request state.

    Attributes:
        model (genai.GenerativeModel): Configured Gemini model instance
        logger (BoundLogger): Structured logger for the provider
    """

    def __init__(self, api_key: str, model: str, **kwargs: str) -> None:
        """
        Initialize the Gemini provider with API credentials and model configuration.

        Args:
            api_key (str): Google API key for authentication
            model (str): Gemini model identifier to use
            **kwargs (str): Additional configuration parameters including:
                - system_instruction: Custom system prompt for the AI personality
        """
        genai.configure(api_key=api_key)  # pyright: ignore [reportPrivateImportUsage]
        self.model_name = model
        self.model = genai.GenerativeModel(  # pyright: ignore [reportPrivateImportUsage]
            model_name=model,
            system_instruction=kwargs.get("system_instruction", SYSTEM_INSTRUCTION),
        )
        self.logger = logger.bind(service="gemini")

    @override
    def generate(self, prompt: str) -> ModelResponse:
        """
        Generate content using the Gemini model.

        Args:
            prompt (str): Input prompt for content generation

        Returns:
            ModelResponse: Decoded text plus metadata (shape, model name)

        Raises:
            ModelInferenceError: If the Gemini call fails
            UnrecognizedResponseError: If the response carries no usable text
        """
        try:
            response = self.model.generate_content(prompt)
        except Exception as e:
            self.logger.exception("gemini_generate_failed", error=str(e))
            raise ModelInferenceError(str(e)) from e

        return decode_model_output(response, model=self.model_name)
