"""
Response composer.

Builds a single prompt from the user message and whatever live data the tool
executors gathered, then asks the model provider for the final answer.
"""
import json
from typing import Any

import structlog

from yieldforge.ai.base import BaseAIProvider, ModelInferenceError

logger = structlog.get_logger(__name__)

PROMPT_HEADER = """
SYSTEM:
You are YieldForge, a DeFi yield assistant for a Fraxtal testnet demo.
You are NOT a financial advisor and never tell the user to buy, sell or hold.

INSTRUCTIONS:
- Answer in normal conversational text (no JSON).
- If LIVE_DATA is provided, ground every figure in it and cite its source.
- If a LIVE_DATA entry contains "error", say which source failed.
- Never invent missing values. If a field is null or missing, say "not provided".
""".strip()


class ResponseComposer:
    """
    Turns a message plus tool results into the agent's reply.

    Attributes:
        ai (BaseAIProvider): Model provider used for every reply
    """

    def __init__(self, ai: BaseAIProvider) -> None:
        self.ai = ai
        self.logger = logger.bind(component="composer")

    def build_prompt(self, message: str, tool_results: dict[str, Any]) -> str:
        parts = [PROMPT_HEADER]
        if tool_results:
            parts.append(
                "LIVE_DATA (JSON):\n" + json.dumps(tool_results, indent=2, default=str)
            )
        parts.append(f"USER:\n{message}")
        return "\n\n".join(parts)

    def compose(self, message: str, tool_results: dict[str, Any]) -> str:
        """
        Generate the reply text.

        A failed model call is reported in the reply itself. A response that
        cannot be decoded propagates as UnrecognizedResponseError.
        """
        prompt = self.build_prompt(message, tool_results)
        try:
            response = self.ai.generate(prompt=prompt)
        except ModelInferenceError as e:
            self.logger.warning("model_unavailable", error=str(e))
            return (
                "Sorry, I could not reach the language model right now "
                f"({e}). Please try again shortly."
            )
        self.logger.debug("composed_reply", metadata=response.metadata)
        return response.text
