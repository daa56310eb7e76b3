from typing import override

from yieldforge.ai.base import BaseAIProvider, ModelResponse, decode_model_output


class DummyAIProvider(BaseAIProvider):
    """Offline stand-in used when no Gemini key is configured."""

    @override
    def generate(self, prompt: str) -> ModelResponse:
        user_text = prompt.rsplit("USER:", 1)[-1].strip()
        has_data = "LIVE_DATA" in prompt
        text = f"[SIMULATED YIELDFORGE] You said: {user_text or '(empty)'}"
        if has_data:
            text += "\nLive data was attached to this request."
        return decode_model_output(text, simulated=True)
