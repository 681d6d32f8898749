# Role: Minimal wrapper around the Gemini API for assisted intake. Centralizes model name, sampling settings and
# error handling so the assistant calls one method: generate_text(prompt, system_instruction=...).

from typing import Optional

from google import genai

import backend.config as config


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.7,
    ) -> None:
        # Key line: secrets come from the environment (.env), never from code.
        self.api_key = api_key or config.GEMINI_API_KEY
        if not self.api_key:
            raise RuntimeError("Missing GEMINI_API_KEY in environment or .env")

        self.model_name = model or config.GEMINI_MODEL
        self.temperature = temperature

        self.client = genai.Client(api_key=self.api_key)

    def generate_text(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
    ) -> str:
        # 1) Validate prompt
        # 2) Call Gemini (single text completion)
        # 3) Validate non-empty response
        if not prompt or not prompt.strip():
            raise ValueError("Prompt must be non-empty.")

        generation_config = {"temperature": self.temperature if temperature is None else temperature}
        if system_instruction:
            generation_config["system_instruction"] = system_instruction
        if max_output_tokens:
            generation_config["max_output_tokens"] = max_output_tokens

        try:
            resp = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=generation_config,
            )
        except Exception as e:
            raise RuntimeError(f"Gemini API call failed: {e}") from e

        text = getattr(resp, "text", None)
        if not text:
            raise RuntimeError("Gemini returned an empty response.")

        return text.strip()
