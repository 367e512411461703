"""Thin Gemini wrapper returning parsed JSON payloads."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional

import google.generativeai as genai
from google.generativeai.types import HarmBlockThreshold, HarmCategory

from wardrobe_app.config import DEFAULT_GEMINI_MODEL
from wardrobe_app.errors import UpstreamUnavailableError
from wardrobe_app.logging_config import get_logger

LOGGER = get_logger(__name__)

_JSON_SPAN = re.compile(r"\{[\s\S]*\}")

SAFETY_SETTINGS = {
    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
}


def extract_json_object(text: str) -> Dict[str, Any]:
    """Parse a model response into a JSON object.

    Structured output normally yields bare JSON. When the model wraps it in
    prose or markdown fences, the first ``{`` to the last ``}`` span is parsed
    instead.
    """

    if not text or not text.strip():
        raise UpstreamUnavailableError("gemini", "empty response")
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        match = _JSON_SPAN.search(text)
        if not match:
            raise UpstreamUnavailableError("gemini", "response contained no JSON object") from None
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            raise UpstreamUnavailableError("gemini", f"malformed JSON in response: {exc.msg}") from exc
    if not isinstance(parsed, dict):
        raise UpstreamUnavailableError("gemini", "response JSON was not an object")
    return parsed


class GeminiClient:
    """Lazily configured Gemini model that always asks for JSON output."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = DEFAULT_GEMINI_MODEL,
        model: Any = None,
    ) -> None:
        self.api_key = api_key
        self.model_name = model_name
        self._model = model

    def _get_model(self) -> Any:
        if self._model is None:
            if not self.api_key:
                raise UpstreamUnavailableError("gemini", "GEMINI_API_KEY is not configured")
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
        return self._model

    def generate_json(
        self,
        parts: List[Any],
        *,
        temperature: float,
        max_output_tokens: int,
        use_safety_settings: bool = False,
    ) -> Dict[str, Any]:
        """Send ``parts`` to the model and return the parsed JSON object."""

        model = self._get_model()
        generation_config = {
            "temperature": temperature,
            "top_k": 32,
            "top_p": 0.95,
            "max_output_tokens": max_output_tokens,
            "response_mime_type": "application/json",
        }
        try:
            response = model.generate_content(
                parts,
                generation_config=generation_config,
                safety_settings=SAFETY_SETTINGS if use_safety_settings else None,
            )
            # Raises ValueError when the candidate was blocked and carries no parts.
            text = response.text
        except Exception as exc:  # noqa: BLE001 - provider errors are not a stable hierarchy
            raise UpstreamUnavailableError("gemini", str(exc) or type(exc).__name__) from exc
        return extract_json_object(text)


__all__ = ["GeminiClient", "extract_json_object", "SAFETY_SETTINGS"]
