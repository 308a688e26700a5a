"""
Text-generation backend. Ollama (local) by default, OpenAI chat completions when
TEXTGEN_PROVIDER=openai. Every call carries an explicit timeout.

The backend is treated as unreliable: transport errors raise UpstreamUnavailable,
unreadable envelopes raise MalformedUpstreamReply, and an empty completion is
returned as "" for the caller to handle.
"""
import logging
from typing import Optional

import requests

from halalcheck.config import (
    TEXTGEN_TIMEOUT,
    get_ollama_model,
    get_ollama_url,
    get_openai_api_key,
    get_openai_model,
    get_openai_url,
    get_textgen_provider,
)
from halalcheck.errors import MalformedUpstreamReply, UpstreamUnavailable

logger = logging.getLogger(__name__)

PROVIDERS = ("ollama", "openai")


class TextGenerator:
    def __init__(self, provider: Optional[str] = None, timeout: int = TEXTGEN_TIMEOUT):
        self.provider = (provider or get_textgen_provider()).lower()
        if self.provider not in PROVIDERS:
            raise ValueError(f"Unknown text-generation provider: {self.provider}")
        self.timeout = timeout

    def generate(
        self,
        system: str,
        prompt: str,
        temperature: float = 0.1,
        max_tokens: int = 800,
        force_json: bool = False,
    ) -> str:
        """Return the completion text (stripped)."""
        if self.provider == "openai":
            text = self._call_openai(system, prompt, temperature, max_tokens, force_json)
        else:
            text = self._call_ollama(system, prompt, temperature, max_tokens, force_json)
        logger.debug("TEXTGEN provider=%s chars=%d", self.provider, len(text))
        return text

    def _post(self, url: str, payload: dict, headers: Optional[dict] = None) -> dict:
        try:
            resp = requests.post(url, json=payload, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning("TEXTGEN %s call failed: %s", self.provider, e)
            raise UpstreamUnavailable(f"{self.provider} request failed: {e}") from e
        try:
            return resp.json()
        except ValueError as e:
            raise MalformedUpstreamReply(f"{self.provider} returned a non-JSON envelope") from e

    def _call_ollama(self, system, prompt, temperature, max_tokens, force_json) -> str:
        payload = {
            "model": get_ollama_model(),
            "prompt": prompt,
            "system": system,
            "stream": False,
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }
        if force_json:
            payload["format"] = "json"
        body = self._post(get_ollama_url(), payload)
        return (body.get("response") or "").strip()

    def _call_openai(self, system, prompt, temperature, max_tokens, force_json) -> str:
        api_key = get_openai_api_key()
        if not api_key:
            raise UpstreamUnavailable("OPENAI_API_KEY is not set")
        payload = {
            "model": get_openai_model(),
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if force_json:
            payload["response_format"] = {"type": "json_object"}
        body = self._post(get_openai_url(), payload, headers={"Authorization": f"Bearer {api_key}"})
        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedUpstreamReply("openai reply has no choices[0].message.content") from e
        return (content or "").strip()
