from typing import Iterable
import logging

from openai import OpenAI

from .config import Settings, get_settings


logger = logging.getLogger(__name__)


class LLMClient:
    """
    Thin wrapper around an OpenAI-compatible chat completions endpoint.

    Requests are bounded by settings.llm_timeout_seconds and are not retried;
    a timeout surfaces as an exception to the caller.
    """

    def __init__(self, settings: Settings | None = None, client: OpenAI | None = None):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(
                base_url=self.settings.llm_base_url,
                api_key=self.settings.llm_api_key,
                timeout=self.settings.llm_timeout_seconds,
                max_retries=0,
            )
        return self._client

    def chat(
        self,
        messages: Iterable[dict],
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        """
        Call the chat endpoint using the OpenAI-compatible API.

        Parameters
        ----------
        messages : iterable of dict
            List of messages in OpenAI format, e.g.
            [{"role": "user", "content": "Hello"}]
        max_tokens : int | None
            Maximum number of tokens to generate. If None, the value from
            settings.llm_max_output_tokens is used.
        temperature : float | None
            Sampling temperature. If None, settings.llm_temperature is used.
        """
        messages_list = list(messages)
        # Only roles and the first characters, to keep the log readable
        preview = [
            {"role": m.get("role"), "content": str(m.get("content"))[:80]}
            for m in messages_list
        ]
        logger.info("Sending %d message(s) to LLM: %s", len(messages_list), preview)

        effective_max_tokens = max_tokens or self.settings.llm_max_output_tokens
        effective_temperature = (
            self.settings.llm_temperature if temperature is None else temperature
        )
        logger.info(
            "Calling LLM with max_tokens=%d, temperature=%.2f",
            effective_max_tokens,
            effective_temperature,
        )

        response = self.client.chat.completions.create(
            model=self.settings.llm_model_name,
            messages=messages_list,
            max_tokens=effective_max_tokens,
            temperature=effective_temperature,
        )
        content = response.choices[0].message.content or ""
        logger.info("Received LLM response (length=%d chars)", len(content))
        return content

    def complete(self, prompt: str) -> str:
        """Single-prompt completion: prompt in, answer text out."""
        return self.chat([{"role": "user", "content": prompt}])


__all__ = ["LLMClient"]
