"""
Groq chat-completions client used as the generation oracle.

Every call requests JSON mode and returns the raw message text; callers
parse and validate it, nothing here trusts the output.
"""

import logging
from typing import Optional

import groq

from placesapi.core.config import settings
from placesapi.core.errors import ConfigurationError, UpstreamUnavailableError

logger = logging.getLogger("placesapi")


class JsonCompletionClient:
    """Thin wrapper around `groq.Groq` for JSON-mode completions."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[groq.Groq] = None,
    ):
        self.model = model or settings.GROQ_MODEL
        self._api_key = api_key
        self._timeout = timeout
        self._client = client

    def _groq(self) -> groq.Groq:
        # Built on first use so routes that never reach the model need no key
        if self._client is None:
            key = self._api_key or settings.GROQ_API_KEY
            if not key:
                raise ConfigurationError("GROQ_API_KEY not configured")
            self._client = groq.Groq(
                api_key=key,
                timeout=self._timeout or settings.UPSTREAM_TIMEOUT_SECONDS,
                max_retries=1,
            )
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()

    def complete_json(self, system: str, user: Optional[str] = None, *, max_tokens: int = 1500, temperature: float = 0.4) -> str:
        """
        Run one JSON-mode completion and return the message text.

        Raises:
            UpstreamUnavailableError: timeout, connection failure or non-2xx
        """
        messages = [{"role": "system", "content": system}]
        if user:
            messages.append({"role": "user", "content": user})

        try:
            completion = self._groq().chat.completions.create(
                messages=messages,
                model=self.model,
                temperature=temperature,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
            )
        except groq.APITimeoutError:
            logger.warning("ai.timeout", extra={"error_code": "upstream_timeout"})
            raise UpstreamUnavailableError("AI provider timed out")
        except groq.APIError as e:
            logger.warning(f"ai.error: {type(e).__name__}", extra={"error_code": "upstream_error"})
            raise UpstreamUnavailableError("AI provider request failed")

        choices = getattr(completion, "choices", None) or []
        if not choices:
            return ""
        return choices[0].message.content or ""
