"""
cinescript.llm.client - LLM and image backend abstraction using litellm.

Provides a unified interface for Gemini, Ollama, OpenAI and Claude text
completion, plus image generation and editing, with retry logic.
"""

from __future__ import annotations

import io
import logging
import time
from collections.abc import Callable
from typing import Any

from cinescript.exceptions import LLMError, LLMResponseError

logger = logging.getLogger(__name__)

LOCAL_API_BASES = {
    "ollama": "http://localhost:11434",
}


class LLMClient:
    """litellm wrapper with per-backend model naming and retry logic."""

    def __init__(
        self,
        backend: str = "gemini",
        model: str = "gemini-1.5-flash",
        image_model: str = "imagen-3.0-generate-001",
        api_key: str | None = None,
        timeout: int = 120,
        max_retries: int = 3,
        retry_delay: float = 2.0,
    ) -> None:
        self.backend = backend
        self.model = model
        self.image_model = image_model
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._token_usage = {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}

    def _qualify(self, model: str) -> str:
        if self.backend == "gemini":
            return f"gemini/{model}"
        elif self.backend == "ollama":
            return f"ollama/{model}"
        elif self.backend == "claude":
            return f"anthropic/{model}"
        return model

    def _get_model_string(self) -> str:
        """Get the model string for litellm based on backend."""
        return self._qualify(self.model)

    def _get_image_model_string(self) -> str:
        return self._qualify(self.image_model)

    def _common_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"timeout": self.timeout}
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.backend in LOCAL_API_BASES:
            kwargs["api_base"] = LOCAL_API_BASES[self.backend]
        return kwargs

    def _litellm(self) -> Any:
        try:
            import litellm
        except ImportError as e:
            raise LLMError("litellm not installed. Install with: pip install litellm") from e
        litellm.telemetry = False
        return litellm

    def _with_retries(self, call: Callable[[], Any], what: str, console=None) -> Any:
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            if console and attempt > 0:
                console.print(f"[yellow]  Retry {attempt + 1}/{self.max_retries}...[/yellow]")

            try:
                return call()
            except LLMResponseError:
                raise
            except Exception as e:
                last_error = e
                error_str = str(e).lower()
                logger.debug("%s attempt %d failed: %s", what, attempt + 1, e)

                if "api key" in error_str or "authentication" in error_str:
                    raise LLMError(f"{what} failed: {e}") from e
                if "rate limit" in error_str:
                    if console:
                        console.print("[yellow]  Rate limited, waiting...[/yellow]")
                    time.sleep(self.retry_delay * 2)
                    continue
                if "timeout" in error_str and console:
                    console.print("[yellow]  Timeout, retrying...[/yellow]")

                if attempt < self.max_retries - 1:
                    time.sleep(self.retry_delay)

        raise LLMError(
            f"{what} failed after {self.max_retries} retries: {last_error}"
        ) from last_error

    def complete(
        self,
        prompt: str,
        max_tokens: int = 2048,
        temperature: float = 0.7,
        json_mode: bool = False,
        console=None,
    ) -> str:
        """Send prompt to the LLM and return the completion text.

        Args:
            prompt: The prompt string
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature
            json_mode: Ask the backend for a JSON response
            console: Optional rich console for output

        Raises:
            LLMError: If the request fails after all retries
            LLMResponseError: If the response has no text content
        """
        litellm = self._litellm()
        model = self._get_model_string()

        def call() -> str:
            kwargs = self._common_kwargs()
            if json_mode:
                kwargs["response_format"] = {"type": "json_object"}
            response = litellm.completion(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_tokens,
                temperature=temperature,
                **kwargs,
            )

            usage = getattr(response, "usage", None)
            if usage:
                self._token_usage["prompt_tokens"] += getattr(usage, "prompt_tokens", 0) or 0
                self._token_usage["completion_tokens"] += (
                    getattr(usage, "completion_tokens", 0) or 0
                )
                self._token_usage["total_tokens"] += getattr(usage, "total_tokens", 0) or 0

            choices = getattr(response, "choices", [])
            if not choices:
                raise LLMResponseError("Empty response from LLM")

            message = getattr(choices[0], "message", None)
            if message is None:
                raise LLMResponseError("No message in LLM response")

            content = getattr(message, "content", None)
            if content is None:
                raise LLMResponseError("No content in LLM message")

            return content

        return self._with_retries(call, "LLM request", console=console)

    def generate_image(self, prompt: str, console=None) -> str:
        """Generate an image and return it as a data URI or URL."""
        litellm = self._litellm()
        model = self._get_image_model_string()

        def call() -> str:
            response = litellm.image_generation(
                model=model, prompt=prompt, n=1, **self._common_kwargs()
            )
            return _image_from_response(response)

        return self._with_retries(call, "Image generation", console=console)

    def edit_image(self, image: bytes, prompt: str, console=None) -> str:
        """Edit an existing image according to the prompt."""
        litellm = self._litellm()
        model = self._get_image_model_string()

        def call() -> str:
            buffer = io.BytesIO(image)
            buffer.name = "shot.png"
            response = litellm.image_edit(
                model=model, image=buffer, prompt=prompt, **self._common_kwargs()
            )
            return _image_from_response(response)

        return self._with_retries(call, "Image edit", console=console)

    def get_token_usage(self) -> dict[str, int]:
        """Get cumulative token usage."""
        return self._token_usage.copy()

    def reset_token_usage(self) -> None:
        """Reset token usage counters."""
        self._token_usage = {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}


def _image_from_response(response: Any) -> str:
    data = getattr(response, "data", None) or []
    for item in data:
        b64 = getattr(item, "b64_json", None)
        if b64:
            return f"data:image/png;base64,{b64}"
        url = getattr(item, "url", None)
        if url:
            return url
    raise LLMResponseError("No image generated in response.")


def create_client_from_config(config: Any) -> LLMClient:
    """Create LLM client from CineScriptConfig."""
    return LLMClient(
        backend=config.llm_backend,
        model=config.llm_model,
        image_model=config.image_model,
        api_key=config.api_key,
        timeout=config.timeout,
        max_retries=config.max_retries,
    )
