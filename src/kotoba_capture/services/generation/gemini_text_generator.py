"""Gemini Text Generator - generative backend via Google Gemini API."""

import logging
import time
from typing import Any, Callable, Optional

import google.genai as genai
from google.genai import types

from kotoba_capture.exceptions import BackendUnavailableError
from kotoba_capture.services.generation.text_generator import TextGenerator

logger = logging.getLogger(__name__)


def _is_rate_limit(error_msg: str) -> bool:
    return (
        "429" in error_msg
        or "resource_exhausted" in error_msg
        or "quota" in error_msg
        or "rate_limit" in error_msg
    )


class GeminiTextGenerator(TextGenerator):
    """
    Generative backend using Google Gemini API.

    Uses the google.genai package. Rate-limit responses are retried with
    exponential backoff; every other failure is reported at once as
    BackendUnavailableError.
    """

    DEFAULT_MODEL = "gemini-2.0-flash"

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = DEFAULT_MODEL,
        timeout_seconds: int = 30,
        max_retries: int = 3,
        retry_delay: float = 2,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._api_key = api_key
        self.model_name = model_name
        self._timeout_seconds = timeout_seconds
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._sleep = sleep
        self._client: Optional[genai.Client] = None

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def complete(self, prompt: str, json_output: bool = False) -> str:
        return self.generate(prompt, json_output=json_output)

    def generate(self, contents: Any, json_output: bool = False) -> str:
        """Run one generate_content call and return the stripped response text.

        ``contents`` is passed through to the SDK, so callers may send
        image parts alongside the prompt.
        """
        client = self._get_client()
        config = types.GenerateContentConfig(
            temperature=0.3,
            top_p=0.95,
            top_k=40,
            max_output_tokens=8192 if json_output else 1024,
            response_mime_type="application/json" if json_output else None,
        )

        retry_delay = self._retry_delay
        attempt = 0
        while True:
            attempt += 1
            try:
                logger.debug(
                    "Gemini request attempt %d/%d (model=%s, json=%s)",
                    attempt,
                    self._max_retries,
                    self.model_name,
                    json_output,
                )
                response = client.models.generate_content(
                    model=self.model_name,
                    contents=contents,
                    config=config,
                )
            except Exception as e:
                error_msg = str(e).lower()
                rate_limited = _is_rate_limit(error_msg)

                if rate_limited and attempt < self._max_retries:
                    logger.warning(
                        "Gemini rate limit on attempt %d/%d, retrying in %ss",
                        attempt,
                        self._max_retries,
                        retry_delay,
                    )
                    self._sleep(retry_delay)
                    retry_delay *= 2
                    continue

                if "api_key" in error_msg or "authentication" in error_msg or "invalid" in error_msg:
                    message = f"Invalid API key or request: {e}"
                elif rate_limited:
                    message = "API quota exceeded. Please try again later."
                elif "deadline" in error_msg or "timeout" in error_msg:
                    message = "Request timed out. Please check your connection."
                else:
                    message = f"Generation failed: {e}"
                raise BackendUnavailableError(message) from e

            text = response.text
            if not text or not text.strip():
                raise BackendUnavailableError("Empty response from API")

            logger.debug("Gemini response received on attempt %d (%d chars)", attempt, len(text))
            return text.strip()

    def _get_client(self) -> genai.Client:
        if not self._api_key:
            raise BackendUnavailableError("Gemini API key is not configured")
        if self._client is None:
            self._client = genai.Client(
                api_key=self._api_key,
                http_options=types.HttpOptions(timeout=self._timeout_seconds * 1000),
            )
        return self._client
