"""Text Generator - abstract access to a generative text backend."""

from abc import ABC, abstractmethod


class TextGenerator(ABC):
    """
    Abstract generative text backend.

    Implementations (e.g., GeminiTextGenerator) handle API calls and raise
    BackendUnavailableError when the backend cannot produce an answer.
    """

    model_name: str = "unknown"

    @abstractmethod
    def complete(self, prompt: str, json_output: bool = False) -> str:
        """
        Send one prompt and return the raw response text.

        Args:
            prompt: Full prompt text.
            json_output: Ask the backend for a JSON document.

        Returns:
            Response text (JSON text when ``json_output`` is set).

        Raises:
            BackendUnavailableError: On missing configuration, transport
                failure or an empty response.
        """
        pass
