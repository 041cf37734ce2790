"""Ollama API client for practice text and session insights."""

import logging

import ollama
from PySide6.QtCore import QObject, Signal

from core.errors import InsightGenerationError, TextGenerationError
from core.models import PerformanceProfile, SessionResult
from core.prompts import build_insight_prompt, build_practice_prompt

log = logging.getLogger("typecoach.ollama_client")

# Default model to use for text generation
MODEL = "gemma2:2b"

GENERATION_OPTIONS = {
    "temperature": 0.7,
    "top_p": 0.9,
}


class OllamaClient(QObject):
    """Client for Ollama text generation API.

    Implements both the practice-text source and the insight source.
    """

    signal_generation_complete = Signal(str)  # Generated text
    signal_generation_failed = Signal(str)  # Error message

    def __init__(
        self,
        host: str = "localhost",
        port: int = 11434,
        model: str = MODEL,
        timeout_sec: float = 30.0,
        word_count: int = 90,
    ) -> None:
        """Initialize Ollama client.

        Args:
            host: Ollama server host
            port: Ollama server port
            model: Model to use for generation
            timeout_sec: HTTP timeout for each request
            word_count: Number of words to request for practice text
        """
        super().__init__()
        self.host = host
        self.port = port
        self.model = model
        self.word_count = word_count
        self.client = ollama.Client(host=f"{host}:{port}", timeout=timeout_sec)

    def check_server_available(self) -> bool:
        """Check if Ollama server is running.

        Returns:
            True if server is available
        """
        try:
            self.client.list()
            return True
        except Exception:
            return False

    def list_models(self) -> list[str]:
        """List available models from Ollama.

        Returns:
            List of model names
        """
        try:
            response = self.client.list()
            models = response.get("models", [])
            return [model.get("model", model.get("name", "")) for model in models]
        except Exception:
            return []

    def _request(self, model: str, prompt: str) -> str:
        response = self.client.generate(
            model=model,
            prompt=prompt,
            stream=False,
            options=GENERATION_OPTIONS,
        )
        generated_text = response.get("response", "").strip()
        if not generated_text:
            raise TextGenerationError("Ollama returned empty text")
        return generated_text

    def generate(self, prompt: str) -> str:
        """Generate text, retrying once with an installed model.

        Args:
            prompt: Full prompt

        Returns:
            Generated text, stripped

        Raises:
            TextGenerationError: If the server fails or returns nothing
        """
        try:
            return self._request(self.model, prompt)

        except ollama.ResponseError as e:
            error_msg = str(e.error).lower()

            # Check if error is about model not found
            if "not found" in error_msg or "model" in error_msg:
                log.warning(f"Model '{self.model}' not found, trying fallback")

                models = self.list_models()
                if models:
                    fallback_model = models[0]
                    log.info(f"Retrying with fallback model: {fallback_model}")
                    try:
                        return self._request(fallback_model, prompt)
                    except TextGenerationError:
                        raise
                    except Exception as fallback_error:
                        log.error(f"Fallback model also failed: {fallback_error}")

            raise TextGenerationError(f"Ollama error: {e.error}") from e

        except TextGenerationError:
            raise

        except Exception as e:
            log.error(f"Error generating text: {e}")
            raise TextGenerationError(str(e)) from e

    def generate_text(self, prompt: str) -> None:
        """Generate text and report the outcome through signals.

        Args:
            prompt: Full prompt
        """
        try:
            generated_text = self.generate(prompt)
        except TextGenerationError as e:
            self.signal_generation_failed.emit(str(e))
            return
        self.signal_generation_complete.emit(generated_text)

    def fetch_practice_text(self, profile: PerformanceProfile | None) -> str:
        """Request raw practice text biased toward the profile's weak keys.

        Args:
            profile: Aggregate performance, or None for generic text

        Returns:
            Raw model output, not yet normalized

        Raises:
            TextGenerationError: If generation fails
        """
        prompt = build_practice_prompt(profile, self.word_count)
        return self.generate(prompt)

    def summarize(self, result: SessionResult) -> str:
        """Ask the model for a short coaching insight.

        Args:
            result: Scored session

        Returns:
            Insight text

        Raises:
            InsightGenerationError: If generation fails
        """
        try:
            return self.generate(build_insight_prompt(result))
        except TextGenerationError as e:
            raise InsightGenerationError(str(e)) from e

