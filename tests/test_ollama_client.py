"""Tests for Ollama client."""

import sys
from unittest.mock import Mock, patch

import pytest

sys.path.insert(0, ".")
from core.errors import InsightGenerationError, TextGenerationError
from core.models import KeyErrorCount, PerformanceProfile, SessionResult
from core.ollama_client import OllamaClient


def make_result() -> SessionResult:
    return SessionResult(
        words_per_minute=40,
        accuracy_percent=90,
        total_keystrokes=100,
        correct_keystrokes=90,
        elapsed_seconds=60,
        completed_word_count=30,
        total_word_count=90,
    )


class TestOllamaClient:
    """Test suite for OllamaClient."""

    def test_initialization(self):
        """Test client initialization with default parameters."""
        client = OllamaClient()
        assert client.host == "localhost"
        assert client.port == 11434
        assert client.model == "gemma2:2b"
        assert client.client is not None  # ollama.Client instance created

    def test_initialization_custom_host_port(self):
        """Test client initialization with custom host and port."""
        client = OllamaClient(host="example.com", port=8080)
        assert client.host == "example.com"
        assert client.port == 8080

    @patch("core.ollama_client.ollama.Client")
    def test_check_server_available_success(self, mock_ollama_client_class):
        """Test successful server availability check."""
        mock_client = Mock()
        mock_client.list.return_value = {"models": []}
        mock_ollama_client_class.return_value = mock_client

        client = OllamaClient()

        assert client.check_server_available() is True
        mock_client.list.assert_called_once()

    @patch("core.ollama_client.ollama.Client")
    def test_check_server_available_failure(self, mock_ollama_client_class):
        """Test server availability check when server is down."""
        mock_client = Mock()
        mock_client.list.side_effect = Exception("Connection refused")
        mock_ollama_client_class.return_value = mock_client

        client = OllamaClient()

        assert client.check_server_available() is False

    @patch("core.ollama_client.ollama.Client")
    def test_list_models(self, mock_ollama_client_class):
        mock_client = Mock()
        mock_client.list.return_value = {
            "models": [{"model": "llama3:8b"}, {"name": "phi3"}]
        }
        mock_ollama_client_class.return_value = mock_client

        client = OllamaClient()

        assert client.list_models() == ["llama3:8b", "phi3"]

    @patch("core.ollama_client.ollama.Client")
    def test_generate_success(self, mock_ollama_client_class):
        """Test successful text generation."""
        mock_client = Mock()
        mock_client.generate.return_value = {"response": "  quick brown fox  "}
        mock_ollama_client_class.return_value = mock_client

        client = OllamaClient()
        text = client.generate("Write words")

        assert text == "quick brown fox"
        call_args = mock_client.generate.call_args
        assert call_args[1]["model"] == "gemma2:2b"
        assert call_args[1]["stream"] is False
        assert "temperature" in call_args[1]["options"]

    @patch("core.ollama_client.ollama.Client")
    def test_generate_empty_response(self, mock_ollama_client_class):
        mock_client = Mock()
        mock_client.generate.return_value = {"response": ""}
        mock_ollama_client_class.return_value = mock_client

        client = OllamaClient()

        with pytest.raises(TextGenerationError, match="empty text"):
            client.generate("Write words")

    @patch("core.ollama_client.ollama.Client")
    def test_generate_connection_error(self, mock_ollama_client_class):
        mock_client = Mock()
        mock_client.generate.side_effect = ConnectionError("Connection refused")
        mock_ollama_client_class.return_value = mock_client

        client = OllamaClient()

        with pytest.raises(TextGenerationError, match="Connection refused"):
            client.generate("Write words")

    @patch("core.ollama_client.ollama.Client")
    def test_generate_retries_with_installed_model(self, mock_ollama_client_class):
        """Missing model falls back to the first installed one."""
        from ollama import ResponseError

        mock_client = Mock()
        mock_client.generate.side_effect = [
            ResponseError("model 'gemma2:2b' not found"),
            {"response": "fallback words"},
        ]
        mock_client.list.return_value = {"models": [{"model": "llama3:8b"}]}
        mock_ollama_client_class.return_value = mock_client

        client = OllamaClient()
        text = client.generate("Write words")

        assert text == "fallback words"
        assert mock_client.generate.call_args_list[1][1]["model"] == "llama3:8b"

    @patch("core.ollama_client.ollama.Client")
    def test_generate_model_missing_and_none_installed(self, mock_ollama_client_class):
        from ollama import ResponseError

        mock_client = Mock()
        mock_client.generate.side_effect = ResponseError("Model not found")
        mock_client.list.return_value = {"models": []}
        mock_ollama_client_class.return_value = mock_client

        client = OllamaClient()

        with pytest.raises(TextGenerationError, match="Model not found"):
            client.generate("Write words")

    @patch("core.ollama_client.ollama.Client")
    def test_generate_text_signals_success(self, mock_ollama_client_class):
        """Test successful generation is reported on the complete signal."""
        mock_client = Mock()
        mock_client.generate.return_value = {
            "response": "This is a generated text about typing practice."
        }
        mock_ollama_client_class.return_value = mock_client

        client = OllamaClient()

        success_signals = []
        failure_signals = []
        client.signal_generation_complete.connect(success_signals.append)
        client.signal_generation_failed.connect(failure_signals.append)

        client.generate_text("Write about typing")

        assert success_signals == ["This is a generated text about typing practice."]
        assert failure_signals == []

    @patch("core.ollama_client.ollama.Client")
    def test_generate_text_signals_failure(self, mock_ollama_client_class):
        mock_client = Mock()
        mock_client.generate.return_value = {"response": ""}
        mock_ollama_client_class.return_value = mock_client

        client = OllamaClient()

        success_signals = []
        failure_signals = []
        client.signal_generation_complete.connect(success_signals.append)
        client.signal_generation_failed.connect(failure_signals.append)

        client.generate_text("Write about typing")

        assert success_signals == []
        assert len(failure_signals) == 1
        assert "empty text" in failure_signals[0]

    @patch("core.ollama_client.ollama.Client")
    def test_fetch_practice_text_uses_profile(self, mock_ollama_client_class):
        mock_client = Mock()
        mock_client.generate.return_value = {"response": "jazz quiz"}
        mock_ollama_client_class.return_value = mock_client

        profile = PerformanceProfile(
            struggling_keys=[KeyErrorCount(key="z", error_count=4)],
            accuracy_percent=80,
            words_per_minute=30,
            session_count=1,
        )
        client = OllamaClient(word_count=60)

        assert client.fetch_practice_text(profile) == "jazz quiz"
        prompt = mock_client.generate.call_args[1]["prompt"]
        assert "PERSONALIZED" in prompt
        assert "exactly 60" in prompt

    @patch("core.ollama_client.ollama.Client")
    def test_summarize(self, mock_ollama_client_class):
        mock_client = Mock()
        mock_client.generate.return_value = {"response": "Great pace!"}
        mock_ollama_client_class.return_value = mock_client

        client = OllamaClient()

        assert client.summarize(make_result()) == "Great pace!"
        assert "WPM: 40" in mock_client.generate.call_args[1]["prompt"]

    @patch("core.ollama_client.ollama.Client")
    def test_summarize_failure(self, mock_ollama_client_class):
        mock_client = Mock()
        mock_client.generate.side_effect = TimeoutError("timed out")
        mock_ollama_client_class.return_value = mock_client

        client = OllamaClient()

        with pytest.raises(InsightGenerationError):
            client.summarize(make_result())

    def test_model_constant(self):
        """Test that model constant is set correctly."""
        from core.ollama_client import MODEL

        assert MODEL == "gemma2:2b"


class TestOllamaIntegration:
    """Integration tests against a live Ollama server."""

    @pytest.mark.slow
    def test_ollama_text_generation(self):
        """Test actual text generation (if Ollama available)."""
        client = OllamaClient()
        if not client.check_server_available():
            pytest.skip("Ollama server not available")

        try:
            text = client.fetch_practice_text(None)
        except TextGenerationError as e:
            pytest.skip(f"Ollama generation failed: {e}")

        assert isinstance(text, str)
        assert len(text) > 0
