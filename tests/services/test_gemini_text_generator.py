"""Unit tests for GeminiTextGenerator with the SDK client mocked out."""

from unittest.mock import MagicMock, patch

import pytest

from kotoba_capture.exceptions import BackendUnavailableError
from kotoba_capture.services import GeminiTextGenerator

CLIENT = "kotoba_capture.services.generation.gemini_text_generator.genai.Client"


def response(text):
    return MagicMock(text=text)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_generator(sleeps):
    def factory(api_key="test-key", **kwargs):
        return GeminiTextGenerator(api_key, sleep=sleeps.append, **kwargs)

    return factory


def test_missing_api_key_raises_without_client(make_generator):
    generator = make_generator(api_key=None)
    assert not generator.is_configured
    with patch(CLIENT) as client_cls:
        with pytest.raises(BackendUnavailableError, match="not configured"):
            generator.complete("hello")
    client_cls.assert_not_called()


def test_complete_returns_stripped_text(make_generator):
    with patch(CLIENT) as client_cls:
        client_cls.return_value.models.generate_content.return_value = response("  Entrance \n")
        generator = make_generator(model_name="gemini-test")

        assert generator.complete("入口") == "Entrance"

    kwargs = client_cls.return_value.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "gemini-test"
    assert kwargs["contents"] == "入口"
    assert kwargs["config"].response_mime_type is None


def test_json_output_requests_json_mime_type(make_generator):
    with patch(CLIENT) as client_cls:
        client_cls.return_value.models.generate_content.return_value = response("{}")
        make_generator().complete("lesson", json_output=True)

    config = client_cls.return_value.models.generate_content.call_args.kwargs["config"]
    assert config.response_mime_type == "application/json"


def test_client_is_built_once(make_generator):
    with patch(CLIENT) as client_cls:
        client_cls.return_value.models.generate_content.return_value = response("ok")
        generator = make_generator()
        generator.complete("a")
        generator.complete("b")

    assert client_cls.call_count == 1
    assert client_cls.call_args.kwargs["api_key"] == "test-key"


def test_rate_limit_is_retried_with_backoff(make_generator, sleeps):
    with patch(CLIENT) as client_cls:
        client_cls.return_value.models.generate_content.side_effect = [
            Exception("429 RESOURCE_EXHAUSTED"),
            Exception("429 RESOURCE_EXHAUSTED"),
            response("ok"),
        ]
        result = make_generator(max_retries=3, retry_delay=2).complete("hi")

    assert result == "ok"
    assert sleeps == [2, 4]


def test_rate_limit_gives_up_after_max_retries(make_generator, sleeps):
    with patch(CLIENT) as client_cls:
        client_cls.return_value.models.generate_content.side_effect = Exception("quota exceeded")
        with pytest.raises(BackendUnavailableError, match="quota"):
            make_generator(max_retries=2).complete("hi")

    assert client_cls.return_value.models.generate_content.call_count == 2
    assert len(sleeps) == 1


@pytest.mark.parametrize(
    "error, message",
    [
        ("Deadline exceeded", "timed out"),
        ("API_KEY invalid", "Invalid API key"),
        ("connection reset", "Generation failed"),
    ],
)
def test_other_failures_are_not_retried(make_generator, sleeps, error, message):
    with patch(CLIENT) as client_cls:
        client_cls.return_value.models.generate_content.side_effect = Exception(error)
        with pytest.raises(BackendUnavailableError, match=message):
            make_generator().complete("hi")

    assert sleeps == []
    assert client_cls.return_value.models.generate_content.call_count == 1


@pytest.mark.parametrize("text", [None, "", "   "])
def test_empty_response_is_an_error(make_generator, text):
    with patch(CLIENT) as client_cls:
        client_cls.return_value.models.generate_content.return_value = response(text)
        with pytest.raises(BackendUnavailableError, match="Empty response"):
            make_generator().complete("hi")
