# app/services/test_openai_service.py
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest
from flask import Flask

from app.services.openai_service import (
    OpenAIService, AssistantError, AssistantAuthError, AssistantRateLimitError, FALLBACK_REPLY
)

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def status_error(cls, status_code):
    response = httpx.Response(status_code, request=REQUEST)
    return cls("error", response=response, body=None)


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def assistant():
    app = Flask(__name__)
    app.config.update(OPENAI_MODEL="gpt-3.5-turbo", CLINIC_NAME="Happy Paws", CLINIC_EMERGENCY_PHONE="555-0100")
    service = OpenAIService()
    service.init_app(app)
    return service


def with_client(service, create):
    client = MagicMock()
    client.chat.completions.create.side_effect = create
    return patch.object(service, '_client', return_value=client), client


def test_ask_sends_system_prompt_and_limits(assistant):
    patcher, client = with_client(assistant, lambda **kwargs: completion("Feed twice a day."))
    with patcher as make_client:
        assert assistant.ask("How often should I feed my puppy?", api_key="sk-user") == "Feed twice a day."

    make_client.assert_called_once_with("sk-user")
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-3.5-turbo"
    assert kwargs["max_tokens"] == 500
    assert kwargs["temperature"] == 0.7
    system, user = kwargs["messages"]
    assert system["role"] == "system" and "Happy Paws" in system["content"] and "555-0100" in system["content"]
    assert user == {"role": "user", "content": "How often should I feed my puppy?"}


def test_missing_key_is_an_auth_error(assistant):
    with pytest.raises(AssistantAuthError):
        assistant.ask("hello")


def test_configured_key_is_the_fallback_only_when_allowed(assistant):
    assistant.default_api_key = "sk-server"
    with pytest.raises(AssistantAuthError):
        assistant.ask("hello")

    patcher, _ = with_client(assistant, lambda **kwargs: completion("hi"))
    with patcher as make_client:
        assistant.ask("hello", allow_default_key=True)
    make_client.assert_called_once_with("sk-server")


def test_empty_content_returns_apology(assistant):
    patcher, _ = with_client(assistant, lambda **kwargs: completion(None))
    with patcher:
        assert assistant.ask("hello", api_key="sk-user") == FALLBACK_REPLY


@pytest.mark.parametrize("error, expected, message", [
    (status_error(openai.AuthenticationError, 401), AssistantAuthError,
     "Invalid API key. Please check your OpenAI API key."),
    (status_error(openai.RateLimitError, 429), AssistantRateLimitError,
     "Rate limit exceeded. Please try again later."),
    (status_error(openai.InternalServerError, 500), AssistantError,
     "OpenAI API error: Internal Server Error"),
])
def test_upstream_errors_are_mapped(assistant, error, expected, message):
    patcher, _ = with_client(assistant, error)
    with patcher:
        with pytest.raises(expected) as exc_info:
            assistant.ask("hello", api_key="sk-user")
    assert str(exc_info.value) == message


def test_connection_failure(assistant):
    patcher, _ = with_client(assistant, openai.APIConnectionError(request=REQUEST))
    with patcher:
        with pytest.raises(AssistantError, match="Failed to connect"):
            assistant.ask("hello", api_key="sk-user")
