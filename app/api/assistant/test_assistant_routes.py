# app/api/assistant/test_assistant_routes.py
from unittest.mock import patch

import pytest

from app.services.openai_service import AssistantError, AssistantAuthError, AssistantRateLimitError


def test_chat_passes_user_key_from_header(app, client):
    with patch.object(app.services['openai'], 'ask', return_value="Brush twice a week.") as ask:
        resp = client.post('/api/assistant/chat', json={"message": "How do I groom a cat?"},
                           headers={"X-OpenAI-Key": "sk-user"})

    assert resp.status_code == 200
    assert resp.get_json() == {"reply": "Brush twice a week."}
    ask.assert_called_once_with("How do I groom a cat?", api_key="sk-user", allow_default_key=False)


@pytest.mark.parametrize("error, status", [
    (AssistantAuthError("Invalid API key. Please check your OpenAI API key."), 401),
    (AssistantRateLimitError("Rate limit exceeded. Please try again later."), 429),
    (AssistantError("OpenAI API error: Bad Gateway"), 502),
])
def test_chat_maps_assistant_errors(app, client, error, status):
    with patch.object(app.services['openai'], 'ask', side_effect=error):
        resp = client.post('/api/assistant/chat', json={"message": "hi"})
    assert resp.status_code == status
    assert resp.get_json()['message'] == str(error)


def test_chat_without_any_key_is_unauthorized(client):
    resp = client.post('/api/assistant/chat', json={"message": "hi"})
    assert resp.status_code == 401


def test_chat_requires_message(client):
    assert client.post('/api/assistant/chat', json={}).status_code == 400


def test_server_key_is_never_used_for_anonymous_callers(app, client):
    assistant = app.services['openai']
    assistant.default_api_key = "sk-server-secret"
    with patch.object(assistant, '_client') as make_client:
        resp = client.post('/api/assistant/chat', json={"message": "hi"})

    assert resp.status_code == 401
    assert resp.get_json()['error_code'] == "INVALID_API_KEY"
    make_client.assert_not_called()


def test_server_key_is_used_for_signed_in_callers(app, client, auth_headers):
    with patch.object(app.services['openai'], 'ask', return_value="Hello!") as ask:
        resp = client.post('/api/assistant/chat', json={"message": "hi"}, headers=auth_headers("user-1"))

    assert resp.status_code == 200
    ask.assert_called_once_with("hi", api_key=None, allow_default_key=True)
