"""
Tests unitaires pour le client LLM (llm_client.py) et la construction des prompts.
"""

import httpx
import openai
import pytest

from app.core.exceptions import InternalError, UpstreamError
from app.services.llm_client import get_llm_client, request_ticket_json
from app.services.prompts import SYSTEM_INSTRUCTION, USER_INSTRUCTION, build_messages, build_response_format
from conftest import llm_response, make_llm_client

REQUEST = httpx.Request("POST", "https://api.mistral.ai/v1/chat/completions")


def test_client_uses_configured_endpoint(settings):
    client = get_llm_client(settings)

    assert str(client.base_url).rstrip("/") == settings.llm_base_url
    assert client.api_key == "test-mistral-key"
    assert client.max_retries == 0


async def test_request_sends_image_and_strict_format(settings, sample_image_base64):
    client = make_llm_client({"articles": []})

    data = await request_ticket_json(sample_image_base64, settings=settings, client=client)

    assert data == {"articles": []}
    kwargs = client.chat.completions.create.await_args.kwargs
    assert kwargs["model"] == "mistral-small-latest"
    assert kwargs["response_format"] == {"type": "json_object"}
    system, user = kwargs["messages"]
    assert system == {"role": "system", "content": SYSTEM_INSTRUCTION}
    assert user["content"][0] == {"type": "text", "text": USER_INSTRUCTION}
    assert user["content"][1]["image_url"]["url"] == f"data:image/jpeg;base64,{sample_image_base64}"


async def test_loose_format_omits_response_format(settings, sample_image_base64):
    settings = settings.model_copy(update={"response_format": "none", "prompt_mode": "user_only"})
    client = make_llm_client({"articles": []})

    await request_ticket_json(sample_image_base64, settings=settings, client=client)

    kwargs = client.chat.completions.create.await_args.kwargs
    assert "response_format" not in kwargs
    assert len(kwargs["messages"]) == 1
    assert kwargs["messages"][0]["role"] == "user"


async def test_fenced_json_is_accepted(settings, sample_image_base64):
    client = make_llm_client('```json\n{"error": "cannot_read"}\n```')

    data = await request_ticket_json(sample_image_base64, settings=settings, client=client)

    assert data == {"error": "cannot_read"}


@pytest.mark.parametrize("content", [None, "", "pas du json", "[1, 2]"])
async def test_unusable_answer_raises_internal_error(settings, sample_image_base64, content):
    client = make_llm_client()
    client.chat.completions.create.return_value = llm_response(content)

    with pytest.raises(InternalError) as exc_info:
        await request_ticket_json(sample_image_base64, settings=settings, client=client)

    assert exc_info.value.status_code == 500


async def test_api_status_error_keeps_upstream_status(settings, sample_image_base64):
    client = make_llm_client(
        side_effect=openai.APIStatusError(
            "Rate limit",
            response=httpx.Response(429, request=REQUEST),
            body={"message": "Rate limit"},
        )
    )

    with pytest.raises(UpstreamError) as exc_info:
        await request_ticket_json(sample_image_base64, settings=settings, client=client)

    assert exc_info.value.status_code == 429
    assert exc_info.value.details == {"message": "Rate limit"}
    client.chat.completions.create.assert_awaited_once()


async def test_connection_error_is_500(settings, sample_image_base64):
    client = make_llm_client(side_effect=openai.APIConnectionError(request=REQUEST))

    with pytest.raises(UpstreamError) as exc_info:
        await request_ticket_json(sample_image_base64, settings=settings, client=client)

    assert exc_info.value.status_code == 500
    assert exc_info.value.to_content() == {"error": "Connection error."}


class TestPrompts:
    def test_data_uri_is_not_doubled(self):
        messages = build_messages("data:image/jpeg;base64,QUJD", "system_user")

        assert messages[1]["content"][1]["image_url"]["url"] == "data:image/jpeg;base64,QUJD"

    def test_user_only_carries_both_instructions(self):
        (message,) = build_messages("QUJD", "user_only")

        text = message["content"][0]["text"]
        assert SYSTEM_INSTRUCTION in text
        assert USER_INSTRUCTION in text

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            build_messages("QUJD", "three_messages")

    def test_response_formats(self):
        assert build_response_format("json_object") == {"type": "json_object"}
        assert build_response_format("none") is None
