"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest
from openai import AsyncOpenAI

from grocery_tracker.adapters.openai_assistant_client import OpenAIAssistantClient


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str = "") -> None:
        self.responses = _FakeResponses(output_text)
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def test_openai_assistant_client_parses_structured_output() -> None:
    fake = _FakeOpenAI(json.dumps({"is_purchase": False, "data": None}))
    client = OpenAIAssistantClient(client=fake)

    result = asyncio.run(
        client.complete_json(
            model="gpt-5.2",
            reasoning_effort="low",
            store=False,
            instructions="Extract purchases",
            input_text="Hello",
            schema={"type": "object"},
            schema_name="purchase_extraction",
        )
    )

    payload = fake.responses.last_payload
    assert result == {"is_purchase": False, "data": None}
    assert payload is not None
    assert payload["text"]["format"]["name"] == "purchase_extraction"
    assert payload["text"]["format"]["strict"] is True
    assert payload["reasoning"] == {"effort": "low"}
    assert payload["input"] == [{"role": "user", "content": "Hello"}]


def test_openai_assistant_client_rejects_empty_output() -> None:
    client = OpenAIAssistantClient(client=_FakeOpenAI(""))

    with pytest.raises(RuntimeError):
        asyncio.run(
            client.complete_json(
                model="gpt-5.2",
                reasoning_effort=None,
                store=False,
                instructions="Extract purchases",
                input_text="Hello",
                schema={"type": "object"},
                schema_name="purchase_extraction",
            )
        )


def test_openai_assistant_client_text_completion() -> None:
    fake = _FakeOpenAI("Try store brands.")
    client = OpenAIAssistantClient(client=fake)
    messages = [{"role": "user", "content": "Tips?"}]

    text = asyncio.run(
        client.complete_text(
            model="gpt-5-mini",
            reasoning_effort=None,
            store=False,
            instructions="Be brief",
            messages=messages,
        )
    )

    payload = fake.responses.last_payload
    assert text == "Try store brands."
    assert payload is not None
    assert payload["input"] == messages
    assert "reasoning" not in payload

    asyncio.run(client.close())
    assert fake.closed is True


def test_openai_assistant_client_create_builds_sdk_client() -> None:
    client = OpenAIAssistantClient.create("openai-key", timeout_seconds=12.0)

    assert isinstance(client.client, AsyncOpenAI)
    assert client.client.api_key == "openai-key"
    asyncio.run(client.close())


def test_openai_assistant_client_over_http_transport() -> None:
    seen: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/responses")
        seen.append(json.loads(request.content.decode()))
        return httpx.Response(
            200,
            json={
                "id": "resp_1",
                "object": "response",
                "created_at": 0,
                "model": "gpt-5-mini",
                "status": "completed",
                "parallel_tool_calls": False,
                "tool_choice": "auto",
                "tools": [],
                "output": [
                    {
                        "type": "message",
                        "id": "msg_1",
                        "role": "assistant",
                        "status": "completed",
                        "content": [
                            {
                                "type": "output_text",
                                "text": "Costco is cheaper for rice.",
                                "annotations": [],
                            }
                        ],
                    }
                ],
            },
        )

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = OpenAIAssistantClient(
        client=AsyncOpenAI(api_key="openai-key", http_client=http_client)
    )

    text = asyncio.run(
        client.complete_text(
            model="gpt-5-mini",
            reasoning_effort=None,
            store=False,
            instructions="Be brief",
            messages=[{"role": "user", "content": "Tips?"}],
        )
    )

    assert text == "Costco is cheaper for rice."
    assert seen[0]["model"] == "gpt-5-mini"
    assert seen[0]["store"] is False
