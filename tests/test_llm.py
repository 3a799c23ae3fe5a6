from unittest.mock import AsyncMock

import httpx
import pytest

from replica.config import Settings
from replica.exceptions import LLMResponseError
from replica.services.llm import ChatClient

_URL = "http://localhost:9999/v1/chat/completions"


def _response(status: int, json: dict | None = None) -> httpx.Response:
    return httpx.Response(status, json=json or {}, request=httpx.Request("POST", _URL))


_OK = {
    "model": "test-model",
    "choices": [{"message": {"content": '{"ok": true}'}}],
    "usage": {"prompt_tokens": 12, "completion_tokens": 3},
}


@pytest.fixture
def client(mock_settings: Settings) -> ChatClient:
    return ChatClient(mock_settings)


class TestChat:
    @pytest.mark.asyncio
    async def test_success(self, client: ChatClient):
        client._client.post = AsyncMock(return_value=_response(200, _OK))

        result = await client.chat([{"role": "user", "content": "hi"}], json_format=True)

        assert result.content == '{"ok": true}'
        assert result.prompt_tokens == 12
        url = client._client.post.call_args.args[0]
        payload = client._client.post.call_args.kwargs["json"]
        assert url == _URL
        assert payload["model"] == "test-model"
        assert payload["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_plain_text_mode_has_no_response_format(self, client: ChatClient):
        client._client.post = AsyncMock(return_value=_response(200, _OK))
        await client.chat([{"role": "user", "content": "hi"}], temperature=0.5)

        payload = client._client.post.call_args.kwargs["json"]
        assert "response_format" not in payload
        assert payload["temperature"] == 0.5

    @pytest.mark.asyncio
    async def test_retries_server_errors(self, client: ChatClient):
        client._client.post = AsyncMock(side_effect=[_response(503), _response(200, _OK)])

        result = await client.chat([{"role": "user", "content": "hi"}])

        assert result.model == "test-model"
        assert client._client.post.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, client: ChatClient):
        client._client.post = AsyncMock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(httpx.ConnectError):
            await client.chat([{"role": "user", "content": "hi"}])
        assert client._client.post.await_count == 3

    @pytest.mark.asyncio
    async def test_no_choices(self, client: ChatClient):
        client._client.post = AsyncMock(return_value=_response(200, {"choices": []}))
        with pytest.raises(LLMResponseError):
            await client.chat([{"role": "user", "content": "hi"}])


class TestIsReachable:
    @pytest.mark.asyncio
    async def test_reachable(self, client: ChatClient):
        client._client.get = AsyncMock(return_value=httpx.Response(200))
        assert await client.is_reachable() is True

    @pytest.mark.asyncio
    async def test_unreachable(self, client: ChatClient):
        client._client.get = AsyncMock(side_effect=httpx.ConnectError("refused"))
        assert await client.is_reachable() is False
