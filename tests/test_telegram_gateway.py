import json

import httpx
import pytest

from homepage.domain.ports import DeliveryError
from homepage.domain.schema import OutboundMessage
from homepage.infra.telegram_gateway import TelegramGateway


def _gateway(handler) -> TelegramGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TelegramGateway(api_key="123:SECRET", client=client)


@pytest.mark.asyncio
async def test_send_message_posts_json():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"ok": True})

    gateway = _gateway(handler)
    await gateway.send_message(OutboundMessage(chat_id=42, text="Hello owner!"))
    await gateway.close()

    assert len(requests) == 1
    assert requests[0].method == "POST"
    assert str(requests[0].url) == "https://api.telegram.org/bot123:SECRET/sendMessage"
    assert json.loads(requests[0].content) == {"chat_id": 42, "text": "Hello owner!"}


@pytest.mark.asyncio
async def test_rejected_message_raises():
    gateway = _gateway(lambda request: httpx.Response(403, json={"ok": False}))

    with pytest.raises(DeliveryError, match="403 Forbidden"):
        await gateway.send_message(OutboundMessage(chat_id=42, text="hi"))


@pytest.mark.asyncio
async def test_transport_error_does_not_leak_key():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError(f"cannot reach {request.url}", request=request)

    gateway = _gateway(handler)

    with pytest.raises(DeliveryError) as exc_info:
        await gateway.send_message(OutboundMessage(chat_id=42, text="hi"))

    assert "SECRET" not in str(exc_info.value)
    assert "ConnectError" in str(exc_info.value)


def test_requires_api_key():
    with pytest.raises(ValueError):
        TelegramGateway(api_key="")
