"""Tests for the client HTTP wrapper."""
from __future__ import annotations

import json

import httpx
import pytest

from voicecard.client.provisioning import ProvisioningClient
from voicecard.core.errors import CardNotFoundError, ProvisioningError
from voicecard.schemas.cards import CardData

CARD = CardData(senderName="Ana", recipientName="Lee", message="Hi!", templateImageUrl="https://x/img.png")

DETAILS = {
    "serverUrl": "wss://cards.example.livekit.cloud",
    "roomName": "voice_assistant_room_1",
    "participantName": "voice_assistant_user_1",
    "participantToken": "jwt",
}


def _client(handler) -> ProvisioningClient:
    return ProvisioningClient(httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://testserver"))


@pytest.mark.asyncio
async def test_request_connection_posts_card_data():
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        assert request.url.path == "/api/connection-details"
        return httpx.Response(200, json=DETAILS, headers={"Cache-Control": "no-store"})

    details = await _client(handler).request_connection(CARD)

    assert seen == [{"cardData": CARD.model_dump(by_alias=True)}]
    assert details.room_name == "voice_assistant_room_1"
    assert details.participant_token == "jwt"


@pytest.mark.asyncio
async def test_request_connection_surfaces_server_error_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "Agent dispatch failed", "timestamp": "2025-10-10T12:00:00+00:00"})

    with pytest.raises(ProvisioningError) as exc:
        await _client(handler).request_connection(CARD)

    assert exc.value.message == "Agent dispatch failed"


@pytest.mark.asyncio
async def test_request_connection_wraps_network_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ProvisioningError):
        await _client(handler).request_connection(CARD)


@pytest.mark.asyncio
async def test_request_connection_rejects_malformed_details():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"serverUrl": "wss://x"})

    with pytest.raises(ProvisioningError):
        await _client(handler).request_connection(CARD)


@pytest.mark.asyncio
async def test_fetch_card():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/cards/card-1":
            return httpx.Response(200, json=CARD.model_dump(by_alias=True))
        return httpx.Response(404, json={"error": "No card found", "timestamp": "t"})

    client = _client(handler)

    assert await client.fetch_card("card-1") == CARD
    with pytest.raises(CardNotFoundError):
        await client.fetch_card("missing")
