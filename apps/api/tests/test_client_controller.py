"""Tests for the client session controller."""
from __future__ import annotations

import asyncio

import pytest

from voicecard.client.controller import SessionController
from voicecard.client.state import ClientSessionState
from voicecard.core.errors import ProvisioningError, TransportError
from voicecard.schemas.cards import CardData
from voicecard.schemas.connection import ConnectionDetails
from voicecard.services.control import disconnect_signal

CARD = CardData(senderName="Ana", recipientName="Lee", message="Hi!", templateImageUrl="https://x/img.png")


class DummyProvider:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls = 0
        self._error = error

    async def request_connection(self, card: CardData) -> ConnectionDetails:
        self.calls += 1
        if self._error:
            raise self._error
        return ConnectionDetails(
            serverUrl="wss://cards.example.livekit.cloud",
            roomName=f"room-{self.calls}",
            participantName=f"user-{self.calls}",
            participantToken=f"token-{self.calls}",
        )


class DummyTransport:
    def __init__(self, error: Exception | None = None) -> None:
        self.connected: list[ConnectionDetails] = []
        self.disconnects = 0
        self.on_data = None
        self.on_disconnected = None
        self._error = error

    async def connect(self, details, *, on_data, on_disconnected) -> None:
        if self._error:
            raise self._error
        self.connected.append(details)
        self.on_data = on_data
        self.on_disconnected = on_disconnected

    async def disconnect(self) -> None:
        self.disconnects += 1


async def _drain() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_reveal_provisions_and_opens_transport():
    transport = DummyTransport()
    controller = SessionController(CARD, DummyProvider(), transport)

    await controller.reveal()

    assert controller.session.state is ClientSessionState.CONNECTED
    assert controller.session.details.room_name == "room-1"
    assert transport.connected[0].participant_token == "token-1"


@pytest.mark.asyncio
async def test_disconnect_signal_from_agent_tears_down_session():
    transport = DummyTransport()
    controller = SessionController(CARD, DummyProvider(), transport)
    await controller.reveal()

    transport.on_data(disconnect_signal())
    await _drain()

    assert controller.session.state is ClientSessionState.IDLE
    assert controller.session.details is None
    assert transport.disconnects == 1


@pytest.mark.asyncio
async def test_garbage_data_message_keeps_session():
    transport = DummyTransport()
    controller = SessionController(CARD, DummyProvider(), transport)
    await controller.reveal()

    transport.on_data(b"\x00not-json")
    await _drain()

    assert controller.session.state is ClientSessionState.CONNECTED
    assert transport.disconnects == 0


@pytest.mark.asyncio
async def test_provisioning_failure_notifies_and_stays_idle():
    notices: list[str] = []
    controller = SessionController(
        CARD,
        DummyProvider(error=ProvisioningError("LiveKit server environment variables are not set")),
        DummyTransport(),
        notifier=notices.append,
    )

    await controller.reveal()

    assert controller.session.state is ClientSessionState.IDLE
    assert notices == ["LiveKit server environment variables are not set"]


@pytest.mark.asyncio
async def test_transport_failure_falls_back_to_idle():
    notices: list[str] = []
    transport = DummyTransport(error=TransportError("microphone unavailable"))
    controller = SessionController(CARD, DummyProvider(), transport, notifier=notices.append)

    await controller.reveal()

    assert controller.session.state is ClientSessionState.IDLE
    assert transport.disconnects == 1
    assert len(notices) == 1


@pytest.mark.asyncio
async def test_stale_transport_disconnect_does_not_clear_new_session():
    transport = DummyTransport()
    provider = DummyProvider()
    controller = SessionController(CARD, provider, transport)

    await controller.reveal()
    first_disconnected = transport.on_disconnected
    await controller.disconnect()
    await controller.reveal()

    first_disconnected("client initiated")
    await _drain()

    assert controller.session.state is ClientSessionState.CONNECTED
    assert controller.session.details.room_name == "room-2"
    assert provider.calls == 2


@pytest.mark.asyncio
async def test_aclose_leaves_open_session():
    transport = DummyTransport()
    controller = SessionController(CARD, DummyProvider(), transport)
    await controller.reveal()

    await controller.aclose()

    assert controller.session.state is ClientSessionState.IDLE
    assert transport.disconnects == 1


@pytest.mark.asyncio
async def test_unexpected_provider_error_returns_to_idle_with_notice():
    notices: list[str] = []
    controller = SessionController(
        CARD,
        DummyProvider(error=ValueError("Invalid URL 'not a url'")),
        DummyTransport(),
        notifier=notices.append,
    )

    await controller.reveal()

    assert controller.session.state is ClientSessionState.IDLE
    assert len(notices) == 1
    assert "Invalid URL" in notices[0]
