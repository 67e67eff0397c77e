"""Realtime session transport used by the client controller."""
from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from livekit import rtc

from ..core.errors import TransportError
from ..schemas.connection import ConnectionDetails

logger = logging.getLogger(__name__)

DataHandler = Callable[[bytes], None]
DisconnectHandler = Callable[[Optional[str]], None]

SAMPLE_RATE = 48000
NUM_CHANNELS = 1


class SessionTransport(Protocol):
    async def connect(
        self,
        details: ConnectionDetails,
        *,
        on_data: DataHandler,
        on_disconnected: DisconnectHandler,
    ) -> None: ...

    async def disconnect(self) -> None: ...


class LiveKitTransport:
    """Join a LiveKit room and publish a microphone track.

    Audio frames are pushed into :attr:`audio_source` by the host application.
    """

    def __init__(self, room_factory: Callable[[], rtc.Room] = rtc.Room) -> None:
        self._room_factory = room_factory
        self._room: rtc.Room | None = None
        self.audio_source: rtc.AudioSource | None = None

    async def connect(
        self,
        details: ConnectionDetails,
        *,
        on_data: DataHandler,
        on_disconnected: DisconnectHandler,
    ) -> None:
        if self._room is not None:
            await self.disconnect()

        room = self._room_factory()

        @room.on("data_received")
        def _on_data(packet: rtc.DataPacket) -> None:
            on_data(bytes(packet.data))

        @room.on("disconnected")
        def _on_disconnected(reason: object = None) -> None:
            on_disconnected(str(reason) if reason is not None else None)

        try:
            await room.connect(details.server_url, details.participant_token)
        except rtc.ConnectError as exc:
            raise TransportError(f"Could not join room {details.room_name}: {exc}") from exc

        self._room = room
        try:
            self.audio_source = rtc.AudioSource(SAMPLE_RATE, NUM_CHANNELS)
            track = rtc.LocalAudioTrack.create_audio_track("microphone", self.audio_source)
            options = rtc.TrackPublishOptions(source=rtc.TrackSource.SOURCE_MICROPHONE)
            await room.local_participant.publish_track(track, options)
        except Exception as exc:  # noqa: BLE001 - any publish failure leaves the session unusable
            await self.disconnect()
            raise TransportError(f"Could not publish microphone track: {exc}") from exc

        logger.info("Joined room %s as %s", details.room_name, details.participant_name)

    async def disconnect(self) -> None:
        room, self._room = self._room, None
        self.audio_source = None
        if room is None:
            return
        await room.disconnect()
        logger.info("Left room")
