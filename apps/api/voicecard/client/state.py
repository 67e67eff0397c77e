"""Client session state machine.

Transitions are pure: ``transition(session, event)`` returns the next session
and the effects an outer driver must run. Every provisioning request gets a
request id; results and in-session signals carry the id they belong to, and
signals for anything but the current session are ignored. That keeps a late
disconnect from clearing details provisioned by a newer reveal.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace
from typing import Union

from ..schemas.connection import ConnectionDetails
from ..services.control import ControlType, parse_control_message

logger = logging.getLogger(__name__)

DEVICE_FAILURE_MESSAGE = (
    "Error acquiring microphone permissions or connecting to the session. "
    "Please grant the necessary permissions and try again."
)


class ClientSessionState(str, enum.Enum):
    IDLE = "idle"
    REVEALED = "revealed"
    CONNECTED = "connected"
    # Never held: a disconnect collapses straight back to IDLE.
    DISCONNECTED = "disconnected"


@dataclass(frozen=True, slots=True)
class ClientSession:
    state: ClientSessionState = ClientSessionState.IDLE
    details: ConnectionDetails | None = None
    request_id: int = 0
    connected_request_id: int | None = None


# Events


@dataclass(frozen=True, slots=True)
class RevealRequested:
    pass


@dataclass(frozen=True, slots=True)
class ProvisioningSucceeded:
    request_id: int
    details: ConnectionDetails


@dataclass(frozen=True, slots=True)
class ProvisioningFailed:
    request_id: int
    message: str


@dataclass(frozen=True, slots=True)
class TransportFailed:
    request_id: int
    message: str


@dataclass(frozen=True, slots=True)
class ControlMessageReceived:
    request_id: int
    payload: bytes


@dataclass(frozen=True, slots=True)
class TransportDisconnected:
    request_id: int
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class DisconnectRequested:
    pass


Event = Union[
    RevealRequested,
    ProvisioningSucceeded,
    ProvisioningFailed,
    TransportFailed,
    ControlMessageReceived,
    TransportDisconnected,
    DisconnectRequested,
]


# Effects


@dataclass(frozen=True, slots=True)
class RequestProvisioning:
    request_id: int


@dataclass(frozen=True, slots=True)
class OpenTransport:
    request_id: int
    details: ConnectionDetails


@dataclass(frozen=True, slots=True)
class CloseTransport:
    request_id: int


@dataclass(frozen=True, slots=True)
class NotifyUser:
    message: str


Effect = Union[RequestProvisioning, OpenTransport, CloseTransport, NotifyUser]


def _idle(session: ClientSession) -> ClientSession:
    return replace(session, state=ClientSessionState.IDLE, details=None, connected_request_id=None)


def _is_current_connection(session: ClientSession, request_id: int) -> bool:
    return session.state is ClientSessionState.CONNECTED and session.connected_request_id == request_id


def transition(session: ClientSession, event: Event) -> tuple[ClientSession, list[Effect]]:
    """Apply ``event`` to ``session``."""

    if isinstance(event, RevealRequested):
        if session.state is ClientSessionState.CONNECTED:
            return session, []
        request_id = session.request_id + 1
        revealed = replace(session, state=ClientSessionState.REVEALED, details=None, request_id=request_id)
        return revealed, [RequestProvisioning(request_id)]

    if isinstance(event, ProvisioningSucceeded):
        if session.state is not ClientSessionState.REVEALED or event.request_id != session.request_id:
            logger.warning("Discarding stale connection details for request %s", event.request_id)
            return session, []
        connected = replace(
            session,
            state=ClientSessionState.CONNECTED,
            details=event.details,
            connected_request_id=event.request_id,
        )
        return connected, [OpenTransport(event.request_id, event.details)]

    if isinstance(event, ProvisioningFailed):
        if session.state is not ClientSessionState.REVEALED or event.request_id != session.request_id:
            return session, []
        return _idle(session), [NotifyUser(event.message)]

    if isinstance(event, ControlMessageReceived):
        if not _is_current_connection(session, event.request_id):
            return session, []
        message = parse_control_message(event.payload)
        if message is None or message.type is not ControlType.USER_DISCONNECT:
            return session, []
        logger.info("Received disconnect signal from agent")
        return _idle(session), [CloseTransport(event.request_id)]

    if isinstance(event, TransportDisconnected):
        if not _is_current_connection(session, event.request_id):
            return session, []
        logger.info("Transport disconnected: %s", event.reason or "unknown reason")
        return _idle(session), []

    if isinstance(event, TransportFailed):
        if not _is_current_connection(session, event.request_id):
            return session, []
        logger.error("Transport failed: %s", event.message)
        return _idle(session), [CloseTransport(event.request_id), NotifyUser(DEVICE_FAILURE_MESSAGE)]

    if isinstance(event, DisconnectRequested):
        if session.state is not ClientSessionState.CONNECTED or session.connected_request_id is None:
            return session, []
        return _idle(session), [CloseTransport(session.connected_request_id)]

    raise TypeError(f"Unsupported event: {event!r}")
