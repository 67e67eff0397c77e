"""Drive the client session state machine against real collaborators."""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Protocol

from ..core.errors import ProvisioningError, TransportError
from ..schemas.cards import CardData
from ..schemas.connection import ConnectionDetails
from .state import (
    ClientSession,
    CloseTransport,
    ControlMessageReceived,
    DisconnectRequested,
    Effect,
    Event,
    NotifyUser,
    OpenTransport,
    ProvisioningFailed,
    ProvisioningSucceeded,
    RequestProvisioning,
    RevealRequested,
    TransportDisconnected,
    TransportFailed,
    transition,
)
from .transport import SessionTransport

logger = logging.getLogger(__name__)

Notifier = Callable[[str], None]


class ConnectionProvider(Protocol):
    async def request_connection(self, card: CardData) -> ConnectionDetails: ...


def _log_notice(message: str) -> None:
    logger.warning("User notice: %s", message)


class SessionController:
    """Serialize events, apply transitions, and execute the resulting effects.

    Transitions run under a lock; effects run outside it so a disconnect
    signal can be applied while a provisioning call is still in flight.
    """

    def __init__(
        self,
        card: CardData,
        provider: ConnectionProvider,
        transport: SessionTransport,
        *,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self._card = card
        self._provider = provider
        self._transport = transport
        self._notify = notifier or _log_notice
        self._session = ClientSession()
        self._lock = asyncio.Lock()
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def session(self) -> ClientSession:
        return self._session

    async def reveal(self) -> None:
        await self.dispatch(RevealRequested())

    async def disconnect(self) -> None:
        await self.dispatch(DisconnectRequested())

    async def dispatch(self, event: Event) -> None:
        async with self._lock:
            self._session, effects = transition(self._session, event)
        for effect in effects:
            await self._run(effect)

    async def aclose(self) -> None:
        """Wait for queued transport events, then leave any open session."""

        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        await self.dispatch(DisconnectRequested())

    async def _run(self, effect: Effect) -> None:
        if isinstance(effect, RequestProvisioning):
            await self._provision(effect.request_id)
        elif isinstance(effect, OpenTransport):
            await self._open(effect.request_id, effect.details)
        elif isinstance(effect, CloseTransport):
            await self._transport.disconnect()
        elif isinstance(effect, NotifyUser):
            self._notify(effect.message)

    async def _provision(self, request_id: int) -> None:
        try:
            details = await self._provider.request_connection(self._card)
        except ProvisioningError as exc:
            await self.dispatch(ProvisioningFailed(request_id, exc.message))
            return
        except Exception as exc:  # noqa: BLE001 - any provider failure returns the session to idle
            logger.exception("Unexpected provisioning failure for request %s", request_id)
            await self.dispatch(ProvisioningFailed(request_id, f"Could not start the conversation: {exc}"))
            return
        await self.dispatch(ProvisioningSucceeded(request_id, details))

    async def _open(self, request_id: int, details: ConnectionDetails) -> None:
        try:
            await self._transport.connect(
                details,
                on_data=lambda payload: self._schedule(ControlMessageReceived(request_id, payload)),
                on_disconnected=lambda reason: self._schedule(TransportDisconnected(request_id, reason)),
            )
        except TransportError as exc:
            await self.dispatch(TransportFailed(request_id, str(exc)))
            return

        # A disconnect applied while the join was pending found nothing to close.
        async with self._lock:
            current = self._session.connected_request_id == request_id
        if not current:
            logger.info("Session %s ended while joining; leaving room", request_id)
            await self._transport.disconnect()

    def _schedule(self, event: Event) -> None:
        task = asyncio.get_running_loop().create_task(self.dispatch(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
