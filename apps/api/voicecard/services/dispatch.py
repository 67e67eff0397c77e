"""Agent dispatch through the LiveKit orchestration API."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable

import aiohttp
from livekit import api

from ..core.config import LiveKitConfig
from ..core.errors import DispatchUnavailable, PayloadError

logger = logging.getLogger(__name__)

DEFAULT_AGENT_NAME = "inbound-agent"

ApiFactory = Callable[..., Any]

_TRANSPORT_ERRORS = (api.TwirpError, aiohttp.ClientError, asyncio.TimeoutError)


@dataclass(frozen=True, slots=True)
class DispatchRecord:
    dispatch_id: str
    room_id: str
    agent_name: str
    metadata: str


class AgentDispatcher:
    """Attach named agents to rooms before any participant joins."""

    def __init__(self, config: LiveKitConfig, *, api_factory: ApiFactory = api.LiveKitAPI) -> None:
        self._config = config
        self._api_factory = api_factory

    def _client(self) -> Any:
        return self._api_factory(
            url=self._config.url,
            api_key=self._config.api_key,
            api_secret=self._config.api_secret,
        )

    async def dispatch(self, room_id: str, agent_name: str, metadata: str) -> DispatchRecord:
        """Create a dispatch. No retry is attempted on failure."""

        if not metadata:
            raise PayloadError("Dispatch metadata is empty")

        request = api.CreateAgentDispatchRequest(agent_name=agent_name, room=room_id, metadata=metadata)
        lkapi = self._client()
        try:
            dispatch = await lkapi.agent_dispatch.create_dispatch(request)
        except _TRANSPORT_ERRORS as exc:
            logger.warning("Agent dispatch to room %s failed: %s", room_id, exc)
            raise DispatchUnavailable(f"Agent dispatch failed: {exc}") from exc
        finally:
            await lkapi.aclose()

        logger.info("Dispatched agent %s to room %s (dispatch %s)", agent_name, room_id, dispatch.id)
        logger.debug("Dispatch %s metadata: %s", dispatch.id, dispatch.metadata)
        return DispatchRecord(
            dispatch_id=dispatch.id,
            room_id=dispatch.room or room_id,
            agent_name=dispatch.agent_name or agent_name,
            metadata=dispatch.metadata or metadata,
        )

    async def cancel(self, dispatch_id: str, room_id: str) -> None:
        """Delete a dispatch that no participant will ever join."""

        lkapi = self._client()
        try:
            await lkapi.agent_dispatch.delete_dispatch(dispatch_id, room_id)
        except _TRANSPORT_ERRORS as exc:
            logger.warning("Cancelling dispatch %s in room %s failed: %s", dispatch_id, room_id, exc)
            raise DispatchUnavailable(f"Agent dispatch cancellation failed: {exc}") from exc
        finally:
            await lkapi.aclose()

        logger.info("Cancelled dispatch %s in room %s", dispatch_id, room_id)
