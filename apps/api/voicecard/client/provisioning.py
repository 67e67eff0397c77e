"""HTTP client for the provisioning and card lookup endpoints."""
from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from ..core.errors import CardNotFoundError, ProvisioningError
from ..schemas.cards import CardData
from ..schemas.connection import ConnectionDetails

logger = logging.getLogger(__name__)

CONNECTION_DETAILS_PATH = "/api/connection-details"
CARDS_PATH = "/api/cards"


class ProvisioningClient:
    """Thin wrapper over an ``httpx.AsyncClient`` pointed at the API."""

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    async def fetch_card(self, collection_id: str) -> CardData:
        response = await self._http.get(f"{CARDS_PATH}/{collection_id}")
        if response.status_code == 404:
            raise CardNotFoundError(collection_id)
        if response.status_code != 200:
            raise ProvisioningError(_error_message(response))
        return CardData.model_validate(response.json())

    async def request_connection(self, card: CardData) -> ConnectionDetails:
        """POST the card and return the connection details for a fresh session."""

        payload = {"cardData": card.model_dump(by_alias=True)}
        try:
            response = await self._http.post(CONNECTION_DETAILS_PATH, json=payload)
        except httpx.HTTPError as exc:
            raise ProvisioningError(f"Provisioning request failed: {exc}") from exc

        if response.status_code != 200:
            message = _error_message(response)
            logger.warning("Provisioning rejected (%s): %s", response.status_code, message)
            raise ProvisioningError(message)

        try:
            return ConnectionDetails.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise ProvisioningError(f"Malformed connection details: {exc}") from exc


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"HTTP {response.status_code}"
