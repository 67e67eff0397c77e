"""Card document lookups in Firestore."""
from __future__ import annotations

import logging
from typing import Any

from google.cloud import firestore
from pydantic import ValidationError

from ..core.config import FirebaseConfig
from ..core.errors import CardNotFoundError, PayloadError
from ..schemas.cards import CardData

logger = logging.getLogger(__name__)

CARDS_COLLECTION = "cards"


class CardStore:
    """Keyed read access to the ``cards`` collection."""

    def __init__(self, client: Any, *, collection: str = CARDS_COLLECTION) -> None:
        self._client = client
        self._collection = collection

    @classmethod
    def from_config(cls, config: FirebaseConfig) -> "CardStore":
        return cls(firestore.AsyncClient(project=config.project_id))

    async def get(self, collection_id: str) -> CardData:
        """Return the card stored under ``collection_id``."""

        snapshot = await self._client.collection(self._collection).document(collection_id).get()
        if not snapshot.exists:
            raise CardNotFoundError(collection_id)

        data = snapshot.to_dict() or {}
        try:
            return CardData.model_validate(data)
        except ValidationError as exc:
            logger.error("Card %s is missing required fields: %s", collection_id, exc)
            raise PayloadError(f"Card '{collection_id}' is incomplete") from exc
