"""Card content lookup endpoint."""
from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from ..core.config import get_settings
from ..core.errors import CardNotFoundError, error_response
from ..repositories.cards import CardStore

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache
def _default_store() -> CardStore:
    return CardStore.from_config(get_settings().firebase())


def get_card_store() -> CardStore:
    """FastAPI dependency returning the process-wide card store."""

    return _default_store()


@router.get("/{collection_id}")
async def get_card(collection_id: str, store: CardStore = Depends(get_card_store)) -> Response:
    """Return the card content for ``collection_id``."""

    try:
        card = await store.get(collection_id)
    except CardNotFoundError as exc:
        logger.info("Card lookup miss: %s", collection_id)
        return error_response(str(exc), status_code=404)

    return JSONResponse(content=card.model_dump(by_alias=True))
