"""Card payload <-> agent dispatch metadata."""
from __future__ import annotations

from pydantic import ValidationError

from ..core.errors import PayloadError
from ..schemas.cards import CardData


def encode_card_metadata(card: CardData) -> str:
    """Serialize a card into the opaque metadata string carried by a dispatch."""

    return card.model_dump_json(by_alias=True)


def decode_card_metadata(metadata: str) -> CardData:
    """Inverse of :func:`encode_card_metadata`, used on the agent side."""

    if not metadata:
        raise PayloadError("Dispatch metadata is empty")
    try:
        return CardData.model_validate_json(metadata)
    except ValidationError as exc:
        raise PayloadError(f"Dispatch metadata is not a valid card: {exc}") from exc
