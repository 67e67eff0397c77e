"""Data contracts for card content and the provisioning request body."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CardData(BaseModel):
    """Card payload shown to the recipient and handed to the dispatched agent."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    sender_name: str = Field(..., alias="senderName", description="Who sent the card")
    recipient_name: str = Field(..., alias="recipientName", description="Who the card is for")
    message: str = Field(..., description="Free-form card message")
    template_image_url: str = Field(..., alias="templateImageUrl", description="Card artwork URL")


class ConnectionDetailsRequest(BaseModel):
    """POST /api/connection-details body; caller identifiers are accepted and ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    card_data: CardData = Field(..., alias="cardData")
    user_name: str | None = Field(default=None, alias="userName")
    agent_id: str | None = Field(default=None, alias="agentId")
    user_id: str | None = Field(default=None, alias="userId")
