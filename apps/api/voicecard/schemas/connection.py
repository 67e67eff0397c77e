"""Data contracts for provisioning responses."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ConnectionDetails(BaseModel):
    """Everything a client needs to open a realtime session."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    server_url: str = Field(..., alias="serverUrl")
    room_name: str = Field(..., alias="roomName")
    participant_name: str = Field(..., alias="participantName")
    participant_token: str = Field(..., alias="participantToken")
