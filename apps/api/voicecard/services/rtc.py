"""RTC token issuance.

Participants join LiveKit rooms with a signed access token. Every token carries
the same capability grant, scoped to a single room, and expires 15 minutes
after issuance."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from livekit import api

from ..core.config import LiveKitConfig

TOKEN_TTL = timedelta(minutes=15)


@dataclass(frozen=True, slots=True)
class ParticipantInfo:
    identity: str
    name: str


@dataclass(frozen=True, slots=True)
class CapabilityGrant:
    """Fixed permission set for card recipients. Not configurable per caller."""

    room: str
    room_join: bool = True
    can_publish: bool = True
    can_publish_data: bool = True
    can_subscribe: bool = True
    can_update_own_metadata: bool = True

    @classmethod
    def for_room(cls, room: str) -> "CapabilityGrant":
        return cls(room=room)

    def to_video_grants(self) -> api.VideoGrants:
        return api.VideoGrants(
            room=self.room,
            room_join=self.room_join,
            can_publish=self.can_publish,
            can_publish_data=self.can_publish_data,
            can_subscribe=self.can_subscribe,
            can_update_own_metadata=self.can_update_own_metadata,
        )


@dataclass(frozen=True, slots=True)
class AccessCredential:
    token: str
    participant_id: str
    display_name: str
    room: str
    grant: CapabilityGrant
    issued_at: datetime
    expires_at: datetime

    @property
    def expires_in(self) -> int:
        return int((self.expires_at - self.issued_at).total_seconds())


class TokenIssuer:
    """Sign LiveKit access tokens. Holds no reference to issued credentials."""

    def __init__(self, config: LiveKitConfig, *, ttl: timedelta = TOKEN_TTL) -> None:
        self._config = config
        self._ttl = ttl

    def issue(
        self,
        participant: ParticipantInfo,
        room_id: str,
        grant: CapabilityGrant | None = None,
    ) -> AccessCredential:
        """Produce a signed credential for ``participant`` in ``room_id``."""

        grant = grant or CapabilityGrant.for_room(room_id)
        if grant.room != room_id:
            raise ValueError(f"Grant is scoped to '{grant.room}', not '{room_id}'")

        token = (
            api.AccessToken(self._config.api_key, self._config.api_secret)
            .with_identity(participant.identity)
            .with_name(participant.name)
            .with_ttl(self._ttl)
            .with_grants(grant.to_video_grants())
            .to_jwt()
        )
        # The signed nbf/exp claims are authoritative for the credential lifetime.
        claims = jwt.decode(token, options={"verify_signature": False})
        return AccessCredential(
            token=token,
            participant_id=participant.identity,
            display_name=participant.name,
            room=room_id,
            grant=grant,
            issued_at=datetime.fromtimestamp(claims["nbf"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )
