"""Session provisioning: identities, agent dispatch, and participant tokens."""
from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from ..core.config import LiveKitConfig, Settings
from ..core.errors import PayloadError
from ..schemas.cards import CardData, ConnectionDetailsRequest
from ..schemas.connection import ConnectionDetails
from .dispatch import DEFAULT_AGENT_NAME, AgentDispatcher
from .identity import IdentityGenerator, build_identity_generator
from .metadata import encode_card_metadata
from .rtc import ParticipantInfo, TokenIssuer

logger = logging.getLogger(__name__)

DEFAULT_PARTICIPANT_NAME = "Card Recipient"


class SessionProvisioner:
    """Run one provisioning request end to end. Holds no per-session state."""

    def __init__(
        self,
        config: LiveKitConfig,
        *,
        identities: IdentityGenerator,
        dispatcher: AgentDispatcher,
        issuer: TokenIssuer,
        agent_name: str = DEFAULT_AGENT_NAME,
        participant_name: str = DEFAULT_PARTICIPANT_NAME,
        compensate_on_token_failure: bool = False,
    ) -> None:
        self._config = config
        self._identities = identities
        self._dispatcher = dispatcher
        self._issuer = issuer
        self._agent_name = agent_name
        self._participant_name = participant_name
        self._compensate = compensate_on_token_failure

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionProvisioner":
        """Build a provisioner, raising ``ConfigurationError`` for missing secrets."""

        config = settings.livekit()
        return cls(
            config,
            identities=build_identity_generator(
                settings.identity_strategy,
                participant_prefix=settings.participant_prefix,
                room_prefix=settings.room_prefix,
            ),
            dispatcher=AgentDispatcher(config),
            issuer=TokenIssuer(config),
            agent_name=settings.agent_name,
            participant_name=settings.participant_display_name,
            compensate_on_token_failure=settings.compensate_failed_dispatch,
        )

    async def provision(self, body: object) -> ConnectionDetails:
        card = parse_card_payload(body)
        identity = self._identities.generate()

        record = await self._dispatcher.dispatch(
            identity.room_id,
            self._agent_name,
            encode_card_metadata(card),
        )

        try:
            credential = self._issuer.issue(
                ParticipantInfo(identity=identity.participant_id, name=self._participant_name),
                identity.room_id,
            )
        except Exception:
            logger.exception("Token issuance failed after dispatch %s", record.dispatch_id)
            if self._compensate:
                await self._dispatcher.cancel(record.dispatch_id, record.room_id)
            raise

        logger.info(
            "Provisioned room %s for participant %s (token expires %s)",
            identity.room_id,
            identity.participant_id,
            credential.expires_at.isoformat(),
        )
        return ConnectionDetails(
            server_url=self._config.url,
            room_name=identity.room_id,
            participant_name=identity.participant_id,
            participant_token=credential.token,
        )


def parse_card_payload(body: object) -> CardData:
    """Extract a complete card from a provisioning request body."""

    if not isinstance(body, dict):
        raise PayloadError("Request body must be a JSON object")
    if body.get("cardData") is None:
        raise PayloadError("cardData not found in the request body")

    try:
        request = ConnectionDetailsRequest.model_validate(body)
    except ValidationError as exc:
        raise PayloadError(f"cardData is incomplete: {_describe_errors(exc.errors())}") from exc
    return request.card_data


def _describe_errors(errors: list[dict[str, Any]]) -> str:
    parts = []
    for error in errors:
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location} ({error.get('msg', 'invalid')})")
    return ", ".join(parts)
