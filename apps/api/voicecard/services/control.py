"""In-session control messages exchanged over the realtime data channel."""
from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class ControlType(str, enum.Enum):
    USER_DISCONNECT = "user_disconnect"


@dataclass(frozen=True, slots=True)
class ControlMessage:
    type: ControlType


def encode_control_message(message_type: ControlType) -> bytes:
    """Encode a control message as UTF-8 JSON, ready for ``publish_data``."""

    return json.dumps({"type": message_type.value}).encode("utf-8")


def disconnect_signal() -> bytes:
    """Payload an agent publishes to end the recipient's session."""

    return encode_control_message(ControlType.USER_DISCONNECT)


def parse_control_message(payload: bytes) -> ControlMessage | None:
    """Return the recognised control message in ``payload``.

    Unparseable or unknown payloads are logged and yield ``None``.
    """

    try:
        decoded = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Failed to parse data message: %s", exc)
        return None

    if not isinstance(decoded, dict):
        logger.info("Ignoring non-object data message")
        return None

    try:
        message_type = ControlType(decoded.get("type"))
    except ValueError:
        logger.info("Ignoring data message with type %r", decoded.get("type"))
        return None
    return ControlMessage(type=message_type)
