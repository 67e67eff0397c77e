"""Tests for card metadata and in-session control messages."""
from __future__ import annotations

import json

import pytest

from voicecard.core.errors import PayloadError
from voicecard.schemas.cards import CardData
from voicecard.services import control
from voicecard.services.metadata import decode_card_metadata, encode_card_metadata


def test_card_metadata_round_trip_preserves_every_field():
    card = CardData(
        senderName="Ana",
        recipientName="Lee",
        message="Happy birthday! " * 200,
        templateImageUrl="https://x/img.png?size=large&v=2",
    )

    metadata = encode_card_metadata(card)

    assert decode_card_metadata(metadata) == card
    assert json.loads(metadata) == {
        "senderName": "Ana",
        "recipientName": "Lee",
        "message": card.message,
        "templateImageUrl": "https://x/img.png?size=large&v=2",
    }


def test_card_metadata_round_trip_keeps_unicode():
    card = CardData(senderName="Zoë", recipientName="李", message="¡Hola! 🎉", templateImageUrl="https://x/ü.png")

    assert decode_card_metadata(encode_card_metadata(card)) == card


@pytest.mark.parametrize("metadata", ["", "not json", '{"senderName": "Ana"}'])
def test_decode_card_metadata_rejects_incomplete_payloads(metadata):
    with pytest.raises(PayloadError):
        decode_card_metadata(metadata)


def test_disconnect_signal_is_recognised():
    message = control.parse_control_message(control.disconnect_signal())

    assert message is not None
    assert message.type is control.ControlType.USER_DISCONNECT


@pytest.mark.parametrize(
    "payload",
    [b"\xff\xfe", b"{not json", b"[1, 2]", b'{"type": "agent_speaking"}', b"{}"],
)
def test_unrecognised_control_payloads_are_ignored(payload):
    assert control.parse_control_message(payload) is None
