"""Session and participant identifier generation."""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Protocol
from uuid import uuid4

DEFAULT_PARTICIPANT_PREFIX = "voice_assistant_user_"
DEFAULT_ROOM_PREFIX = "voice_assistant_room_"
DEFAULT_MAX_SUFFIX = 10_000


@dataclass(frozen=True, slots=True)
class SessionIdentity:
    participant_id: str
    room_id: str


class IdentityGenerator(Protocol):
    def generate(self) -> SessionIdentity: ...


class RandomSuffixIdentityGenerator:
    """Prefix plus a bounded random integer.

    Two sessions can draw the same suffix. Sessions are short lived, so the
    residual risk of two clients sharing a room is accepted for this generator.
    """

    def __init__(
        self,
        participant_prefix: str = DEFAULT_PARTICIPANT_PREFIX,
        room_prefix: str = DEFAULT_ROOM_PREFIX,
        *,
        max_suffix: int = DEFAULT_MAX_SUFFIX,
        rng: random.Random | None = None,
    ) -> None:
        if max_suffix < 1:
            raise ValueError("max_suffix must be positive")
        self._participant_prefix = participant_prefix
        self._room_prefix = room_prefix
        self._max_suffix = max_suffix
        self._rng = rng or random.Random()

    def generate(self) -> SessionIdentity:
        return SessionIdentity(
            participant_id=f"{self._participant_prefix}{self._rng.randrange(self._max_suffix)}",
            room_id=f"{self._room_prefix}{self._rng.randrange(self._max_suffix)}",
        )


class UuidIdentityGenerator:
    """Prefix plus a 128-bit random hex suffix."""

    def __init__(
        self,
        participant_prefix: str = DEFAULT_PARTICIPANT_PREFIX,
        room_prefix: str = DEFAULT_ROOM_PREFIX,
    ) -> None:
        self._participant_prefix = participant_prefix
        self._room_prefix = room_prefix

    def generate(self) -> SessionIdentity:
        return SessionIdentity(
            participant_id=f"{self._participant_prefix}{uuid4().hex}",
            room_id=f"{self._room_prefix}{uuid4().hex}",
        )


def build_identity_generator(
    strategy: str,
    *,
    participant_prefix: str = DEFAULT_PARTICIPANT_PREFIX,
    room_prefix: str = DEFAULT_ROOM_PREFIX,
) -> IdentityGenerator:
    """Return the generator registered under ``strategy``."""

    if strategy == "uuid":
        return UuidIdentityGenerator(participant_prefix, room_prefix)
    if strategy == "random_suffix":
        return RandomSuffixIdentityGenerator(participant_prefix, room_prefix)
    raise ValueError(f"Unknown identity strategy: {strategy}")
