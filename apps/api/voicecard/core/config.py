"""Application configuration for the voice card API."""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class LiveKitConfig:
    """Resolved LiveKit connection settings shared by the issuer and dispatcher."""

    url: str
    api_key: str
    api_secret: str


@dataclass(frozen=True, slots=True)
class FirebaseConfig:
    """Document store project settings."""

    api_key: str
    auth_domain: str
    project_id: str
    storage_bucket: str
    app_id: str


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_env: str = Field(default="development")
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    livekit_url: str = Field(default="")
    livekit_api_key: str = Field(default="")
    livekit_api_secret: str = Field(default="")

    firebase_api_key: str = Field(default="")
    firebase_auth_domain: str = Field(default="")
    firebase_project_id: str = Field(default="")
    firebase_storage_bucket: str = Field(default="")
    firebase_app_id: str = Field(default="")

    agent_name: str = Field(default="inbound-agent")
    participant_display_name: str = Field(default="Card Recipient")
    participant_prefix: str = Field(default="voice_assistant_user_")
    room_prefix: str = Field(default="voice_assistant_room_")
    identity_strategy: Literal["random_suffix", "uuid"] = Field(default="random_suffix")
    compensate_failed_dispatch: bool = Field(default=False)

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        """Allow comma-separated env values for CORS origins."""

        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    def livekit(self) -> LiveKitConfig:
        """Return LiveKit settings or raise when any of them is absent."""

        values = {
            "LIVEKIT_URL": self.livekit_url.strip(),
            "LIVEKIT_API_KEY": self.livekit_api_key.strip(),
            "LIVEKIT_API_SECRET": self.livekit_api_secret.strip(),
        }
        _require(values, "LiveKit server environment variables are not set")
        return LiveKitConfig(
            url=values["LIVEKIT_URL"],
            api_key=values["LIVEKIT_API_KEY"],
            api_secret=values["LIVEKIT_API_SECRET"],
        )

    def firebase(self) -> FirebaseConfig:
        """Return document store settings or raise when any of them is absent."""

        values = {
            "FIREBASE_API_KEY": self.firebase_api_key.strip(),
            "FIREBASE_AUTH_DOMAIN": self.firebase_auth_domain.strip(),
            "FIREBASE_PROJECT_ID": self.firebase_project_id.strip(),
            "FIREBASE_STORAGE_BUCKET": self.firebase_storage_bucket.strip(),
            "FIREBASE_APP_ID": self.firebase_app_id.strip(),
        }
        _require(values, "Firebase environment variables are not set")
        return FirebaseConfig(
            api_key=values["FIREBASE_API_KEY"],
            auth_domain=values["FIREBASE_AUTH_DOMAIN"],
            project_id=values["FIREBASE_PROJECT_ID"],
            storage_bucket=values["FIREBASE_STORAGE_BUCKET"],
            app_id=values["FIREBASE_APP_ID"],
        )


def _require(values: dict[str, str], message: str) -> None:
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigurationError(f"{message}: {', '.join(missing)}")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


settings = get_settings()
