"""Relay server configuration via environment variables."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from relay.messaging.codec import MAX_MESSAGE_SIZE
from relay.session.keepalive import KEEPALIVE_INTERVAL
from shared.validators import StringListEnvSettingsSource, parse_string_list

if TYPE_CHECKING:
    from pydantic_settings.sources.base import PydanticBaseSettingsSource


class RelayServerSettings(BaseSettings):
    model_config = {"env_prefix": "RELAY_"}

    log_dir: str | None = Field(default=None, min_length=1)
    # Browser peers connect from wherever the game client is hosted.
    cors_origins: list[str] = ["*"]
    keepalive_interval_seconds: float = Field(default=KEEPALIVE_INTERVAL, gt=0)
    max_message_bytes: int = Field(default=MAX_MESSAGE_SIZE, ge=1024)

    # 50 messages/sec sustained, burst of 80. Trickle ICE sends a burst of
    # candidates right after the offer/answer exchange.
    rate_limit_per_second: float = Field(default=50.0, gt=0)
    rate_limit_burst: int = Field(default=80, ge=1)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def validate_cors_origins(cls, v: str | list[str]) -> list[str]:
        return parse_string_list(v)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, StringListEnvSettingsSource(settings_cls), dotenv_settings, file_secret_settings)
