"""Configuration management for deskremote.

Loads settings from a YAML configuration file with environment variable
overrides. Supports .env files. Everything here is read-only once the
server has started.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/deskremote.yaml")


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)
    endpoint_path: str = Field(default="/remote", description="WebSocket route")
    static_dir: str = Field(default="public", description="Directory with the client UI")
    static_prefix: str = Field(default="/static")


class InputConfig(BaseModel):
    backend: Literal["pynput", "relay"] = Field(default="pynput")


class RelayConfig(BaseModel):
    command: str = Field(default="dotool", description="Helper daemon reading commands on stdin")
    expect_reply: bool = Field(default=False, description="Read one reply line per command")
    reply_timeout: float = Field(default=1.0, gt=0)


class CompositorConfig(BaseModel):
    enabled: bool = Field(default=False)
    command: str = Field(default="niri msg action")


def _default_targets() -> dict[str, str]:
    return {
        "steam": "steam",
        "firefox": "firefox",
        "spotify": "spotify",
        "audio": "pavucontrol",
    }


class LauncherConfig(BaseModel):
    targets: dict[str, str] = Field(
        default_factory=_default_targets,
        description="Open-target identifier -> command line to launch",
    )


class VolumeConfig(BaseModel):
    backend: Literal["keys", "command"] = Field(default="keys")
    increase_command: str = Field(default="wpctl set-volume @DEFAULT_AUDIO_SINK@ 5%+")
    decrease_command: str = Field(default="wpctl set-volume @DEFAULT_AUDIO_SINK@ 5%-")
    mute_command: str = Field(default="wpctl set-mute @DEFAULT_AUDIO_SINK@ toggle")


class SearchPathConfig(BaseModel):
    path: str
    priority: int = Field(default=1, description="Higher priority paths are listed first")


def _default_search_paths() -> list[SearchPathConfig]:
    return [
        SearchPathConfig(path="/run/current-system/sw/share/applications", priority=2),
        SearchPathConfig(path="/usr/share/applications", priority=1),
        SearchPathConfig(path="~/.local/share/applications", priority=0),
    ]


class AppsConfig(BaseModel):
    search_paths: list[SearchPathConfig] = Field(default_factory=_default_search_paths)


class DispatchConfig(BaseModel):
    timeout: float = Field(default=5.0, gt=0, description="Seconds to wait for one backend call")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for the deskremote server.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "DESKREMOTE_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    server: ServerConfig = Field(default_factory=ServerConfig)
    input: InputConfig = Field(default_factory=InputConfig)
    relay: RelayConfig = Field(default_factory=RelayConfig)
    compositor: CompositorConfig = Field(default_factory=CompositorConfig)
    launcher: LauncherConfig = Field(default_factory=LauncherConfig)
    volume: VolumeConfig = Field(default_factory=VolumeConfig)
    apps: AppsConfig = Field(default_factory=AppsConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs; the environment wins over them
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @model_validator(mode="after")
    def _check_reply_timeout(self) -> Settings:
        if (
            self.input.backend == "relay"
            and self.relay.expect_reply
            and self.relay.reply_timeout >= self.dispatch.timeout
        ):
            raise ValueError(
                f"relay.reply_timeout ({self.relay.reply_timeout}s) must be shorter than "
                f"dispatch.timeout ({self.dispatch.timeout}s)"
            )
        return self


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file (with ``PORT``) > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    return Settings(**yaml_data)


def _apply_env_overrides(yaml_data: dict) -> None:
    """Apply the short, non-prefixed overrides used by service units."""
    port = os.environ.get("PORT", "")
    if port:
        yaml_data.setdefault("server", {})
        yaml_data["server"]["port"] = int(port)
