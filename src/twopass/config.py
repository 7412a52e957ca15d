"""Configuration management for twopass."""

import os
import re
from pathlib import Path
from typing import Any, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from twopass.models.options import ExtraOptions
from twopass.models.selection import ByTrack, Selection, unique_selections

AAC_ENCODERS = ("av_aac", "fdk_aac", "ca_aac")

AUTO = "auto"

BurnTarget = Union[Literal["auto"], int, None]


class LoggingConfig(BaseModel):
    """Logging configuration."""

    format: str = Field(default="text", description="Log format (json or text)")
    level: str = Field(default="warning", description="Log level")
    output: Optional[str] = Field(default=None, description="Optional log file path")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        if v.lower() not in ("debug", "info", "warning", "error", "critical"):
            raise ValueError("Invalid log level")
        return v.lower()


class ToolsConfig(BaseModel):
    """External tool locations."""

    handbrake: str = Field(default="HandBrakeCLI", description="HandBrakeCLI executable")
    ffprobe: str = Field(default="ffprobe", description="ffprobe executable")
    probe_timeout: int = Field(default=60, description="ffprobe timeout in seconds")

    @field_validator("probe_timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate probe timeout."""
        if v <= 0:
            raise ValueError("probe_timeout must be positive")
        return v


class Config(BaseModel):
    """Main configuration model."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")
    tools: ToolsConfig = Field(default_factory=ToolsConfig, description="External tools")


_ENV_REFERENCE = re.compile(r"\$\{([^}]+)\}")


def _expand_env(value: Any) -> Any:
    """Replace ``${NAME}`` references in YAML string values from the environment."""
    if isinstance(value, dict):
        return {key: _expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if not isinstance(value, str):
        return value

    def lookup(match: re.Match) -> str:
        name = match.group(1)
        if name not in os.environ:
            raise ValueError(f"undefined environment variable in configuration: {name}")
        return os.environ[name]

    return _ENV_REFERENCE.sub(lookup, value)


def load_config(path: Optional[str | Path] = None) -> Config:
    """Read the YAML configuration file, or return defaults without one.

    Raises:
        FileNotFoundError: If ``path`` does not exist
        ValueError: If the file is not a mapping or fails validation
    """
    if path is None:
        return Config()

    with open(path) as f:
        document = yaml.safe_load(f) or {}

    if not isinstance(document, dict):
        raise ValueError(f"configuration must be a mapping: {path}")

    return Config.model_validate(_expand_env(document))


class RunOptions(BaseModel):
    """Options for one run, built once from the command line.

    Instances are immutable and passed explicitly to every compiler.
    """

    model_config = ConfigDict(frozen=True)

    debug: bool = False
    dry_run: bool = False
    preview: bool = False
    bitrate: Optional[int] = None
    audio_selections: tuple[Selection, ...] = (ByTrack(1),)
    ac3_surround: bool = False
    aac_encoder: str = "av_aac"
    burn_subtitle: BurnTarget = AUTO
    subtitle_selections: tuple[Selection, ...] = ()
    extras: ExtraOptions = Field(default_factory=ExtraOptions)

    @field_validator("aac_encoder")
    @classmethod
    def validate_aac_encoder(cls, v: str) -> str:
        """Validate AAC encoder name."""
        if v not in AAC_ENCODERS:
            raise ValueError(f"invalid AAC audio encoder name: {v}")
        return v

    @field_validator("bitrate")
    @classmethod
    def validate_bitrate(cls, v: Optional[int]) -> Optional[int]:
        """Validate bitrate override."""
        if v is not None and v <= 0:
            raise ValueError("bitrate must be positive")
        return v

    @field_validator("audio_selections", "subtitle_selections")
    @classmethod
    def deduplicate(cls, v: tuple[Selection, ...]) -> tuple[Selection, ...]:
        """Drop repeated selections, keeping first occurrence."""
        return tuple(unique_selections(list(v)))


SubtitleEvent = tuple[Literal["burn", "add"], Union[str, Selection]]


def resolve_subtitle_events(
    events: list[SubtitleEvent],
) -> tuple[BurnTarget, tuple[Selection, ...]]:
    """Apply ``--burn-subtitle``/``--add-subtitle`` in command-line order.

    A numbered burn target clears earlier subtitle selections, every added
    selection clears the burn target, and ``none`` clears only the burn
    target. The last option given therefore decides the subtitle mode.

    Args:
        events: ``("burn", "none" | track number)`` or ``("add", Selection)``
            pairs in the order they appeared

    Returns:
        ``(burn_target, subtitle_selections)``
    """
    burn: BurnTarget = AUTO
    selections: list[Selection] = []

    for kind, value in events:
        if kind == "burn":
            if value == "none":
                burn = None
            else:
                burn = int(value)
                selections = []
        else:
            selections.append(value)
            burn = None

    return burn, tuple(selections)
