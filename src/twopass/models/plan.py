"""Compiled per-category plans and per-file transcode plans."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class VideoPlan:
    """Video options plus the rate-control buffer size used at assembly."""

    options: tuple[str, ...] = ()
    vbv_size: Optional[int] = None  # kbps, None when there is no video stream
    bitrate: Optional[int] = None  # effective --vb value, None in quality mode


@dataclass(frozen=True)
class AudioTrackPlan:
    """Encoder settings for one selected audio track."""

    index: int
    encoder: Optional[str] = None  # None when the user overrides --aencoder
    bitrate: str = ""  # empty for copy
    mixdown: str = ""  # empty for copy
    name: str = ""


@dataclass(frozen=True)
class AudioPlan:
    """Selected audio tracks and which per-track dimensions to emit."""

    tracks: tuple[AudioTrackPlan, ...]
    include_encoders: bool = True
    include_bitrates: bool = True
    include_mixdowns: bool = True
    include_names: bool = False


class SubtitleMode(Enum):
    """How the selected subtitle tracks are carried."""

    BURN = "burn"  # single image-based track burned into the video
    DEFAULT = "default"  # single text track flagged as default
    TRACKS = "tracks"  # one or more soft subtitle tracks


@dataclass(frozen=True)
class SubtitleTrackPlan:
    """One subtitle track to include."""

    index: int
    name: str = ""
    forced: bool = False


@dataclass(frozen=True)
class SubtitlePlan:
    """Selected subtitle tracks and how they are presented."""

    mode: SubtitleMode
    tracks: tuple[SubtitleTrackPlan, ...]
    default_index: Optional[int] = None
    include_names: bool = False


@dataclass
class TranscodePlan:
    """Complete engine invocation for one input file."""

    input_path: Path
    arguments: list[str]
    output_path: Optional[Path] = None  # None in scan mode
    command_line: str = ""

    @property
    def is_scan(self) -> bool:
        return self.output_path is None

    def __str__(self) -> str:
        """Human-readable representation."""
        if self.is_scan:
            return f"{self.input_path.name}: scan"
        return f"{self.input_path.name} -> {self.output_path.name}"
