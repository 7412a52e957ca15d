"""Media stream data models built from ffprobe output."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class StreamType(Enum):
    """Stream types addressed by the compilers."""

    VIDEO = "video"
    AUDIO = "audio"
    SUBTITLE = "subtitle"
    OTHER = "other"

    @classmethod
    def from_codec_type(cls, codec_type: Optional[str]) -> "StreamType":
        """Map an ffprobe ``codec_type`` onto a StreamType."""
        try:
            return cls(codec_type)
        except ValueError:
            return cls.OTHER


def _to_int(value: Any) -> Optional[int]:
    try:
        if value is None:
            return None
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class Stream:
    """Represents a single stream reported by ffprobe."""

    type: StreamType
    codec_name: str = ""
    width: int = 0
    height: int = 0
    color_space: Optional[str] = None
    avg_frame_rate: Optional[str] = None
    channels: int = 0  # 0 when ffprobe reports no channel count
    language: Optional[str] = None  # ISO 639-2 code as tagged in the container
    title: Optional[str] = None
    forced: bool = False

    @classmethod
    def from_probe(cls, data: dict[str, Any]) -> "Stream":
        """Build a stream from one entry of ffprobe's ``streams`` array.

        Args:
            data: Raw stream dictionary

        Returns:
            Stream instance
        """
        tags = data.get("tags") or {}
        disposition = data.get("disposition") or {}

        return cls(
            type=StreamType.from_codec_type(data.get("codec_type")),
            codec_name=str(data.get("codec_name") or ""),
            width=_to_int(data.get("width")) or 0,
            height=_to_int(data.get("height")) or 0,
            color_space=data.get("color_space"),
            avg_frame_rate=data.get("avg_frame_rate"),
            channels=_to_int(data.get("channels")) or 0,
            language=tags.get("language"),
            title=tags.get("title"),
            forced=_to_int(disposition.get("forced")) == 1,
        )

    @property
    def display_title(self) -> str:
        """Title tag or empty string."""
        return self.title or ""

    def __str__(self) -> str:
        """Human-readable representation."""
        if self.type == StreamType.VIDEO:
            return f"{self.codec_name} {self.width}x{self.height}"
        lang_part = f" {self.language}" if self.language else ""
        title_part = f" ({self.title})" if self.title else ""
        forced_marker = " [FORCED]" if self.forced else ""
        return f"{self.type.value}: {self.codec_name}{lang_part}{title_part}{forced_marker}"


@dataclass(frozen=True)
class MediaInfo:
    """Read-only view of a probed media container."""

    streams: tuple[Stream, ...] = ()
    format: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_probe(cls, data: dict[str, Any]) -> "MediaInfo":
        """Build media information from a parsed ffprobe report.

        Args:
            data: Parsed JSON with top-level ``streams`` and ``format``

        Returns:
            MediaInfo instance

        Raises:
            ValueError: If the report has no ``streams`` list
        """
        streams = data.get("streams")
        if not isinstance(streams, list):
            raise ValueError("media information has no streams")

        return cls(
            streams=tuple(Stream.from_probe(s) for s in streams),
            format=dict(data.get("format") or {}),
        )

    def streams_of_type(self, stream_type: StreamType) -> list[tuple[int, Stream]]:
        """Return ``(track_number, stream)`` pairs for one stream type.

        Track numbers are 1-based and count only streams of that type, in
        the order ffprobe reported them.
        """
        matching = [s for s in self.streams if s.type == stream_type]
        return list(enumerate(matching, 1))

    @property
    def video(self) -> Optional[Stream]:
        """First video stream, if any."""
        return next((s for s in self.streams if s.type == StreamType.VIDEO), None)
