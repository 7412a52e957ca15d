"""Media probing using ffprobe."""

import json
import subprocess
from pathlib import Path

from twopass.exceptions import ProbeError
from twopass.models.media import MediaInfo
from twopass.utils.logger import get_logger

logger = get_logger(__name__)


class MediaProber:
    """Read stream and format information from a media file with ffprobe."""

    def __init__(self, ffprobe: str = "ffprobe", timeout_seconds: int = 60):
        """Initialize prober.

        Args:
            ffprobe: ffprobe executable name or path
            timeout_seconds: Maximum time for one ffprobe call
        """
        self.ffprobe = ffprobe
        self.timeout_seconds = timeout_seconds

    def build_command(self, file_path: Path) -> list[str]:
        return [
            self.ffprobe,
            "-loglevel",
            "quiet",
            "-show_streams",
            "-show_format",
            "-print_format",
            "json",
            str(file_path),
        ]

    def probe(self, file_path: Path) -> MediaInfo:
        """Probe a media file.

        Args:
            file_path: Path to media file

        Returns:
            MediaInfo describing every stream in the file

        Raises:
            ProbeError: If ffprobe fails or its output is not usable
        """
        logger.debug("Scanning media", file=str(file_path))

        try:
            result = subprocess.run(
                self.build_command(file_path),
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError as e:
            logger.error("ffprobe not found", executable=self.ffprobe)
            raise ProbeError(f"ffprobe not found: {self.ffprobe}", str(file_path)) from e
        except subprocess.TimeoutExpired as e:
            logger.error("ffprobe timeout", file=str(file_path), timeout=self.timeout_seconds)
            raise ProbeError(f"scanning media timed out: {file_path}", str(file_path)) from e
        except subprocess.CalledProcessError as e:
            logger.error(
                "ffprobe failed",
                file=str(file_path),
                returncode=e.returncode,
                stderr=e.stderr,
            )
            raise ProbeError(f"scanning media failed: {file_path}", str(file_path)) from e

        try:
            media = MediaInfo.from_probe(json.loads(result.stdout))
        except (json.JSONDecodeError, ValueError, AttributeError) as e:
            logger.error("Failed to parse ffprobe output", file=str(file_path), error=str(e))
            raise ProbeError(f"media information not found: {file_path}", str(file_path)) from e

        logger.debug(
            "Media scanned",
            file=str(file_path),
            streams=[str(s) for s in media.streams],
            format_name=media.format.get("format_name"),
        )

        return media
