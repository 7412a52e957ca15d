"""Video bitrate and rate-control profile calculation."""

from typing import Optional

from twopass.config import RunOptions
from twopass.models.media import MediaInfo
from twopass.models.options import EngineFlag
from twopass.models.plan import VideoPlan
from twopass.utils.logger import get_logger

logger = get_logger(__name__)

VIDEO_ENCODER = "x264"

# Bitrate targets in kbps, widest first
HD_BITRATE = 5000
ENHANCED_BITRATE = 2500
STANDARD_BITRATE = 1250

MAX_WIDTH = 1920
MAX_HEIGHT = 1080
STANDARD_COLOR_SPACE = "bt709"

# Rate-control buffer size as a multiple of the bitrate target
VBV_MULTIPLIER = 3

MIN_OVERRIDE_RATIO = 0.8
MAX_OVERRIDE_RATIO = 1.6

TELECINE_CODEC = "mpeg2video"
TELECINE_FRAME_RATE = "30000/1001"
MAX_FRAME_RATE = "60"


def bitrate_tier(width: int, height: int) -> int:
    """Return the target video bitrate in kbps for a frame size.

    Frames exactly 1280x720 or 720x576 fall into the lower tier.
    """
    if width > 1280 or height > 720:
        return HD_BITRATE
    if width > 720 or height > 576:
        return ENHANCED_BITRATE
    return STANDARD_BITRATE


def clamp_bitrate(tier: int, override: Optional[int]) -> int:
    """Clamp a user bitrate override to 80%-160% of the tier."""
    if override is None:
        return tier
    return min(max(override, int(tier * MIN_OVERRIDE_RATIO)), int(tier * MAX_OVERRIDE_RATIO))


class VideoProfileCalculator:
    """Derive video encoder options from the first video stream."""

    def compute(self, media: MediaInfo, options: RunOptions) -> VideoPlan:
        """Compute video options and rate-control buffer size.

        Args:
            media: Probed media information
            options: Run options

        Returns:
            VideoPlan, empty when the media has no video stream
        """
        video = media.video
        if video is None:
            logger.info("No video stream found")
            return VideoPlan()

        extras = options.extras
        args = ["--encoder", VIDEO_ENCODER]
        tier = bitrate_tier(video.width, video.height)

        if video.width > MAX_WIDTH or video.height > MAX_HEIGHT:
            args += [
                "--maxWidth", str(MAX_WIDTH),
                "--maxHeight", str(MAX_HEIGHT),
                "--loose-anamorphic",
            ]

            if (video.color_space or STANDARD_COLOR_SPACE) != STANDARD_COLOR_SPACE:
                args += ["--colorspace", STANDARD_COLOR_SPACE]

        vbv_size = tier * VBV_MULTIPLIER
        bitrate = None

        if EngineFlag.QUALITY not in extras:
            bitrate = clamp_bitrate(tier, options.bitrate)
            args += ["--vb", str(bitrate)]

            if not options.preview:
                args += ["--multi-pass", "--turbo"]

        if not extras.has_any(EngineFlag.RATE, EngineFlag.VFR, EngineFlag.CFR, EngineFlag.PFR):
            if video.codec_name == TELECINE_CODEC and video.avg_frame_rate == TELECINE_FRAME_RATE:
                args += ["--rate", "29.97", "--cfr"]
            else:
                args += ["--rate", MAX_FRAME_RATE]

        if not extras.has_any(EngineFlag.CROP, EngineFlag.CROP_MODE):
            args += ["--crop-mode", "conservative"]

        logger.debug(
            "Video profile computed",
            resolution=f"{video.width}x{video.height}",
            tier=tier,
            bitrate=bitrate,
            vbv_size=vbv_size,
            two_pass=bitrate is not None and not options.preview,
        )

        return VideoPlan(options=tuple(args), vbv_size=vbv_size, bitrate=bitrate)
