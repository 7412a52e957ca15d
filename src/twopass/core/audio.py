"""Audio track encoder decisions."""

from typing import Optional

from twopass.config import RunOptions
from twopass.core.selector import TrackResolver
from twopass.models.media import MediaInfo, StreamType
from twopass.models.options import EngineFlag
from twopass.models.plan import AudioPlan, AudioTrackPlan
from twopass.models.selection import ResolvedTrack
from twopass.utils.logger import get_logger

logger = get_logger(__name__)

COPY = "copy"
AC3_ENCODER = "ac3"

# (bitrate kbps, mixdown) by source channel count
MONO = ("80", "mono")
STEREO = ("128", "stereo")
SURROUND = ("384", "5point1")
AC3_SURROUND_BITRATE = "448"

MAX_AAC_COPY_CHANNELS = 6


def escape_name(title: str) -> str:
    """Escape commas so a title survives HandBrakeCLI's list splitting."""
    return title.replace(",", '","')


class AudioOptionCompiler:
    """Decide encoder, bitrate, mixdown and name for selected audio tracks."""

    def __init__(self, resolver: Optional[TrackResolver] = None):
        self.resolver = resolver or TrackResolver()

    def compute(self, media: MediaInfo, options: RunOptions) -> Optional[AudioPlan]:
        """Compile the audio plan for a file.

        Args:
            media: Probed media information
            options: Run options

        Returns:
            AudioPlan, or None when audio is overridden or nothing matched
        """
        extras = options.extras

        if extras.has_any(EngineFlag.AUDIO, EngineFlag.ALL_AUDIO, EngineFlag.FIRST_AUDIO):
            logger.debug("Audio selection overridden by extra options")
            return None

        tracks = self.resolver.resolve(options.audio_selections, media, StreamType.AUDIO)
        if not tracks:
            logger.warning(
                "No audio tracks matched",
                selections=[str(s) for s in options.audio_selections],
            )
            return None

        override_encoder = EngineFlag.AENCODER in extras
        with_names = len(tracks) > 1 and EngineFlag.ANAME not in extras

        plans = tuple(
            self._plan_track(track, options, override_encoder, with_names) for track in tracks
        )

        for plan in plans:
            logger.debug(
                "Audio track planned",
                track=plan.index,
                encoder=plan.encoder,
                bitrate=plan.bitrate or None,
                mixdown=plan.mixdown or None,
            )

        return AudioPlan(
            tracks=plans,
            include_encoders=not override_encoder,
            include_bitrates=not override_encoder and EngineFlag.AB not in extras,
            include_mixdowns=not override_encoder and EngineFlag.MIXDOWN not in extras,
            include_names=with_names,
        )

    def _plan_track(
        self,
        track: ResolvedTrack,
        options: RunOptions,
        override_encoder: bool,
        with_names: bool,
    ) -> AudioTrackPlan:
        name = ""
        if with_names and track.index != 1:
            name = escape_name(track.stream.display_title)

        if override_encoder:
            return AudioTrackPlan(index=track.index, name=name)

        encoder, bitrate, mixdown = self.choose_encoder(
            track.stream.codec_name,
            track.stream.channels,
            options.aac_encoder,
            options.ac3_surround,
        )
        return AudioTrackPlan(
            index=track.index, encoder=encoder, bitrate=bitrate, mixdown=mixdown, name=name
        )

    @staticmethod
    def choose_encoder(
        codec_name: str, channels: int, aac_encoder: str, ac3_surround: bool
    ) -> tuple[str, str, str]:
        """Return ``(encoder, bitrate, mixdown)`` for one source track.

        AAC with up to six channels is passed through, as is multichannel
        AC-3 when AC-3 surround output is enabled. Everything else is
        transcoded; an unknown channel count is treated as surround.
        """
        if (codec_name == "aac" and channels <= MAX_AAC_COPY_CHANNELS) or (
            ac3_surround and codec_name == "ac3" and channels > 2
        ):
            return COPY, "", ""

        if channels == 1:
            return (aac_encoder, *MONO)
        if channels == 2:
            return (aac_encoder, *STEREO)
        if ac3_surround:
            return AC3_ENCODER, AC3_SURROUND_BITRATE, SURROUND[1]
        return (aac_encoder, *SURROUND)
