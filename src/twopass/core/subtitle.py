"""Subtitle burn-in and track inclusion decisions."""

from typing import Optional

from twopass.config import AUTO, RunOptions
from twopass.core.audio import escape_name
from twopass.core.selector import TrackResolver, deduplicate
from twopass.models.media import MediaInfo, StreamType
from twopass.models.options import EngineFlag
from twopass.models.plan import SubtitleMode, SubtitlePlan, SubtitleTrackPlan
from twopass.utils.logger import get_logger

logger = get_logger(__name__)

# Bitmap formats that can be burned into the video
IMAGE_SUBTITLE_CODECS = frozenset({"hdmv_pgs_subtitle", "dvd_subtitle"})


class SubtitleOptionCompiler:
    """Choose subtitles to burn, flag as default, or carry as tracks."""

    def __init__(self, resolver: Optional[TrackResolver] = None):
        self.resolver = resolver or TrackResolver()

    def compute(self, media: MediaInfo, options: RunOptions) -> Optional[SubtitlePlan]:
        """Compile the subtitle plan for a file.

        Selected subtitle tracks take precedence over burning. Without any,
        the burn target (automatic or numbered) picks a single track.

        Args:
            media: Probed media information
            options: Run options

        Returns:
            SubtitlePlan, or None when subtitles are overridden or nothing
            matched
        """
        if options.extras.has_any(
            EngineFlag.SUBTITLE, EngineFlag.ALL_SUBTITLES, EngineFlag.FIRST_SUBTITLE
        ):
            logger.debug("Subtitle selection overridden by extra options")
            return None

        if options.subtitle_selections:
            return self._include_tracks(media, options)

        if options.burn_subtitle is not None:
            return self._burn(media, options)

        return None

    def _burn(self, media: MediaInfo, options: RunOptions) -> Optional[SubtitlePlan]:
        if options.burn_subtitle == AUTO:
            track = self.resolver.first_forced(media)
        else:
            track = self.resolver.by_number(media, StreamType.SUBTITLE, options.burn_subtitle)

        if track is None:
            logger.debug("No subtitle to burn", target=options.burn_subtitle)
            return None

        if track.stream.codec_name in IMAGE_SUBTITLE_CODECS:
            mode = SubtitleMode.BURN
        else:
            mode = SubtitleMode.DEFAULT

        logger.debug(
            "Subtitle planned",
            track=track.index,
            codec=track.stream.codec_name,
            mode=mode.value,
        )

        return SubtitlePlan(
            mode=mode,
            tracks=(SubtitleTrackPlan(index=track.index, forced=track.stream.forced),),
        )

    def _include_tracks(self, media: MediaInfo, options: RunOptions) -> Optional[SubtitlePlan]:
        forced = self.resolver.first_forced(media)
        selected = self.resolver.resolve(options.subtitle_selections, media, StreamType.SUBTITLE)
        tracks = deduplicate(([forced] if forced else []) + selected)

        if not tracks:
            logger.warning(
                "No subtitle tracks matched",
                selections=[str(s) for s in options.subtitle_selections],
            )
            return None

        with_names = EngineFlag.SUBNAME not in options.extras
        plans = tuple(
            SubtitleTrackPlan(
                index=track.index,
                name=escape_name(track.stream.display_title) if with_names else "",
                forced=track.stream.forced,
            )
            for track in tracks
        )
        default_index = next((p.index for p in plans if p.forced), None)

        logger.debug(
            "Subtitle tracks planned",
            tracks=[p.index for p in plans],
            default=default_index,
        )

        return SubtitlePlan(
            mode=SubtitleMode.TRACKS,
            tracks=plans,
            default_index=default_index,
            include_names=with_names,
        )
