"""Resolve track selections against probed media."""

from typing import Iterable, Optional

from twopass.models.media import MediaInfo, StreamType
from twopass.models.selection import ResolvedTrack, Selection
from twopass.utils.logger import get_logger

logger = get_logger(__name__)


class TrackResolver:
    """Resolve selection criteria into de-duplicated per-type tracks."""

    def resolve(
        self,
        selections: Iterable[Selection],
        media: MediaInfo,
        stream_type: StreamType,
    ) -> list[ResolvedTrack]:
        """Resolve selections against the streams of one type.

        Matches from every selection are concatenated in selection order, then
        duplicates are removed keeping the first position. A selection that
        matches nothing contributes nothing.

        Args:
            selections: Ordered selection criteria
            media: Probed media information
            stream_type: Stream type to select from

        Returns:
            List of resolved tracks, possibly empty
        """
        candidates = media.streams_of_type(stream_type)
        matched: list[ResolvedTrack] = []

        for selection in selections:
            found = [
                ResolvedTrack(index=number, stream=stream)
                for number, stream in candidates
                if selection.matches(number, stream)
            ]

            if not found:
                logger.debug(
                    "Selection matched no tracks",
                    stream_type=stream_type.value,
                    selection=str(selection),
                )

            matched.extend(found)

        return deduplicate(matched)

    def first_forced(self, media: MediaInfo) -> Optional[ResolvedTrack]:
        """Return the first subtitle track flagged as forced, if any."""
        for number, stream in media.streams_of_type(StreamType.SUBTITLE):
            if stream.forced:
                return ResolvedTrack(index=number, stream=stream)
        return None

    def by_number(
        self, media: MediaInfo, stream_type: StreamType, number: int
    ) -> Optional[ResolvedTrack]:
        """Return the track with the given per-type number, if any."""
        for candidate, stream in media.streams_of_type(stream_type):
            if candidate == number:
                return ResolvedTrack(index=candidate, stream=stream)
        return None


def deduplicate(tracks: Iterable[ResolvedTrack]) -> list[ResolvedTrack]:
    """Remove tracks with a repeated index, keeping first-seen order."""
    seen: set[int] = set()
    unique = []
    for track in tracks:
        if track.index in seen:
            continue
        seen.add(track.index)
        unique.append(track)
    return unique
