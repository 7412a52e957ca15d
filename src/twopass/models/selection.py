"""Track selection criteria and resolved tracks."""

import re
from dataclasses import dataclass
from typing import Union

from twopass.exceptions import UsageError
from twopass.models.media import Stream

ALL_LANGUAGES = "all"

TRACK_PATTERN = re.compile(r"^[0-9]+$")
_LANGUAGE_PATTERN = re.compile(r"^[a-z]{3}$")


@dataclass(frozen=True)
class ByTrack:
    """Select a single track by its 1-based per-type number."""

    number: int

    def matches(self, track_number: int, stream: Stream) -> bool:
        return track_number == self.number

    def __str__(self) -> str:
        return str(self.number)


@dataclass(frozen=True)
class ByLanguage:
    """Select every track tagged with a language, or every track for ``all``."""

    code: str

    def matches(self, track_number: int, stream: Stream) -> bool:
        return self.code == ALL_LANGUAGES or stream.language == self.code

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True)
class ByTitle:
    """Select every track whose title matches a case-insensitive pattern."""

    pattern: str

    def matches(self, track_number: int, stream: Stream) -> bool:
        return re.search(self.pattern, stream.display_title, re.IGNORECASE) is not None

    def __str__(self) -> str:
        return self.pattern


Selection = Union[ByTrack, ByLanguage, ByTitle]


def parse_selection(value: str) -> Selection:
    """Parse a raw ``--add-audio``/``--add-subtitle`` argument.

    Digits select a track number, three lowercase letters select a language
    code (``all`` included) and anything else is a title pattern.

    Args:
        value: Raw command-line value

    Returns:
        Selection variant

    Raises:
        UsageError: If a title pattern is not a valid regular expression
    """
    if TRACK_PATTERN.match(value):
        return ByTrack(int(value))

    if _LANGUAGE_PATTERN.match(value):
        return ByLanguage(value)

    try:
        re.compile(value, re.IGNORECASE)
    except re.error as e:
        raise UsageError(f"invalid title pattern: {value} ({e})") from e

    return ByTitle(value)


def unique_selections(selections: list[Selection]) -> list[Selection]:
    """Drop repeated selections, keeping the first occurrence."""
    return list(dict.fromkeys(selections))


@dataclass(frozen=True)
class ResolvedTrack:
    """A stream matched by a selection, with its per-type track number."""

    index: int
    stream: Stream

    def __str__(self) -> str:
        return f"Track {self.index}: {self.stream}"
