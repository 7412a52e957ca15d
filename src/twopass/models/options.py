"""Raw HandBrakeCLI options passed through with ``--extra``."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional, Union

from twopass.exceptions import UsageError

_EXTRA_PATTERN = re.compile(r"^([a-zA-Z][a-zA-Z0-9-]+)(?:=(.+))?$", re.DOTALL)

# Names that collide with the flags every generated command relies on
DENIED_NAMES = frozenset(
    {"help", "version", "json", "queue-import-file", "input", "output", "format", "encoder"}
)
_DENIED_PATTERNS = (re.compile(r"^preset"), re.compile(r"^encoder-[^-]+-list$"))


class EngineFlag(str, Enum):
    """HandBrakeCLI options whose presence changes the generated command."""

    SCAN = "scan"
    QUALITY = "quality"
    RATE = "rate"
    VFR = "vfr"
    CFR = "cfr"
    PFR = "pfr"
    CROP = "crop"
    CROP_MODE = "crop-mode"
    ENCOPTS = "encopts"
    AUDIO = "audio"
    ALL_AUDIO = "all-audio"
    FIRST_AUDIO = "first-audio"
    AENCODER = "aencoder"
    AB = "ab"
    MIXDOWN = "mixdown"
    ANAME = "aname"
    SUBTITLE = "subtitle"
    ALL_SUBTITLES = "all-subtitles"
    FIRST_SUBTITLE = "first-subtitle"
    SUBNAME = "subname"


# Options whose value is required for the composed form to make sense
_VALUE_REQUIRED = frozenset({EngineFlag.ENCOPTS.value})


def is_denied(name: str) -> bool:
    """Check whether an option name may not be passed through."""
    return name in DENIED_NAMES or any(p.match(name) for p in _DENIED_PATTERNS)


def parse_extra(raw: str) -> tuple[str, Optional[str]]:
    """Parse a single ``NAME[=VALUE]`` argument.

    Args:
        raw: Raw ``--extra`` value

    Returns:
        ``(name, value)`` tuple, value is None for bare flags

    Raises:
        UsageError: If the argument is malformed or the name is not allowed
    """
    match = _EXTRA_PATTERN.match(raw)
    if match is None:
        raise UsageError(f"invalid HandBrakeCLI option: {raw}")

    name, value = match.group(1), match.group(2)

    if is_denied(name):
        raise UsageError(f"unsupported HandBrakeCLI option name: {name}")

    if name in _VALUE_REQUIRED and value is None:
        raise UsageError(f"invalid HandBrakeCLI option usage: {name}")

    return name, value


@dataclass(frozen=True)
class ExtraOptions:
    """Ordered, validated mapping of option name to optional value.

    A repeated name keeps the position of its first occurrence and the value
    of its last one.
    """

    entries: tuple[tuple[str, Optional[str]], ...] = ()

    @classmethod
    def parse(cls, raw_values: Iterable[str]) -> "ExtraOptions":
        """Validate raw ``--extra`` values into an ExtraOptions instance."""
        merged: dict[str, Optional[str]] = {}
        for raw in raw_values:
            name, value = parse_extra(raw)
            merged[name] = value
        return cls(entries=tuple(merged.items()))

    def __contains__(self, name: Union[str, EngineFlag]) -> bool:
        key = name.value if isinstance(name, EngineFlag) else name
        return any(entry_name == key for entry_name, _ in self.entries)

    def __iter__(self) -> Iterator[tuple[str, Optional[str]]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def has_any(self, *flags: EngineFlag) -> bool:
        """True if at least one of the flags was supplied."""
        return any(flag in self for flag in flags)

    def get(self, name: Union[str, EngineFlag]) -> Optional[str]:
        """Value supplied for an option, None when absent or valueless."""
        key = name.value if isinstance(name, EngineFlag) else name
        for entry_name, value in self.entries:
            if entry_name == key:
                return value
        return None
