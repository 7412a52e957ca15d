"""HandBrakeCLI argument assembly and command-line rendering."""

import re
import sys
from pathlib import Path
from typing import Iterable, Optional, Sequence

from twopass.models.options import EngineFlag, ExtraOptions
from twopass.models.plan import AudioPlan, SubtitleMode, SubtitlePlan, VideoPlan

HANDBRAKE = "HandBrakeCLI"

# Characters left unescaped on POSIX shells
_UNSAFE_CHARS = re.compile(r"([^A-Za-z0-9_\-.,:/@\n])")
_WINDOWS_QUOTE = re.compile(r'(\\*)"')
_WINDOWS_TRAILING_BACKSLASHES = re.compile(r"(\\+)\Z")
_WHITESPACE = re.compile(r"\s")


def base_arguments(
    input_path: Path, output_path: Path, executable: str = HANDBRAKE
) -> list[str]:
    """Executable plus input and output options."""
    return [executable, "--input", str(input_path), "--output", str(output_path)]


def audio_arguments(plan: Optional[AudioPlan]) -> list[str]:
    """Serialize per-track audio plans into comma-joined engine options."""
    if plan is None or not plan.tracks:
        return []

    args = ["--audio", ",".join(str(t.index) for t in plan.tracks)]

    if plan.include_encoders:
        args += ["--aencoder", ",".join(t.encoder or "" for t in plan.tracks)]

        bitrates = ",".join(t.bitrate for t in plan.tracks)
        if bitrates and plan.include_bitrates:
            args += ["--ab", bitrates]

        mixdowns = ",".join(t.mixdown for t in plan.tracks)
        if mixdowns and plan.include_mixdowns:
            args += ["--mixdown", mixdowns]

    if plan.include_names:
        args += ["--aname", ",".join(t.name for t in plan.tracks)]

    return args


def subtitle_arguments(plan: Optional[SubtitlePlan]) -> list[str]:
    """Serialize a subtitle plan into engine options."""
    if plan is None or not plan.tracks:
        return []

    if plan.mode == SubtitleMode.BURN:
        return ["--subtitle", str(plan.tracks[0].index), "--subtitle-burned"]

    if plan.mode == SubtitleMode.DEFAULT:
        return ["--subtitle", str(plan.tracks[0].index), "--subtitle-default"]

    args = ["--subtitle", ",".join(str(t.index) for t in plan.tracks)]

    if plan.default_index is not None:
        args += ["--subtitle-default", str(plan.default_index)]

    if plan.include_names:
        args += ["--subname", ",".join(t.name for t in plan.tracks)]

    return args


def rate_control_options(vbv_size: int) -> str:
    """x264 rate-control buffer settings for ``--encopts``."""
    return f"vbv-maxrate={vbv_size}:vbv-bufsize={vbv_size}"


class CommandAssembler:
    """Merge compiled options and raw extras into one argument list."""

    def assemble(
        self,
        base: Sequence[str],
        video: VideoPlan,
        audio: Optional[AudioPlan],
        subtitle: Optional[SubtitlePlan],
        extras: ExtraOptions,
    ) -> list[str]:
        """Build the complete HandBrakeCLI argument list.

        Base, video, audio and subtitle options come first in that order,
        followed by the extra options as supplied. A user ``encopts`` value is
        appended to the computed rate-control settings instead of replacing
        them; otherwise the settings are added as a final ``--encopts``.

        Args:
            base: Executable, input and output arguments
            video: Video plan
            audio: Audio plan or None
            subtitle: Subtitle plan or None
            extras: Validated extra options

        Returns:
            Ordered argument list
        """
        args = [
            *base,
            *video.options,
            *audio_arguments(audio),
            *subtitle_arguments(subtitle),
        ]

        encoder_options = rate_control_options(video.vbv_size) if video.vbv_size else None

        for name, value in extras:
            args.append(f"--{name}")

            if name == EngineFlag.ENCOPTS.value and encoder_options is not None:
                args.append(f"{encoder_options}:{value}")
                encoder_options = None
            elif value is not None:
                args.append(value)

        if encoder_options is not None:
            args += ["--encopts", encoder_options]

        return args

    def scan(self, input_path: Path, extras: ExtraOptions, executable: str = HANDBRAKE) -> list[str]:
        """Build a bare HandBrakeCLI scan command with every extra option."""
        args = [executable, "--input", str(input_path)]
        for name, value in extras:
            args.append(f"--{name}")
            if value is not None:
                args.append(value)
        return args


def is_windows(platform: Optional[str] = None) -> bool:
    """True for native Windows, where cmd.exe quoting rules apply."""
    platform = sys.platform if platform is None else platform
    return platform.startswith("win")


def escape_argument(arg: str, platform: Optional[str] = None) -> str:
    """Escape one argument for display or pasting into a shell.

    Args:
        arg: Raw argument
        platform: ``sys.platform`` style name, defaults to the current one

    Returns:
        Escaped argument
    """
    if not arg:
        return '""'

    if is_windows(platform):
        arg = _WINDOWS_QUOTE.sub(lambda m: "\\" * (len(m.group(1)) * 2) + '\\"', arg)

        if _WHITESPACE.search(arg):
            arg = _WINDOWS_TRAILING_BACKSLASHES.sub(lambda m: "\\" * (len(m.group(1)) * 2), arg)
            arg = f'"{arg}"'

        return arg

    arg = _UNSAFE_CHARS.sub(r"\\\1", arg)
    return arg.replace("\n", "'\n'")


def render(args: Iterable[str], platform: Optional[str] = None) -> str:
    """Render an argument list as a single space-separated command line."""
    return " ".join(escape_argument(arg, platform) for arg in args)
