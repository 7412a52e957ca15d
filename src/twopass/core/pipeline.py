"""Per-file transcoding pipeline."""

import time
from pathlib import Path
from typing import Optional

from twopass.config import Config, RunOptions
from twopass.core.audio import AudioOptionCompiler
from twopass.core.command import CommandAssembler, base_arguments, render
from twopass.core.executor import HandBrakeExecutor
from twopass.core.prober import MediaProber
from twopass.core.selector import TrackResolver
from twopass.core.subtitle import SubtitleOptionCompiler
from twopass.core.video import VideoProfileCalculator
from twopass.exceptions import TranscodeError
from twopass.models.options import EngineFlag
from twopass.models.plan import TranscodePlan
from twopass.utils.logger import get_logger

logger = get_logger(__name__)

OUTPUT_SUFFIX = ".mkv"


def output_path_for(input_path: Path, directory: Optional[Path] = None) -> Path:
    """Matroska output path in the working directory, named after the input."""
    return (directory or Path.cwd()) / f"{input_path.stem}{OUTPUT_SUFFIX}"


def format_elapsed(seconds: float) -> str:
    """Format a duration as HH:MM:SS."""
    seconds = int(seconds)
    return f"{seconds // 3600:02d}:{(seconds // 60) % 60:02d}:{seconds % 60:02d}"


class TranscodePipeline:
    """Orchestrates probing, option compilation and engine execution."""

    def __init__(
        self,
        config: Config,
        options: RunOptions,
        prober: Optional[MediaProber] = None,
        executor: Optional[HandBrakeExecutor] = None,
    ):
        """Initialize the pipeline.

        Args:
            config: Application configuration
            options: Run options shared by every input file
            prober: Media prober (defaults to ffprobe from config)
            executor: Engine executor
        """
        self.config = config
        self.options = options
        self.prober = prober or MediaProber(
            config.tools.ffprobe, timeout_seconds=config.tools.probe_timeout
        )
        self.executor = executor or HandBrakeExecutor()

        resolver = TrackResolver()
        self.video = VideoProfileCalculator()
        self.audio = AudioOptionCompiler(resolver)
        self.subtitle = SubtitleOptionCompiler(resolver)
        self.assembler = CommandAssembler()

    def plan(self, input_path: Path) -> TranscodePlan:
        """Build the engine invocation for one file.

        Pipeline steps:
        1. Scan mode shortcut (``--extra scan``), no probing
        2. Media probing
        3. Video, audio and subtitle option compilation
        4. Assembly with extra options and rendering

        Args:
            input_path: Path to the input file

        Returns:
            TranscodePlan for the file

        Raises:
            ProbeError: If the media cannot be probed
        """
        executable = self.config.tools.handbrake
        extras = self.options.extras

        if EngineFlag.SCAN in extras:
            arguments = self.assembler.scan(input_path, extras, executable)
            logger.info("Scan mode", file=str(input_path))
            return TranscodePlan(
                input_path=input_path, arguments=arguments, command_line=render(arguments)
            )

        output_path = output_path_for(input_path)
        media = self.prober.probe(input_path)

        video_plan = self.video.compute(media, self.options)
        audio_plan = self.audio.compute(media, self.options)
        subtitle_plan = self.subtitle.compute(media, self.options)

        arguments = self.assembler.assemble(
            base_arguments(input_path, Path(output_path.name), executable),
            video_plan,
            audio_plan,
            subtitle_plan,
            extras,
        )

        logger.info(
            "Command compiled",
            file=str(input_path),
            output=output_path.name,
            audio_tracks=len(audio_plan.tracks) if audio_plan else 0,
            subtitle_mode=subtitle_plan.mode.value if subtitle_plan else None,
        )

        return TranscodePlan(
            input_path=input_path,
            arguments=arguments,
            output_path=output_path,
            command_line=render(arguments),
        )

    def check_output(self, plan: TranscodePlan) -> None:
        """Refuse to overwrite an existing output file.

        Raises:
            TranscodeError: If the output already exists
        """
        if plan.output_path is not None and plan.output_path.exists():
            logger.error("Output file already exists", output=str(plan.output_path))
            raise TranscodeError(f"output file already exists: {plan.output_path.name}")

    def execute(self, plan: TranscodePlan) -> float:
        """Run the engine for a plan.

        Args:
            plan: Plan returned by :meth:`plan`

        Returns:
            Elapsed time in seconds

        Raises:
            TranscodeError: If the output already exists or the engine fails
        """
        self.check_output(plan)

        start_time = time.time()
        try:
            self.executor.run(plan.arguments)
        except TranscodeError as e:
            elapsed = time.time() - start_time
            raise TranscodeError(f"{e} (elapsed time: {format_elapsed(elapsed)})") from e

        elapsed = time.time() - start_time
        logger.info(
            "File transcoded",
            file=str(plan.input_path),
            duration_ms=int(elapsed * 1000),
        )
        return elapsed
