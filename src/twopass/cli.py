"""Command-line interface for twopass."""

import sys
from pathlib import Path

import click
import yaml

from twopass import __version__
from twopass.config import AAC_ENCODERS, Config, RunOptions, load_config, resolve_subtitle_events
from twopass.core.pipeline import TranscodePipeline, format_elapsed
from twopass.exceptions import ProbeError, TranscodeError, UsageError
from twopass.models.options import EngineFlag, ExtraOptions
from twopass.models.selection import TRACK_PATTERN, ByTrack, parse_selection
from twopass.utils.logger import get_logger, setup_logging

SUBTITLE_EVENTS = "twopass.subtitle_events"

_SUBTITLE_OPTIONS = {"--burn-subtitle": "burn", "--add-subtitle": "add"}


def scan_subtitle_events(args: list[str]) -> list[tuple[str, str]]:
    """Collect ``--burn-subtitle``/``--add-subtitle`` values in argument order."""
    events = []
    i = 0
    while i < len(args):
        token = args[i]
        if token == "--":
            break

        name, sep, value = token.partition("=")
        if name in _SUBTITLE_OPTIONS:
            if sep:
                events.append((_SUBTITLE_OPTIONS[name], value))
            elif i + 1 < len(args):
                events.append((_SUBTITLE_OPTIONS[name], args[i + 1]))
                i += 1
        i += 1
    return events


class TranscodeCommand(click.Command):
    """Command that remembers the order of subtitle options."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        ctx.meta[SUBTITLE_EVENTS] = scan_subtitle_events(args)
        return super().parse_args(ctx, args)


def _parse_selections(ctx, param, values):
    try:
        return tuple(parse_selection(v) for v in values)
    except UsageError as e:
        raise click.BadParameter(str(e), ctx=ctx, param=param) from e


def _validate_burn(ctx, param, values):
    for value in values:
        if value != "none" and not TRACK_PATTERN.match(value):
            raise click.BadParameter(f"invalid burn subtitle argument: {value}", ctx=ctx, param=param)
    return values


def _parse_extras(ctx, param, values):
    try:
        return ExtraOptions.parse(values)
    except UsageError as e:
        raise click.BadParameter(str(e), ctx=ctx, param=param) from e


def _load_config(config_path) -> Config:
    try:
        return load_config(config_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise click.BadParameter(f"Error loading configuration: {e}", param_hint="--config") from e


@click.command(cls=TranscodeCommand, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="twopass-transcode")
@click.option("--debug", is_flag=True, help="Increase diagnostic information.")
@click.option(
    "--dry-run", "-n", is_flag=True, help="Don't transcode, just show the HandBrakeCLI command."
)
@click.option("--preview", "-p", is_flag=True, help="Use single pass to preview two-pass output.")
@click.option(
    "--bitrate",
    "-b",
    type=click.IntRange(min=1),
    default=None,
    metavar="TARGET",
    help="Set video bitrate target (default: based on input).",
)
@click.option(
    "--add-audio",
    multiple=True,
    metavar="TRACK|LANGUAGE|STRING|all",
    callback=_parse_selections,
    help="Include audio track (default: 1). Can be used multiple times.",
)
@click.option(
    "--ac3-surround",
    is_flag=True,
    help="Use AC-3 format for more compatible surround audio.",
)
@click.option(
    "--aac-encoder",
    type=click.Choice(AAC_ENCODERS),
    default="av_aac",
    show_default=True,
    help="Select named AAC audio encoder.",
)
@click.option(
    "--burn-subtitle",
    multiple=True,
    metavar="TRACK|none",
    callback=_validate_burn,
    help="Burn subtitle track into video (default: automatic). "
    "Text-only subtitles are included, not burned.",
)
@click.option(
    "--add-subtitle",
    multiple=True,
    metavar="TRACK|LANGUAGE|STRING|all",
    callback=_parse_selections,
    help="Include subtitle track (disables burning). Can be used multiple times.",
)
@click.option(
    "--extra",
    "-x",
    multiple=True,
    metavar="NAME[=VALUE]",
    callback=_parse_extras,
    help="Add HandBrakeCLI option by name or name with value.",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (defaults to built-in defaults).",
)
@click.argument("files", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.pass_context
def cli(
    ctx,
    files,
    debug,
    dry_run,
    preview,
    bitrate,
    add_audio,
    ac3_surround,
    aac_encoder,
    burn_subtitle,
    add_subtitle,
    extra,
    config,
):
    """Transcode essential media tracks into a smaller, more portable format.

    Creates a Matroska `.mkv` file in the current working directory with
    8-bit H.264 video and multichannel AAC audio. Forced subtitles are
    automatically burned or included.

    Requires `HandBrakeCLI` and `ffprobe`.
    """
    cfg = _load_config(config)
    if debug:
        cfg = cfg.model_copy(update={"logging": cfg.logging.model_copy(update={"level": "debug"})})
    setup_logging(cfg.logging)
    logger = get_logger(__name__)

    raw_events = ctx.meta.get(SUBTITLE_EVENTS)
    if raw_events:
        events = [
            (kind, value if kind == "burn" else parse_selection(value))
            for kind, value in raw_events
        ]
    else:
        # Order unknown, e.g. when invoked programmatically
        events = [("burn", value) for value in burn_subtitle]
        events += [("add", selection) for selection in add_subtitle]
    burn_target, subtitle_selections = resolve_subtitle_events(events)

    options = RunOptions(
        debug=debug,
        dry_run=dry_run,
        preview=preview,
        bitrate=bitrate,
        audio_selections=(ByTrack(1), *add_audio),
        ac3_surround=ac3_surround,
        aac_encoder=aac_encoder,
        burn_subtitle=burn_target,
        subtitle_selections=subtitle_selections,
        extras=extra,
    )
    logger.debug(
        "Run options",
        audio=[str(s) for s in options.audio_selections],
        burn_subtitle=options.burn_subtitle,
        subtitles=[str(s) for s in options.subtitle_selections],
        extras=list(options.extras),
    )

    pipeline = TranscodePipeline(cfg, options)
    failures = 0

    try:
        for file in files:
            if not process_file(pipeline, file, options):
                failures += 1
    except KeyboardInterrupt:
        click.echo("", err=True)
        sys.exit(1)

    if failures:
        if len(files) > 1:
            click.secho(f"✗ {failures} of {len(files)} file(s) failed", fg="red", err=True)
        sys.exit(1)


def process_file(pipeline: TranscodePipeline, file: Path, options: RunOptions) -> bool:
    """Plan and run (or show) the transcode of one file.

    Returns:
        True on success, False if the file failed
    """
    if EngineFlag.SCAN not in options.extras:
        click.echo("Scanning media...", err=True)

    try:
        plan = pipeline.plan(file)
    except ProbeError as e:
        click.secho(f"✗ {file.name}: {e}", fg="red", err=True)
        return False

    click.echo("Command line:", err=True)

    if options.dry_run:
        click.echo(plan.command_line)
        return True

    click.echo(plan.command_line, err=True)

    try:
        pipeline.check_output(plan)
        if not plan.is_scan:
            click.echo("Transcoding...", err=True)
        elapsed = pipeline.execute(plan)
    except TranscodeError as e:
        click.secho(f"✗ {file.name}: {e}", fg="red", err=True)
        return False

    click.echo(f"\nElapsed time: {format_elapsed(elapsed)}\n", err=True)
    return True


def main():
    """Entry point for the CLI."""
    cli(prog_name="twopass-transcode")


if __name__ == "__main__":
    main()
