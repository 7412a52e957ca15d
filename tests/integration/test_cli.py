"""Integration tests for the twopass-transcode command line."""

import shlex
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from twopass import __version__
from twopass.cli import cli, scan_subtitle_events
from twopass.exceptions import ProbeError, TranscodeError


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def prober(movie_media):
    with patch("twopass.core.pipeline.MediaProber") as prober_class:
        prober = prober_class.return_value
        prober.probe.return_value = movie_media
        yield prober


@pytest.fixture
def executor():
    with patch("twopass.core.pipeline.HandBrakeExecutor") as executor_class:
        yield executor_class.return_value


@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def dry_run_args(result):
    """Arguments of the command line printed by a dry run."""
    return shlex.split(result.stdout.strip())


class TestDryRun:
    """Test command compilation through the CLI."""

    def test_default_command(self, runner, prober, executor):
        result = runner.invoke(cli, ["--dry-run", "Movie (2001).m2ts"])

        assert result.exit_code == 0, result.output
        args = dry_run_args(result)
        assert args[:5] == ["HandBrakeCLI", "--input", "Movie (2001).m2ts", "--output", "Movie (2001).mkv"]
        assert args[-2:] == ["--encopts", "vbv-maxrate=15000:vbv-bufsize=15000"]
        assert "--subtitle-burned" in args
        assert "Scanning media..." in result.stderr
        assert "Command line:" in result.stderr
        executor.run.assert_not_called()

    def test_bitrate_preview_and_audio_options(self, runner, prober, executor):
        result = runner.invoke(
            cli,
            ["-n", "-p", "-b", "100", "--add-audio", "Commentary", "--ac3-surround",
             "--aac-encoder", "fdk_aac", "movie.mkv"],
        )

        assert result.exit_code == 0, result.output
        args = dry_run_args(result)
        assert args[args.index("--vb") + 1] == "4000"
        assert "--multi-pass" not in args
        assert args[args.index("--audio") + 1] == "1,2"
        assert args[args.index("--aencoder") + 1] == "copy,copy"
        assert args[args.index("--aname") + 1] == ',Commentary"," Director'

    def test_extras_composed_and_appended(self, runner, prober, executor):
        result = runner.invoke(
            cli, ["-n", "-x", "encopts=ref=4", "-x", "encoder-preset=slow", "movie.mkv"]
        )

        assert result.exit_code == 0, result.output
        args = dry_run_args(result)
        assert args[-4:] == [
            "--encopts", "vbv-maxrate=15000:vbv-bufsize=15000:ref=4",
            "--encoder-preset", "slow",
        ]

    def test_add_subtitle_after_burn_wins(self, runner, prober, executor):
        result = runner.invoke(
            cli, ["-n", "--burn-subtitle", "1", "--add-subtitle", "fre", "movie.mkv"]
        )

        args = dry_run_args(result)
        assert args[args.index("--subtitle") + 1] == "1,2"
        assert "--subtitle-burned" not in args

    def test_burn_after_add_subtitle_wins(self, runner, prober, executor):
        result = runner.invoke(
            cli, ["-n", "--add-subtitle", "fre", "--burn-subtitle=2", "movie.mkv"]
        )

        args = dry_run_args(result)
        assert args[args.index("--subtitle") :][:3] == ["--subtitle", "2", "--subtitle-default"]

    def test_burn_none(self, runner, prober, executor):
        result = runner.invoke(cli, ["-n", "--burn-subtitle", "none", "movie.mkv"])

        assert "--subtitle" not in dry_run_args(result)

    def test_scan_mode(self, runner, prober, executor):
        result = runner.invoke(cli, ["-n", "-x", "scan", "movie.mkv"])

        assert dry_run_args(result) == ["HandBrakeCLI", "--input", "movie.mkv", "--scan"]
        assert "Scanning media..." not in result.stderr
        prober.probe.assert_not_called()


class TestUsageErrors:
    """Usage errors exit with status 2 before anything runs."""

    @pytest.mark.parametrize(
        "args,message",
        [
            ([], "Missing argument"),
            (["--aac-encoder", "faac", "movie.mkv"], "faac"),
            (["--burn-subtitle", "auto", "movie.mkv"], "invalid burn subtitle argument"),
            (["--burn-subtitle", "²", "movie.mkv"], "invalid burn subtitle argument"),
            (["-x", "output=x.mkv", "movie.mkv"], "unsupported HandBrakeCLI option name"),
            (["-x", "-bad", "movie.mkv"], "invalid HandBrakeCLI option"),
            (["-x", "encopts", "movie.mkv"], "invalid HandBrakeCLI option usage"),
            (["--add-audio", "Dir(", "movie.mkv"], "invalid title pattern"),
            (["-b", "0", "movie.mkv"], "bitrate"),
        ],
    )
    def test_usage_error(self, runner, prober, executor, args, message):
        result = runner.invoke(cli, args)

        assert result.exit_code == 2
        assert message in result.stderr
        prober.probe.assert_not_called()
        executor.run.assert_not_called()

    def test_invalid_config(self, runner, prober, executor, workdir):
        config = workdir / "config.yaml"
        config.write_text("logging:\n  format: xml\n")

        result = runner.invoke(cli, ["-c", str(config), "movie.mkv"])

        assert result.exit_code == 2
        assert "Error loading configuration" in result.stderr


class TestExecution:
    """Test engine execution and failure handling."""

    def test_transcodes_each_file(self, runner, prober, executor):
        result = runner.invoke(cli, ["a.m2ts", "b.m2ts"])

        assert result.exit_code == 0, result.output
        assert executor.run.call_count == 2
        assert result.stdout == ""
        assert result.stderr.count("Elapsed time: ") == 2

    def test_existing_output_fails_file(self, runner, prober, executor, workdir):
        (workdir / "movie.mkv").write_text("existing")

        result = runner.invoke(cli, ["/media/movie.mkv"])

        assert result.exit_code == 1
        assert "output file already exists" in result.stderr
        assert "Transcoding..." not in result.stderr
        executor.run.assert_not_called()

    def test_probe_failure_continues_with_next_file(self, runner, prober, executor, movie_media):
        prober.probe.side_effect = [ProbeError("scanning media failed: bad.mkv"), movie_media]

        result = runner.invoke(cli, ["bad.mkv", "good.m2ts"])

        assert result.exit_code == 1
        assert "scanning media failed: bad.mkv" in result.stderr
        assert "1 of 2 file(s) failed" in result.stderr
        executor.run.assert_called_once()

    def test_engine_failure(self, runner, prober, executor):
        executor.run.side_effect = TranscodeError("transcoding failed with exit status 3")

        result = runner.invoke(cli, ["movie.m2ts"])

        assert result.exit_code == 1
        assert "exit status 3" in result.stderr

    def test_interrupt_aborts_batch(self, runner, prober, executor):
        executor.run.side_effect = KeyboardInterrupt()

        result = runner.invoke(cli, ["a.m2ts", "b.m2ts"])

        assert result.exit_code == 1
        executor.run.assert_called_once()


def test_version(runner):
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_scan_subtitle_events():
    args = ["-n", "--add-subtitle", "eng", "--burn-subtitle=3", "-x", "vfr", "--", "--add-subtitle"]

    assert scan_subtitle_events(args) == [("add", "eng"), ("burn", "3")]
