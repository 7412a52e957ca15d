"""Shared pytest fixtures for twopass tests."""

import pytest

from twopass.config import RunOptions
from twopass.models.media import MediaInfo


def video_stream(width=1920, height=1080, codec="h264", color_space="bt709", frame_rate="24000/1001"):
    """ffprobe-shaped video stream."""
    stream = {
        "codec_type": "video",
        "codec_name": codec,
        "width": width,
        "height": height,
        "avg_frame_rate": frame_rate,
    }
    if color_space is not None:
        stream["color_space"] = color_space
    return stream


def audio_stream(codec="aac", channels=2, language="eng", title=None):
    """ffprobe-shaped audio stream."""
    tags = {"language": language}
    if title is not None:
        tags["title"] = title
    return {
        "codec_type": "audio",
        "codec_name": codec,
        "channels": channels,
        "tags": tags,
        "disposition": {"default": 0, "forced": 0},
    }


def subtitle_stream(codec="subrip", language="eng", title=None, forced=False):
    """ffprobe-shaped subtitle stream."""
    tags = {"language": language}
    if title is not None:
        tags["title"] = title
    return {
        "codec_type": "subtitle",
        "codec_name": codec,
        "tags": tags,
        "disposition": {"default": 0, "forced": 1 if forced else 0},
    }


def make_media(*streams):
    """Build MediaInfo from ffprobe-shaped streams."""
    return MediaInfo.from_probe(
        {
            "streams": [dict(s, index=i) for i, s in enumerate(streams)],
            "format": {"format_name": "matroska,webm"},
        }
    )


@pytest.fixture
def default_options():
    """Run options with command-line defaults."""
    return RunOptions()


@pytest.fixture
def movie_probe():
    """ffprobe report for a 1080p movie with one forced PGS subtitle."""
    return {
        "streams": [
            dict(video_stream(), index=0),
            dict(audio_stream(codec="ac3", channels=6, title="Surround 5.1"), index=1),
            dict(audio_stream(codec="aac", channels=2, title="Commentary, Director"), index=2),
            dict(subtitle_stream(codec="hdmv_pgs_subtitle", title="Forced", forced=True), index=3),
            dict(subtitle_stream(codec="subrip", language="fre", title="French"), index=4),
        ],
        "format": {"format_name": "matroska,webm", "duration": "5400.0"},
    }


@pytest.fixture
def movie_media(movie_probe):
    """MediaInfo for the movie probe."""
    return MediaInfo.from_probe(movie_probe)


@pytest.fixture
def multilingual_media():
    """Media with several audio and subtitle languages."""
    return make_media(
        video_stream(width=1280, height=720),
        audio_stream(codec="aac", channels=2, language="eng", title="English"),
        audio_stream(codec="ac3", channels=6, language="jpn", title="Japanese"),
        audio_stream(codec="mp3", channels=1, language="eng", title="English Commentary"),
        subtitle_stream(language="eng", title="English"),
        subtitle_stream(codec="dvd_subtitle", language="jpn", title="Signs", forced=True),
        subtitle_stream(language="jpn", title="Full Dialogue"),
    )
