"""Unit tests for the subtitle option compiler."""

import pytest

from conftest import make_media, subtitle_stream, video_stream
from twopass.config import RunOptions
from twopass.core.command import subtitle_arguments
from twopass.core.subtitle import SubtitleOptionCompiler
from twopass.models.options import ExtraOptions
from twopass.models.plan import SubtitleMode
from twopass.models.selection import ByLanguage, ByTitle, ByTrack


def compute(media, **kwargs):
    return SubtitleOptionCompiler().compute(media, RunOptions(**kwargs))


class TestBurnMode:
    """Test automatic and numbered burn targets."""

    def test_forced_image_subtitle_burned(self, movie_media):
        plan = compute(movie_media)

        assert plan.mode == SubtitleMode.BURN
        assert subtitle_arguments(plan) == ["--subtitle", "1", "--subtitle-burned"]

    def test_forced_text_subtitle_flagged_default(self):
        media = make_media(
            video_stream(),
            subtitle_stream(language="eng"),
            subtitle_stream(codec="subrip", forced=True),
        )

        plan = compute(media)

        assert plan.mode == SubtitleMode.DEFAULT
        assert subtitle_arguments(plan) == ["--subtitle", "2", "--subtitle-default"]

    def test_no_forced_subtitle(self):
        media = make_media(video_stream(), subtitle_stream(), subtitle_stream())

        assert compute(media) is None

    def test_numbered_target(self, movie_media):
        plan = compute(movie_media, burn_subtitle=2)

        assert subtitle_arguments(plan) == ["--subtitle", "2", "--subtitle-default"]

    def test_numbered_image_target(self, multilingual_media):
        plan = compute(multilingual_media, burn_subtitle=2)

        assert subtitle_arguments(plan) == ["--subtitle", "2", "--subtitle-burned"]

    def test_numbered_target_missing(self, movie_media):
        assert compute(movie_media, burn_subtitle=5) is None

    def test_burn_disabled(self, movie_media):
        assert compute(movie_media, burn_subtitle=None) is None


class TestTrackInclusionMode:
    """Test inclusion of selected subtitle tracks."""

    def test_forced_track_always_first_and_default(self, multilingual_media):
        plan = compute(
            multilingual_media,
            burn_subtitle=None,
            subtitle_selections=(ByLanguage("eng"),),
        )

        assert plan.mode == SubtitleMode.TRACKS
        assert subtitle_arguments(plan) == [
            "--subtitle", "2,1",
            "--subtitle-default", "2",
            "--subname", "Signs,English",
        ]

    def test_selected_forced_track_not_repeated(self, multilingual_media):
        plan = compute(
            multilingual_media,
            burn_subtitle=None,
            subtitle_selections=(ByLanguage("jpn"), ByTrack(2)),
        )

        assert [t.index for t in plan.tracks] == [2, 3]

    def test_without_forced_track_no_default(self):
        media = make_media(
            video_stream(),
            subtitle_stream(language="eng", title="SDH, English"),
            subtitle_stream(language="spa", title="Spanish"),
        )

        plan = compute(media, burn_subtitle=None, subtitle_selections=(ByLanguage("all"),))

        assert subtitle_arguments(plan) == [
            "--subtitle", "1,2",
            "--subname", 'SDH"," English,Spanish',
        ]

    def test_selection_wins_over_burn_target(self, movie_media):
        plan = compute(movie_media, burn_subtitle=1, subtitle_selections=(ByTrack(2),))

        assert plan.mode == SubtitleMode.TRACKS

    def test_forced_track_included_when_selection_matches_nothing(self, movie_media):
        plan = compute(movie_media, burn_subtitle=None, subtitle_selections=(ByTitle("nothing"),))

        assert subtitle_arguments(plan) == [
            "--subtitle", "1",
            "--subtitle-default", "1",
            "--subname", "Forced",
        ]

    def test_nothing_matched(self):
        media = make_media(video_stream(), subtitle_stream())

        assert compute(media, burn_subtitle=None, subtitle_selections=(ByTrack(4),)) is None

    def test_subname_override(self, multilingual_media):
        plan = compute(
            multilingual_media,
            burn_subtitle=None,
            subtitle_selections=(ByTrack(3),),
            extras=ExtraOptions.parse(["subname=Custom"]),
        )

        assert subtitle_arguments(plan) == ["--subtitle", "2,3", "--subtitle-default", "2"]


@pytest.mark.parametrize("flag", ["subtitle=1", "all-subtitles", "first-subtitle"])
def test_subtitle_override_suppresses_everything(movie_media, flag):
    assert compute(movie_media, extras=ExtraOptions.parse([flag])) is None
    assert (
        compute(
            movie_media,
            burn_subtitle=None,
            subtitle_selections=(ByLanguage("all"),),
            extras=ExtraOptions.parse([flag]),
        )
        is None
    )
