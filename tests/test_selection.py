"""Tests for turning chosen bucket positions into a MuxSelection."""

import dataclasses

import pytest

from conftest import make_probe
from hls_muxer.domain.exceptions import (
    EmptyStreamBucketException,
    SelectionException,
    StreamIndexOutOfRangeException,
)
from hls_muxer.domain.media import StreamInventory
from hls_muxer.domain.selection import MuxSelection, SelectionResolver


@pytest.fixture
def primary():
    return StreamInventory.from_primary(
        make_probe(
            "movie.mkv",
            ("video", "h264"),
            ("video", "mjpeg"),
            ("audio", "aac"),
            ("video", "hevc"),
            ("audio", "ac3"),
        )
    )


@pytest.fixture
def secondary(sub_probe):
    return StreamInventory.from_secondary(sub_probe)


class TestResolve:
    def test_fields_match_inputs_without_subtitles(self, primary):
        selection = SelectionResolver(primary).resolve("movie.mkv", video_index=2, audio_index=0)

        assert selection == MuxSelection(
            av_path="movie.mkv",
            st_path=None,
            video_index=2,
            audio_index=0,
            subtitle_index=None,
        )
        assert not selection.has_subtitles

    def test_with_subtitles(self, primary, secondary):
        selection = SelectionResolver(primary, secondary).resolve(
            "movie.mkv", 0, 1, st_path="movie.subs.mkv", subtitle_index=1
        )
        assert selection.st_path == "movie.subs.mkv"
        assert selection.subtitle_index == 1
        assert selection.has_subtitles

    def test_selection_is_read_only(self, primary):
        selection = SelectionResolver(primary).resolve("movie.mkv", 0, 0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            selection.video_index = 1


class TestRejections:
    def test_empty_audio_bucket(self):
        video_only = StreamInventory.from_primary(make_probe("silent.mp4", ("video", "h264")))
        resolver = SelectionResolver(video_only)

        with pytest.raises(EmptyStreamBucketException):
            resolver.ensure_selectable()
        with pytest.raises(EmptyStreamBucketException):
            resolver.resolve("silent.mp4", 0, 0)

    def test_empty_video_bucket(self):
        audio_only = StreamInventory.from_primary(make_probe("song.m4a", ("audio", "aac")))
        with pytest.raises(EmptyStreamBucketException):
            SelectionResolver(audio_only).resolve("song.m4a", 0, 0)

    @pytest.mark.parametrize("video_index", [3, -1, 99])
    def test_video_position_out_of_range(self, primary, video_index):
        with pytest.raises(StreamIndexOutOfRangeException):
            SelectionResolver(primary).resolve("movie.mkv", video_index, 0)

    def test_audio_position_out_of_range(self, primary):
        with pytest.raises(StreamIndexOutOfRangeException):
            SelectionResolver(primary).resolve("movie.mkv", 0, 2)

    def test_non_integer_position(self, primary):
        with pytest.raises(StreamIndexOutOfRangeException):
            SelectionResolver(primary).resolve("movie.mkv", True, 0)
        with pytest.raises(StreamIndexOutOfRangeException):
            SelectionResolver(primary).resolve("movie.mkv", "1", 0)

    def test_subtitle_position_out_of_range(self, primary, secondary):
        with pytest.raises(StreamIndexOutOfRangeException):
            SelectionResolver(primary, secondary).resolve(
                "movie.mkv", 0, 0, st_path="movie.subs.mkv", subtitle_index=2
            )

    def test_subtitle_path_without_position(self, primary, secondary):
        with pytest.raises(SelectionException):
            SelectionResolver(primary, secondary).resolve("movie.mkv", 0, 0, st_path="movie.subs.mkv")

    def test_subtitle_position_without_path(self, primary, secondary):
        with pytest.raises(SelectionException):
            SelectionResolver(primary, secondary).resolve("movie.mkv", 0, 0, subtitle_index=0)

    def test_subtitle_path_without_inventory(self, primary):
        with pytest.raises(SelectionException):
            SelectionResolver(primary).resolve(
                "movie.mkv", 0, 0, st_path="movie.subs.mkv", subtitle_index=0
            )


class TestMuxSelection:
    def test_subtitle_path_requires_position(self):
        with pytest.raises(SelectionException):
            MuxSelection("movie.mkv", "movie.subs.mkv", 0, 0)

    def test_subtitle_position_requires_path(self):
        with pytest.raises(SelectionException):
            MuxSelection("movie.mkv", None, 0, 0, subtitle_index=1)

    def test_consistent_selections(self):
        assert not MuxSelection("movie.mkv", None, 0, 0).has_subtitles
        assert MuxSelection("movie.mkv", "movie.subs.mkv", 0, 0, 0).has_subtitles
