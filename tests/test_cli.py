"""Tests for argument parsing and the interactive stream prompt."""

import pytest

from conftest import make_probe
from hls_muxer.cli import get_args, prompt_stream_index
from hls_muxer.domain.exceptions import SelectionException


@pytest.fixture
def audio_streams():
    return make_probe("a.mkv", ("audio", "aac"), ("audio", "ac3")).streams


def feed(*lines):
    remaining = list(lines)

    def fake_input(prompt=""):
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    return fake_input


class TestPrompt:
    def test_lists_positions_and_codecs(self, audio_streams):
        printed = []
        position = prompt_stream_index("audio", audio_streams, input_func=feed("1"), print_func=printed.append)
        assert position == 1
        assert printed == ["select audio track:", "0: aac", "1: ac3"]

    def test_non_numeric_input_is_asked_again(self, audio_streams):
        position = prompt_stream_index("audio", audio_streams, input_func=feed("abc", "", " 0 "), print_func=lambda _: None)
        assert position == 0

    def test_out_of_range_input_is_asked_again(self, audio_streams):
        position = prompt_stream_index("audio", audio_streams, input_func=feed("5", "-1", "1"), print_func=lambda _: None)
        assert position == 1

    def test_closed_input(self, audio_streams):
        with pytest.raises(SelectionException):
            prompt_stream_index("audio", audio_streams, input_func=feed("x"), print_func=lambda _: None)


class TestGetArgs:
    def test_primary_only(self):
        args = get_args(["movie.mkv"])
        assert args.input == "movie.mkv"
        assert args.subtitle is None
        assert args.log_level == "INFO"
        assert not args.skip_ffmpeg_check

    def test_primary_and_subtitle(self):
        args = get_args(["movie.mkv", "subs.mkv", "--output-root", "/tmp/hls", "--manifest-name", "master.m3u8"])
        assert args.subtitle == "subs.mkv"
        assert args.output_root == "/tmp/hls"
        assert args.manifest_name == "master.m3u8"

    def test_missing_input(self):
        with pytest.raises(SystemExit) as exc_info:
            get_args([])
        assert exc_info.value.code == 2
