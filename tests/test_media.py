"""Tests for probing and stream classification."""

from unittest.mock import patch

import ffmpeg
import pytest

from conftest import make_probe, make_probe_dict
from hls_muxer.domain import media
from hls_muxer.domain.exceptions import ProbeException
from hls_muxer.domain.media import (
    CodecType,
    ProbeResult,
    StreamInventory,
    UnrecognizedCodecType,
    codec_type_from_label,
    probe_container,
)


class TestCodecType:
    """Test mapping of ffprobe codec_type labels."""

    def test_known_labels(self):
        assert codec_type_from_label("video") is CodecType.VIDEO
        assert codec_type_from_label("audio") is CodecType.AUDIO
        assert codec_type_from_label("subtitle") is CodecType.SUBTITLE
        assert codec_type_from_label("attachment") is CodecType.ATTACHMENT

    def test_unknown_label_is_kept_verbatim(self):
        media_type = codec_type_from_label("data")
        assert media_type == UnrecognizedCodecType("data")
        assert media_type.label == "data"

    def test_labels_are_case_sensitive(self):
        """ffprobe emits lowercase; anything else is not a known type."""
        assert isinstance(codec_type_from_label("Video"), UnrecognizedCodecType)


class TestProbeResult:
    """Test parsing of ffprobe output."""

    def test_parses_format_and_streams_in_order(self):
        probe = make_probe("in.mkv", ("video", "h264"), ("audio", "aac"))
        assert probe.format.filename == "in.mkv"
        assert probe.format.nb_streams == 2
        assert [s.index for s in probe.streams] == [0, 1]
        assert probe.streams[0].codec_name == "h264"
        assert probe.streams[1].media_type is CodecType.AUDIO

    def test_missing_streams_list(self):
        with pytest.raises(ProbeException):
            ProbeResult.from_probe_dict({"format": {"filename": "x"}})

    def test_not_a_mapping(self):
        with pytest.raises(ProbeException):
            ProbeResult.from_probe_dict(["streams"])

    def test_stream_without_codec_type(self):
        with pytest.raises(ProbeException):
            ProbeResult.from_probe_dict({"streams": [{"index": 0, "codec_name": "h264"}]})

    def test_stream_with_negative_index(self):
        with pytest.raises(ProbeException):
            ProbeResult.from_probe_dict(
                {"streams": [{"index": -1, "codec_type": "video", "codec_name": "h264"}]}
            )

    def test_attachment_without_codec_name(self):
        probe = ProbeResult.from_probe_dict(
            {"streams": [{"index": 0, "codec_type": "attachment"}]}
        )
        assert probe.streams[0].codec_name == "unknown"
        assert probe.format.nb_streams == 1


class TestProbeContainer:
    """Test that every prober failure becomes a ProbeException."""

    def test_success(self):
        raw = make_probe_dict("a.mkv", ("video", "h264"), ("audio", "aac"))
        with patch.object(media.ffmpeg, "probe", return_value=raw) as probe_mock:
            result = probe_container("a.mkv", ffprobe_path="/opt/ffprobe")

        probe_mock.assert_called_once_with("a.mkv", cmd="/opt/ffprobe")
        assert len(result.streams) == 2

    def test_ffprobe_error(self):
        error = ffmpeg.Error("ffprobe", b"", b"Invalid data found when processing input")
        with patch.object(media.ffmpeg, "probe", side_effect=error):
            with pytest.raises(ProbeException) as exc_info:
                probe_container("broken.mkv")

        assert exc_info.value.__cause__ is error
        assert "Invalid data" in str(exc_info.value)

    def test_ffprobe_missing(self):
        with patch.object(media.ffmpeg, "probe", side_effect=FileNotFoundError("ffprobe")):
            with pytest.raises(ProbeException) as exc_info:
                probe_container("a.mkv")
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_undecodable_output(self):
        error = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        with patch.object(media.ffmpeg, "probe", side_effect=error):
            with pytest.raises(ProbeException):
                probe_container("a.mkv")

    def test_malformed_output(self):
        with patch.object(media.ffmpeg, "probe", return_value={"format": {}}):
            with pytest.raises(ProbeException):
                probe_container("a.mkv")


class TestStreamInventory:
    """Test bucketing of probed streams."""

    def test_every_stream_lands_in_exactly_one_bucket(self):
        probe = make_probe(
            "mixed.mkv",
            ("video", "h264"),
            ("audio", "aac"),
            ("subtitle", "ass"),
            ("attachment", "ttf"),
            ("data", "bin_data"),
            ("audio", "opus"),
        )
        inventory = StreamInventory.from_primary(probe)

        buckets = [
            inventory.video,
            inventory.audio,
            inventory.subtitle,
            inventory.attachment,
            inventory.unrecognized,
            inventory.ignored,
        ]
        seen = [stream.index for bucket in buckets for stream in bucket]
        assert sorted(seen) == [s.index for s in probe.streams]
        assert len(seen) == len(set(seen))
        assert [s.codec_name for s in inventory.audio] == ["aac", "opus"]

    def test_unrecognized_streams_do_not_fail(self):
        probe = make_probe("odd.ts", ("data", "scte_35"), ("video", "h264"), ("audio", "aac"))
        inventory = StreamInventory.from_primary(probe)
        assert len(inventory.unrecognized) == 1
        assert inventory.unrecognized[0].media_type.label == "data"
        assert len(inventory.video) == 1

    def test_primary_keeps_prober_order(self, av_probe):
        inventory = StreamInventory.from_primary(av_probe)
        assert [s.codec_name for s in inventory.video] == ["h264", "mjpeg", "hevc"]
        assert [s.index for s in inventory.video] == [0, 2, 4]
        assert [s.codec_name for s in inventory.audio] == ["aac", "ac3"]

    def test_primary_ignores_subtitles_and_attachments(self):
        probe = make_probe(
            "a.mkv", ("video", "h264"), ("audio", "aac"), ("subtitle", "ass"), ("attachment", "ttf")
        )
        inventory = StreamInventory.from_primary(probe)
        assert inventory.subtitle == ()
        assert inventory.attachment == ()
        assert len(inventory.ignored) == 2

    def test_secondary_discards_audio_and_video(self):
        probe = make_probe(
            "subs.mkv",
            ("audio", "aac"),
            ("video", "h264"),
            ("subtitle", "ass"),
            ("subtitle", "subrip"),
        )
        inventory = StreamInventory.from_secondary(probe)

        assert len(inventory.subtitle) == 2
        assert inventory.video == ()
        assert inventory.audio == ()
        assert [s.media_type for s in inventory.ignored] == [CodecType.AUDIO, CodecType.VIDEO]

    def test_secondary_keeps_attachments(self, sub_probe):
        inventory = StreamInventory.from_secondary(sub_probe)
        assert [s.codec_name for s in inventory.subtitle] == ["ass", "subrip"]
        assert [s.codec_name for s in inventory.attachment] == ["ttf"]

    def test_summary(self, av_probe):
        inventory = StreamInventory.from_primary(av_probe)
        assert inventory.summary() == {"video": 3, "audio": 2, "subs": 0, "attach": 0, "unknown": 0}
