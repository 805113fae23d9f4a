from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from pprint import pformat
from typing import Any, Iterable, Tuple, Union

import ffmpeg
from loguru import logger

from .exceptions import ProbeException


class CodecType(Enum):
    """The four media types the muxer knows how to route."""

    VIDEO = "video"
    AUDIO = "audio"
    SUBTITLE = "subtitle"
    ATTACHMENT = "attachment"


@dataclass(frozen=True)
class UnrecognizedCodecType:
    """
    A media type label ffprobe reported that is not one of `CodecType`.

    The original label is kept verbatim so it can be shown in diagnostics
    (ffprobe reports e.g. "data" for timecode tracks).
    """

    label: str

    def __str__(self) -> str:
        return f"unrecognized({self.label!r})"


MediaType = Union[CodecType, UnrecognizedCodecType]


def codec_type_from_label(label: str) -> MediaType:
    """
    Maps an ffprobe `codec_type` string onto the closed media type set.

    Args:
        label: The raw `codec_type` value from ffprobe.

    Returns:
        The matching `CodecType` member, or an `UnrecognizedCodecType`
        carrying the label unchanged.
    """
    try:
        return CodecType(label)
    except ValueError:
        return UnrecognizedCodecType(label)


@dataclass(frozen=True)
class StreamDescriptor:
    """
    One elementary stream as reported by the prober.

    Attributes:
        index (int): The container-wide stream index. Only used for display;
                     encoder stream maps use the position inside a bucket.
        codec_name (str): The codec name, e.g. 'h264', 'aac', 'ass'.
        media_type (MediaType): The classified media type.
    """

    index: int
    codec_name: str
    media_type: MediaType

    @classmethod
    def from_probe_record(cls, record: Any) -> "StreamDescriptor":
        if not isinstance(record, dict):
            raise ProbeException(f"Stream record is not a mapping: {record!r}")
        index = record.get("index")
        codec_type = record.get("codec_type")
        if not isinstance(index, int) or isinstance(index, bool) or index < 0:
            raise ProbeException(f"Stream record has no valid 'index': {record!r}")
        if not isinstance(codec_type, str):
            raise ProbeException(
                f"Stream {index} has no 'codec_type' in probe output."
            )
        # Attachments (fonts) frequently come without a codec_name.
        codec_name = record.get("codec_name") or "unknown"
        return cls(index, str(codec_name), codec_type_from_label(codec_type))


@dataclass(frozen=True)
class FormatInfo:
    filename: str
    nb_streams: int


@dataclass(frozen=True)
class ProbeResult:
    """The container metadata and ordered stream list of one probe call."""

    format: FormatInfo
    streams: Tuple[StreamDescriptor, ...]

    @classmethod
    def from_probe_dict(cls, probe: Any) -> "ProbeResult":
        """
        Builds a `ProbeResult` from the dictionary returned by `ffmpeg.probe`.

        Raises:
            ProbeException: If the dictionary does not have the shape of an
                            ffprobe `-show_format -show_streams` result.
        """
        if not isinstance(probe, dict):
            raise ProbeException(f"Probe output is not a JSON object: {type(probe).__name__}")
        raw_streams = probe.get("streams")
        if not isinstance(raw_streams, list):
            raise ProbeException("Probe output has no 'streams' list.")

        format_section = probe.get("format") or {}
        try:
            nb_streams = int(format_section.get("nb_streams", len(raw_streams)))
        except (TypeError, ValueError) as e:
            raise ProbeException(f"Probe output has an invalid 'nb_streams': {e}") from e

        streams = tuple(StreamDescriptor.from_probe_record(s) for s in raw_streams)
        return cls(
            FormatInfo(str(format_section.get("filename", "")), nb_streams),
            streams,
        )


def probe_container(path: Union[str, Path], ffprobe_path: str = "ffprobe") -> ProbeResult:
    """
    Probes a container with `ffprobe` (through ffmpeg-python).

    Every failure mode of the prober is turned into a `ProbeException` whose
    `__cause__` is the originating error, so the caller can abort the run
    with a single except clause.

    Args:
        path: The container to inspect.
        ffprobe_path: The ffprobe executable to run.

    Returns:
        The parsed `ProbeResult`.

    Raises:
        ProbeException: If ffprobe cannot be run, exits with an error, or
                        produces output that is not a valid probe result.
    """
    path_str = str(path)
    try:
        probe = ffmpeg.probe(path_str, cmd=ffprobe_path)
    except ffmpeg.Error as e:
        stderr = e.stderr.decode("utf-8", errors="replace") if isinstance(e.stderr, bytes) else e.stderr
        logger.error(f"ffmpeg.probe failed for {path_str}: {stderr}")
        raise ProbeException(f"Failed to probe {path_str}: {stderr}") from e
    except OSError as e:
        # ffprobe missing from PATH or not executable.
        raise ProbeException(f"Could not run ffprobe for {path_str}: {e}") from e
    except ValueError as e:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors.
        raise ProbeException(f"ffprobe output for {path_str} is not valid JSON: {e}") from e

    logger.debug(f"Probe data for {path_str}:\n{pformat(probe)}")
    return ProbeResult.from_probe_dict(probe)


class StreamInventory:
    """
    Classifies a probed container's streams into per-media-type buckets.

    Buckets keep the order ffprobe reported, which is the order the operator
    sees in the numbered selection list and therefore the order the encoder's
    `0:v:N` / `0:a:N` maps refer to.

    Two inventories exist per run at most, one for the primary container and
    one for the secondary container. They are never merged.

    Attributes:
        video (tuple): Video streams of the primary container.
        audio (tuple): Audio streams of the primary container.
        subtitle (tuple): Subtitle streams of the secondary container.
        attachment (tuple): Attachment streams of the secondary container.
        unrecognized (tuple): Streams with a media type outside the known set.
        ignored (tuple): Known streams dropped by the dual-container policy.
    """

    def __init__(
        self,
        source: str,
        video: Iterable[StreamDescriptor] = (),
        audio: Iterable[StreamDescriptor] = (),
        subtitle: Iterable[StreamDescriptor] = (),
        attachment: Iterable[StreamDescriptor] = (),
        unrecognized: Iterable[StreamDescriptor] = (),
        ignored: Iterable[StreamDescriptor] = (),
    ):
        self.source = source
        self.video = tuple(video)
        self.audio = tuple(audio)
        self.subtitle = tuple(subtitle)
        self.attachment = tuple(attachment)
        self.unrecognized = tuple(unrecognized)
        self.ignored = tuple(ignored)

    @classmethod
    def from_primary(cls, probe: ProbeResult) -> "StreamInventory":
        """Only video and audio of the primary container are muxable."""
        return cls._classify(
            probe, "av", accepted={CodecType.VIDEO, CodecType.AUDIO}
        )

    @classmethod
    def from_secondary(cls, probe: ProbeResult) -> "StreamInventory":
        """Only subtitles and attachments of the secondary container are used."""
        return cls._classify(
            probe, "sub", accepted={CodecType.SUBTITLE, CodecType.ATTACHMENT}
        )

    @classmethod
    def _classify(cls, probe: ProbeResult, role: str, accepted: set) -> "StreamInventory":
        buckets = {codec_type: [] for codec_type in CodecType}
        unrecognized = []
        ignored = []

        for stream in probe.streams:
            media_type = stream.media_type
            if isinstance(media_type, UnrecognizedCodecType):
                logger.warning(
                    f"{role}: unknown codec type {media_type.label!r} for stream {stream.index} ({stream.codec_name})"
                )
                unrecognized.append(stream)
            elif media_type in accepted:
                buckets[media_type].append(stream)
            else:
                logger.debug(f"{role}: ignoring {media_type.value} stream {stream.index}")
                ignored.append(stream)

        return cls(
            probe.format.filename,
            video=buckets[CodecType.VIDEO],
            audio=buckets[CodecType.AUDIO],
            subtitle=buckets[CodecType.SUBTITLE],
            attachment=buckets[CodecType.ATTACHMENT],
            unrecognized=unrecognized,
            ignored=ignored,
        )

    def summary(self) -> dict:
        return {
            "video": len(self.video),
            "audio": len(self.audio),
            "subs": len(self.subtitle),
            "attach": len(self.attachment),
            "unknown": len(self.unrecognized),
        }

    def __repr__(self) -> str:
        return f"StreamInventory({self.source!r}, {self.summary()})"
