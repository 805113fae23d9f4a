"""
Resolution of operator choices into a validated stream selection.

The resolver is the only place where chosen bucket positions are checked.
Everything downstream (the encoder command builder in particular) trusts a
`MuxSelection` as-is.
"""
from dataclasses import dataclass
from typing import Optional, Sequence

from loguru import logger

from .exceptions import (
    EmptyStreamBucketException,
    SelectionException,
    StreamIndexOutOfRangeException,
)
from .media import StreamDescriptor, StreamInventory


@dataclass(frozen=True)
class MuxSelection:
    """
    The streams chosen for muxing, shared read-only by every rendition job.

    Attributes:
        av_path (str): The primary (audio/video) container.
        st_path (str | None): The secondary (subtitle) container, if any.
        video_index (int): Position in the primary inventory's video bucket.
        audio_index (int): Position in the primary inventory's audio bucket.
        subtitle_index (int | None): Position in the secondary inventory's
                                     subtitle bucket. Set iff `st_path` is set.
    """

    av_path: str
    st_path: Optional[str]
    video_index: int
    audio_index: int
    subtitle_index: Optional[int] = None

    def __post_init__(self):
        if (self.st_path is None) != (self.subtitle_index is None):
            raise SelectionException(
                "A subtitle position must be given exactly when a subtitle container is given."
            )

    @property
    def has_subtitles(self) -> bool:
        return self.st_path is not None


def check_position(name: str, bucket: Sequence[StreamDescriptor], position) -> int:
    """
    Validates a zero-based position against a bucket.

    Raises:
        StreamIndexOutOfRangeException: If `position` is not an int in
                                        `[0, len(bucket))`.
    """
    if not isinstance(position, int) or isinstance(position, bool):
        raise StreamIndexOutOfRangeException(
            f"{name} selection must be an integer, got {position!r}"
        )
    if not 0 <= position < len(bucket):
        raise StreamIndexOutOfRangeException(
            f"{name} selection {position} is out of range (0..{len(bucket) - 1})"
            if bucket
            else f"{name} selection {position} is out of range (no {name} streams)"
        )
    return position


class SelectionResolver:
    """
    Turns chosen bucket positions into a `MuxSelection`.

    Args:
        primary: Inventory of the primary container (video/audio buckets).
        secondary: Inventory of the secondary container (subtitle bucket),
                   or None when no secondary container was given.
    """

    def __init__(self, primary: StreamInventory, secondary: Optional[StreamInventory] = None):
        self.primary = primary
        self.secondary = secondary

    def ensure_selectable(self):
        """
        Fails fast when the primary container cannot be muxed at all.

        Raises:
            EmptyStreamBucketException: If the video or audio bucket is empty.
        """
        if not self.primary.video:
            raise EmptyStreamBucketException(f"No video stream found in {self.primary.source}")
        if not self.primary.audio:
            raise EmptyStreamBucketException(f"No audio stream found in {self.primary.source}")

    def resolve(
        self,
        av_path: str,
        video_index: int,
        audio_index: int,
        st_path: Optional[str] = None,
        subtitle_index: Optional[int] = None,
    ) -> MuxSelection:
        """
        Validates the chosen positions and builds the selection.

        Raises:
            EmptyStreamBucketException: If the video or audio bucket is empty.
            StreamIndexOutOfRangeException: If any position is out of range.
            SelectionException: If a subtitle container is given without a
                                subtitle position or the other way round.
        """
        self.ensure_selectable()
        check_position("video", self.primary.video, video_index)
        check_position("audio", self.primary.audio, audio_index)

        if (st_path is None) != (subtitle_index is None):
            raise SelectionException(
                "A subtitle position must be given exactly when a subtitle container is given."
            )
        if st_path is not None:
            if self.secondary is None:
                raise SelectionException(f"No inventory available for subtitle container {st_path}")
            check_position("subtitle", self.secondary.subtitle, subtitle_index)

        selection = MuxSelection(
            av_path=av_path,
            st_path=st_path,
            video_index=video_index,
            audio_index=audio_index,
            subtitle_index=subtitle_index,
        )
        logger.debug(f"Resolved selection: {selection}")
        return selection
