"""
Defines custom exception types for the HLS Muxer application.

These exceptions allow the pipeline to tell fatal, run-aborting conditions
(a container that cannot be probed, an impossible stream selection, a broken
rendition ladder) apart from each other, and from the per-job failures that
are only collected and reported after all encoder processes have finished.

All custom exceptions inherit from the base `HlsMuxerException`.
"""


class HlsMuxerException(Exception):
    """Base class for all custom exceptions in the HLS Muxer application."""

    pass


# --- Probe Specific Exceptions ---
class ProbeException(HlsMuxerException):
    """
    Raised when a container cannot be probed.

    This covers a failed `ffprobe` invocation (missing executable, non-zero
    exit), output that is not decodable JSON, and JSON that does not have the
    shape of a probe result (no `streams` list, stream records without an
    `index` or `codec_type`). The run is aborted before any selection happens.
    """

    pass


# --- Selection Specific Exceptions ---
class SelectionException(HlsMuxerException):
    """Base class for exceptions raised while building a stream selection."""

    pass


class EmptyStreamBucketException(SelectionException):
    """
    Raised when the primary container has no video or no audio stream.

    Both buckets must contain at least one entry before the operator can be
    asked to choose; this is a fatal precondition and is never retried.
    """

    pass


class StreamIndexOutOfRangeException(SelectionException):
    """
    Raised when a chosen position does not exist in its bucket.

    Positions are zero-based and must lie in `[0, len(bucket))`.
    """

    pass


# --- Configuration Specific Exceptions ---
class ProfileConfigException(HlsMuxerException):
    """
    Raised when a rendition profile set is unusable.

    For example an empty set, two profiles sharing the same name, or a
    profile whose advertised bandwidth is not a positive integer.
    """

    pass


# --- Transcode Specific Exceptions ---
class TranscodeException(HlsMuxerException):
    """Base class for exceptions raised by the transcode orchestrator."""

    pass
