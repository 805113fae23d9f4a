"""
This package contains the core domain models of the HLS Muxer.

Modules:
    exceptions.py: Custom exception types, split into fatal run-aborting
                   errors and orchestration errors.
    media.py: Probing through ffprobe and classification of a container's
              streams into media-type buckets (`StreamInventory`).
    selection.py: Validation of the operator's choices into a `MuxSelection`.
    rendition.py: Rendition profiles, the bitrate ladder to encode.
    job.py: `TranscodeJob`, the runtime state of one rendition encode.
"""
