"""
This package contains the run pipeline of the HLS Muxer.

The pipeline sequences the blocking steps (probing, operator selection) and
hands the resolved selection to the transcode orchestrator, which runs the
rendition encoders concurrently.
"""
