"""
Services Package for the HLS Muxer.

- **Transcode Orchestrator (`TranscodeOrchestrator`):** builds the ffmpeg
  command of every rendition, starts all encoders and waits for them.
- **Manifest Writer (`ManifestWriter`):** renders and writes the HLS master
  playlist from the rendition profiles.
- **Logging Service (`ErrorLog`, `SummaryLog`):** run logs written next to the
  HLS output, separate from real-time console logging.
"""
