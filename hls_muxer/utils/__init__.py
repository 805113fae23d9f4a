"""
Utilities Package for the HLS Muxer.

Modules:
    - ffmpeg_utils.py: Starting external processes and formatting/escaping
      ffmpeg arguments.
    - format_utils.py: Human-readable formatting helpers.
    - module_updater.py: Locating and verifying ffmpeg and ffprobe.
"""
