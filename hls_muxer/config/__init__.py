"""
Configuration Package for the HLS Muxer.

This package centralizes the static configuration of the application:
- Common settings like the logging format, run-log file names and job statuses,
  plus loading of the optional `config.user.yaml`.
- HLS settings: output layout, segmenter and encoder options, and the default
  rendition ladder.
"""
