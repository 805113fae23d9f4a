"""
HLS Muxer: turns one audio/video container (plus an optional subtitle
container) into a set of concurrently encoded HLS renditions and a master
playlist that lists them.
"""
