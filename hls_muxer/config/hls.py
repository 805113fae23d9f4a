"""
Configuration settings for HLS output and the default rendition ladder.

Components never read these constants themselves; the entry point passes the
effective values into the orchestrator and the manifest writer.
"""
from pathlib import Path
from typing import Any, Iterable

from ..domain.exceptions import ProfileConfigException
from ..domain.rendition import RenditionProfile, RenditionProfileSet
from .common import USER_HLS_CONFIG

# --- Output Layout ---
DEFAULT_HLS_ROOT = Path("/srv/hls")
DEFAULT_MANIFEST_NAME = "cdn00.m3u8"
RENDITION_INDEX_NAME = "index.m3u8"
SEGMENT_FILENAME_PATTERN = "%03d.ts"

# --- Segmenter Settings ---
# Passed to ffmpeg's hls muxer; old segments are deleted once they fall out
# of the playlist window.
HLS_LIST_SIZE = 10
HLS_SEGMENT_SECONDS = 10
HLS_FLAGS = "delete_segments"

# --- Encoder Settings ---
VIDEO_ENCODER = "libx264"
X264_OPTIONS = "keyint=300:no-scenecut"
PIXEL_FORMAT = "yuv420p"
H264_PROFILE = "main"
FRAME_RATE = 30
AUDIO_ENCODER = "libfdk_aac"
ENCODER_PRESET = "veryfast"

# --- Default Rendition Ladder ---
DEFAULT_PROFILES = (
    RenditionProfile("cdn00_src", "3000k", "192k", 4_000_000, "1920x1080"),
    RenditionProfile("cdn00_mid", "2250k", "128k", 2_000_000, "1920x1080"),
    RenditionProfile("cdn00_low", "960k", "96k", 960_000, "1920x1080"),
)

_PROFILE_KEYS = ("name", "video_bitrate", "audio_bitrate", "bandwidth", "resolution")


def load_profiles(raw_profiles: Iterable[Any] | None) -> RenditionProfileSet:
    """
    Builds a profile set from the 'profiles' list of the user config.

    Args:
        raw_profiles: A list of mappings with the keys name, video_bitrate,
                      audio_bitrate, bandwidth and resolution, or None to use
                      `DEFAULT_PROFILES`.

    Raises:
        ProfileConfigException: If an entry is malformed or the resulting set
                                is invalid.
    """
    if raw_profiles is None:
        return RenditionProfileSet(DEFAULT_PROFILES)

    profiles = []
    for position, entry in enumerate(raw_profiles):
        if not isinstance(entry, dict):
            raise ProfileConfigException(f"Profile #{position} is not a mapping: {entry!r}")
        missing = [key for key in _PROFILE_KEYS if key not in entry]
        if missing:
            raise ProfileConfigException(f"Profile #{position} is missing {', '.join(missing)}")
        try:
            bandwidth = int(entry["bandwidth"])
        except (TypeError, ValueError) as e:
            raise ProfileConfigException(f"Profile #{position} has an invalid bandwidth: {e}") from e
        profiles.append(
            RenditionProfile(
                name=str(entry["name"]),
                video_bitrate=str(entry["video_bitrate"]),
                audio_bitrate=str(entry["audio_bitrate"]),
                bandwidth=bandwidth,
                resolution=str(entry["resolution"]),
            )
        )
    return RenditionProfileSet(profiles)


# Effective settings after applying config.user.yaml.
HLS_ROOT = Path(USER_HLS_CONFIG.get("output_root") or DEFAULT_HLS_ROOT)
MANIFEST_NAME = str(USER_HLS_CONFIG.get("manifest_name") or DEFAULT_MANIFEST_NAME)
USER_PROFILES = USER_HLS_CONFIG.get("profiles")
