"""
Rendition profiles: the static bitrate ladder the muxer encodes.

A profile is pure configuration. Its bitrates go to the encoder, while its
bandwidth and resolution are only advertised in the master playlist and are
never measured from the live encode.
"""
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple

from .exceptions import ProfileConfigException

_BITRATE_PATTERN = re.compile(r"^\d+(\.\d+)?[kKmM]?$")
_RESOLUTION_PATTERN = re.compile(r"^\d+x\d+$")


@dataclass(frozen=True)
class RenditionProfile:
    """
    One output quality tier.

    Attributes:
        name (str): Directory name under the output root and manifest id.
        video_bitrate (str): ffmpeg `-b:v` value, e.g. "3000k".
        audio_bitrate (str): ffmpeg `-b:a` value, e.g. "192k".
        bandwidth (int): BANDWIDTH advertised in the master playlist.
        resolution (str): RESOLUTION advertised in the master playlist.
    """

    name: str
    video_bitrate: str
    audio_bitrate: str
    bandwidth: int
    resolution: str

    def validate(self):
        if not self.name or "/" in self.name or "\\" in self.name or self.name in {".", ".."}:
            raise ProfileConfigException(f"Invalid rendition name: {self.name!r}")
        for label, value in (("video_bitrate", self.video_bitrate), ("audio_bitrate", self.audio_bitrate)):
            if not isinstance(value, str) or not _BITRATE_PATTERN.match(value):
                raise ProfileConfigException(f"{self.name}: invalid {label} {value!r}")
        if not isinstance(self.bandwidth, int) or isinstance(self.bandwidth, bool) or self.bandwidth <= 0:
            raise ProfileConfigException(f"{self.name}: bandwidth must be a positive integer")
        if not isinstance(self.resolution, str) or not _RESOLUTION_PATTERN.match(self.resolution):
            raise ProfileConfigException(f"{self.name}: invalid resolution {self.resolution!r}")


class RenditionProfileSet:
    """
    An ordered, non-empty collection of profiles with unique names.

    Iteration order is the launch order of the encoder jobs and the order of
    the variants in the master playlist.
    """

    def __init__(self, profiles: Iterable[RenditionProfile]):
        self.profiles: Tuple[RenditionProfile, ...] = tuple(profiles)
        if not self.profiles:
            raise ProfileConfigException("At least one rendition profile is required.")

        seen = set()
        for profile in self.profiles:
            profile.validate()
            if profile.name in seen:
                raise ProfileConfigException(f"Duplicate rendition name: {profile.name}")
            seen.add(profile.name)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.profiles)

    def __iter__(self) -> Iterator[RenditionProfile]:
        return iter(self.profiles)

    def __len__(self) -> int:
        return len(self.profiles)

    def __getitem__(self, position: int) -> RenditionProfile:
        return self.profiles[position]

    def __repr__(self) -> str:
        return f"RenditionProfileSet({list(self.names)})"
