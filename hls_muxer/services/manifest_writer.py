"""
Writes the HLS master playlist that enumerates every rendition.

The playlist only depends on the static profile set: bandwidth and resolution
are the advertised values of each profile, and each variant points at
`<rendition name>/index.m3u8` relative to the output root. It is written while
the encoders are still running, because renditions are playable as soon as
their first segments appear.
"""
from pathlib import Path

from loguru import logger

from ..config.hls import RENDITION_INDEX_NAME
from ..domain.rendition import RenditionProfileSet

M3U_HEADER = "#EXTM3U"
M3U_VERSION = "#EXT-X-VERSION:3"


class ManifestWriter:
    """
    Renders and writes the master playlist for a profile set.

    Args:
        output_root: Directory the playlist is written to.
        profiles: The ordered rendition ladder.
        manifest_name: File name of the playlist inside `output_root`.
        index_name: File name of each rendition's media playlist.
    """

    def __init__(
        self,
        output_root: Path,
        profiles: RenditionProfileSet,
        manifest_name: str,
        index_name: str = RENDITION_INDEX_NAME,
    ):
        self.output_root = Path(output_root)
        self.profiles = profiles
        self.manifest_name = manifest_name
        self.index_name = index_name

    @property
    def manifest_path(self) -> Path:
        return self.output_root / self.manifest_name

    def render(self) -> str:
        """Returns the playlist text, one info/path pair per profile."""
        lines = [M3U_HEADER, M3U_VERSION]
        for profile in self.profiles:
            lines.append(
                f"#EXT-X-STREAM-INF:BANDWIDTH={profile.bandwidth},RESOLUTION={profile.resolution}"
            )
            lines.append(f"{profile.name}/{self.index_name}")
        return "\n".join(lines) + "\n"

    def write(self) -> Path:
        """
        Truncates and rewrites the playlist file.

        Raises:
            OSError: If the file cannot be written.
        """
        content = self.render()
        # newline="" keeps the "\n" line endings on every platform.
        with self.manifest_path.open("w", encoding="utf-8", newline="") as f:
            f.write(content)
        logger.info(f"Wrote master playlist {self.manifest_path} ({len(self.profiles)} renditions)")
        return self.manifest_path
