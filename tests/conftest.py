import sys
from pathlib import Path

import pytest

# Ensure repository root is on sys.path so tests can import the package
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hls_muxer.config.hls import DEFAULT_PROFILES  # noqa: E402
from hls_muxer.domain.media import ProbeResult  # noqa: E402
from hls_muxer.domain.rendition import RenditionProfileSet  # noqa: E402


def make_probe_dict(filename, *streams):
    """Builds an ffprobe-shaped dict from (codec_type, codec_name) pairs."""
    return {
        "format": {"filename": filename, "nb_streams": len(streams)},
        "streams": [
            {"index": i, "codec_type": codec_type, "codec_name": codec_name}
            for i, (codec_type, codec_name) in enumerate(streams)
        ],
    }


def make_probe(filename, *streams):
    return ProbeResult.from_probe_dict(make_probe_dict(filename, *streams))


class FakeProcess:
    """Stands in for subprocess.Popen in orchestrator tests."""

    _next_pid = 1000

    def __init__(self, return_code=0, on_wait=None):
        self.return_code = return_code
        self.on_wait = on_wait
        self.terminated = False
        FakeProcess._next_pid += 1
        self.pid = FakeProcess._next_pid

    def wait(self):
        if self.on_wait is not None:
            self.on_wait()
        return self.return_code

    def terminate(self):
        self.terminated = True


class FakeLauncher:
    """Records launched commands and hands out FakeProcess objects."""

    def __init__(self, processes=None):
        # Maps rendition name -> FakeProcess, or None for a failed launch.
        self.processes = processes or {}
        self.calls = []

    def __call__(self, cmd, **kwargs):
        rendition = Path(cmd[-1]).parent.name
        self.calls.append((rendition, cmd, kwargs))
        if rendition in self.processes:
            return self.processes[rendition]
        return FakeProcess(0)


@pytest.fixture
def default_profiles():
    return RenditionProfileSet(DEFAULT_PROFILES)


@pytest.fixture
def av_probe():
    return make_probe(
        "movie.mkv",
        ("video", "h264"),
        ("audio", "aac"),
        ("video", "mjpeg"),
        ("audio", "ac3"),
        ("video", "hevc"),
    )


@pytest.fixture
def sub_probe():
    return make_probe(
        "movie.subs.mkv",
        ("subtitle", "ass"),
        ("attachment", "ttf"),
        ("subtitle", "subrip"),
    )
