"""
Fan-out of one stream selection into concurrently running rendition encodes.

For every rendition profile the orchestrator builds an ffmpeg command that
reads the primary container, maps the selected video/audio streams, applies
the profile's bitrates (and optional subtitle burn-in) and writes a segmented
HLS rendition into `<output_root>/<rendition name>/`.

All processes are started back to back without waiting on each other. The
orchestrator then joins them all; a failing rendition is recorded and
reported but never stops its siblings.
"""
import concurrent.futures
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from loguru import logger

from ..config.common import COMMAND_TEXT
from ..config.hls import (
    AUDIO_ENCODER,
    ENCODER_PRESET,
    FRAME_RATE,
    H264_PROFILE,
    HLS_FLAGS,
    HLS_LIST_SIZE,
    HLS_SEGMENT_SECONDS,
    PIXEL_FORMAT,
    RENDITION_INDEX_NAME,
    SEGMENT_FILENAME_PATTERN,
    VIDEO_ENCODER,
    X264_OPTIONS,
)
from ..domain.exceptions import TranscodeException
from ..domain.job import TranscodeJob
from ..domain.rendition import RenditionProfile, RenditionProfileSet
from ..domain.selection import MuxSelection
from ..utils.ffmpeg_utils import escape_filter_value, format_cmd, launch_cmd


@dataclass(frozen=True)
class EncoderSettings:
    """Encoder and segmenter options shared by every rendition."""

    video_encoder: str = VIDEO_ENCODER
    x264_options: str = X264_OPTIONS
    pixel_format: str = PIXEL_FORMAT
    h264_profile: str = H264_PROFILE
    frame_rate: int = FRAME_RATE
    audio_encoder: str = AUDIO_ENCODER
    preset: str = ENCODER_PRESET
    hls_list_size: int = HLS_LIST_SIZE
    hls_time: int = HLS_SEGMENT_SECONDS
    hls_flags: str = HLS_FLAGS
    segment_pattern: str = SEGMENT_FILENAME_PATTERN
    index_name: str = RENDITION_INDEX_NAME


class TranscodeOrchestrator:
    """
    Launches and supervises one ffmpeg process per rendition profile.

    Args:
        output_root: The HLS root directory; every rendition gets a
                     subdirectory named after its profile.
        profiles: The ordered rendition ladder.
        ffmpeg_path: The ffmpeg executable to run.
        settings: Encoder/segmenter options; defaults come from `config.hls`.
        launcher: Callable that starts a command and returns a Popen-like
                  handle or None. Defaults to `launch_cmd`.
        show_cmd: Log each command at DEBUG level before launch.
    """

    def __init__(
        self,
        output_root: Path,
        profiles: RenditionProfileSet,
        ffmpeg_path: str = "ffmpeg",
        settings: Optional[EncoderSettings] = None,
        launcher: Callable[..., Optional[subprocess.Popen]] = launch_cmd,
        show_cmd: bool = __debug__,
    ):
        self.output_root = Path(output_root)
        self.profiles = profiles
        self.ffmpeg_path = ffmpeg_path
        self.settings = settings or EncoderSettings()
        self.launcher = launcher
        self.show_cmd = show_cmd
        self.jobs: List[TranscodeJob] = []

    def rendition_dir(self, profile: RenditionProfile) -> Path:
        return self.output_root / profile.name

    def build_command(self, selection: MuxSelection, profile: RenditionProfile) -> List[str]:
        """
        Builds the ffmpeg argument list for one rendition.

        Stream maps use the positions inside the video/audio buckets
        (`0:v:N`, `0:a:M`), not container-wide stream indices, so they stay
        correct for containers that interleave stream types.
        """
        s = self.settings
        out_dir = self.rendition_dir(profile)

        cmd = [
            self.ffmpeg_path,
            "-y",
            "-re",
            "-i", str(selection.av_path),
            "-b:v", profile.video_bitrate,
            "-c:v", s.video_encoder,
            "-x264opts", s.x264_options,
            "-pix_fmt", s.pixel_format,
            "-profile:v", s.h264_profile,
            "-r", str(s.frame_rate),
            "-b:a", profile.audio_bitrate,
            "-c:a", s.audio_encoder,
            "-preset", s.preset,
            "-map", f"0:v:{selection.video_index}",
            "-map", f"0:a:{selection.audio_index}",
        ]

        if selection.st_path is not None and selection.subtitle_index is not None:
            cmd += [
                "-vf",
                f"subtitles={escape_filter_value(selection.st_path)}:si={selection.subtitle_index}",
            ]

        cmd += [
            "-hls_list_size", str(s.hls_list_size),
            "-hls_time", str(s.hls_time),
            "-hls_flags", s.hls_flags,
            "-hls_segment_filename", str(out_dir / s.segment_pattern),
            str(out_dir / s.index_name),
        ]
        return cmd

    def launch_all(self, selection: MuxSelection) -> List[TranscodeJob]:
        """
        Starts one encoder per profile, in profile order, without waiting.

        A rendition whose process cannot be started is marked as launch
        failed; the remaining renditions are still started.

        Returns:
            The jobs, in profile order.
        """
        if self.jobs:
            raise TranscodeException("Renditions were already launched by this orchestrator.")

        for profile in self.profiles:
            out_dir = self.rendition_dir(profile)
            job = TranscodeJob(profile, out_dir, self.build_command(selection, profile))
            self.jobs.append(job)

            try:
                out_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error(f"[{profile.name}] Cannot create rendition directory {out_dir}: {e}")
                job.mark_launch_failed(f"Cannot create {out_dir}: {e}")
                continue

            process = self.launcher(
                job.cmd,
                show_cmd=self.show_cmd,
                cmd_log_file_path=out_dir / COMMAND_TEXT,
            )
            if process is None:
                job.mark_launch_failed(f"Could not start {self.ffmpeg_path}")
                logger.error(f"[{profile.name}] Encoder launch failed.")
                continue

            job.mark_running(process)
            logger.info(
                f"[{profile.name}] Started encoder (pid {getattr(process, 'pid', '?')}): "
                f"video {profile.video_bitrate}, audio {profile.audio_bitrate}"
            )
            logger.trace(f"[{profile.name}] {format_cmd(job.cmd)}")

        return self.jobs

    def wait_all(self) -> List[TranscodeJob]:
        """
        Blocks until every launched encoder has exited.

        One waiter thread per running process; statuses are recorded from
        this thread only, as each waiter completes, so every job contributes
        its terminal status exactly once.
        """
        running = [job for job in self.jobs if job.is_running]
        if not running:
            logger.warning("No running encoder to wait for.")
            return self.jobs

        logger.info(f"Waiting on {len(running)} rendition(s) ...")
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=len(running), thread_name_prefix="rendition-wait"
        )
        futures = {executor.submit(job.process.wait): job for job in running}
        try:
            for future in concurrent.futures.as_completed(futures):
                job = futures[future]
                try:
                    return_code = future.result()
                except Exception as exc:
                    logger.error(f"[{job.name}] Waiting on encoder failed: {type(exc).__name__}: {exc}")
                    job.mark_finished(-1)
                    job.error_message = f"Waiting on encoder failed: {exc}"
                    continue

                job.mark_finished(return_code)
                if job.succeeded:
                    logger.info(f"[{job.name}] Encoder finished.")
                else:
                    logger.error(f"[{job.name}] {job.error_message}")
        except KeyboardInterrupt:
            # The waiter threads only return once their encoder exits.
            logger.warning("Interrupted, stopping encoders.")
            self.terminate_all()
            executor.shutdown(wait=False, cancel_futures=True)
            raise

        executor.shutdown(wait=True)
        return self.jobs

    def run(
        self,
        selection: MuxSelection,
        on_launched: Optional[Callable[[List[TranscodeJob]], None]] = None,
    ) -> List[TranscodeJob]:
        """
        Launches all renditions, calls `on_launched` while they run, then
        joins them.
        """
        jobs = self.launch_all(selection)
        if on_launched is not None:
            on_launched(jobs)
        return self.wait_all()

    def terminate_all(self):
        """Asks every still-running encoder to terminate."""
        for job in self.jobs:
            if job.is_running and job.process is not None:
                logger.warning(f"[{job.name}] Terminating encoder.")
                try:
                    job.process.terminate()
                except OSError as e:
                    logger.error(f"[{job.name}] Could not terminate encoder: {e}")

    @property
    def failed_jobs(self) -> List[TranscodeJob]:
        return [job for job in self.jobs if not job.succeeded]

    @property
    def all_succeeded(self) -> bool:
        return bool(self.jobs) and not self.failed_jobs
