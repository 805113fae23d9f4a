from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Sequence

from loguru import logger

from ..cli import prompt_stream_index
from ..domain.media import StreamDescriptor, StreamInventory, probe_container
from ..domain.rendition import RenditionProfileSet
from ..domain.selection import MuxSelection, SelectionResolver
from ..services.logging_service import ErrorLog, SummaryLog
from ..services.manifest_writer import ManifestWriter
from ..services.transcode_orchestrator import EncoderSettings, TranscodeOrchestrator
from ..utils.ffmpeg_utils import format_cmd
from ..utils.format_utils import format_timedelta, format_timestamp

StreamChooser = Callable[[str, Sequence[StreamDescriptor]], int]


class HlsPipeline:
    """
    Drives one run: probe, select, fan out the encoders, write the master
    playlist, join, and report.

    Probing and selection errors propagate (they abort the run before any
    encoder starts). Encoder failures are collected and reflected in the
    exit status returned by `run()`.
    """

    def __init__(
        self,
        av_path: str,
        st_path: Optional[str],
        output_root: Path,
        profiles: RenditionProfileSet,
        manifest_name: str,
        ffmpeg_path: str = "ffmpeg",
        ffprobe_path: str = "ffprobe",
        settings: Optional[EncoderSettings] = None,
        chooser: StreamChooser = prompt_stream_index,
        orchestrator: Optional[TranscodeOrchestrator] = None,
    ):
        self.av_path = av_path
        self.st_path = st_path
        self.output_root = Path(output_root)
        self.profiles = profiles
        self.ffprobe_path = ffprobe_path
        self.chooser = chooser
        self.orchestrator = orchestrator or TranscodeOrchestrator(
            self.output_root, profiles, ffmpeg_path=ffmpeg_path, settings=settings
        )
        self.manifest_writer = ManifestWriter(self.output_root, profiles, manifest_name)
        self.manifest_error: Optional[str] = None
        self.selection: Optional[MuxSelection] = None

    def read_inventories(self):
        logger.info(f"probing input file: {self.av_path}")
        primary = StreamInventory.from_primary(probe_container(self.av_path, self.ffprobe_path))

        secondary = None
        if self.st_path is not None:
            logger.info(f"probing subs: {self.st_path}")
            secondary = StreamInventory.from_secondary(probe_container(self.st_path, self.ffprobe_path))

        logger.info("finished reading stream data")
        logger.info(f"video\t{len(primary.video)}")
        logger.info(f"audio\t{len(primary.audio)}")
        if secondary is not None:
            logger.info(f"subs\t{len(secondary.subtitle)}")
            logger.info(f"attach\t{len(secondary.attachment)}")
        return primary, secondary

    def select_streams(self, primary: StreamInventory, secondary: Optional[StreamInventory]) -> MuxSelection:
        resolver = SelectionResolver(primary, secondary)
        resolver.ensure_selectable()

        video_index = self.chooser("video", primary.video)
        audio_index = self.chooser("audio", primary.audio)

        st_path = self.st_path
        subtitle_index = None
        if secondary is not None:
            if secondary.subtitle:
                subtitle_index = self.chooser("subs", secondary.subtitle)
            else:
                logger.warning(f"No subtitle stream found in {st_path}; continuing without subtitles.")
                st_path = None

        return resolver.resolve(
            self.av_path,
            video_index,
            audio_index,
            st_path=st_path,
            subtitle_index=subtitle_index,
        )

    def _write_manifest(self, jobs):
        if not any(job.is_running for job in jobs):
            logger.warning("No encoder is running; the master playlist is written anyway.")
        try:
            self.manifest_writer.write()
        except OSError as e:
            self.manifest_error = str(e)
            logger.error(f"Could not write master playlist {self.manifest_writer.manifest_path}: {e}")

    def run(self) -> int:
        """
        Executes the run.

        Returns:
            0 if every rendition encoded successfully and the master playlist
            was written, otherwise 1.
        """
        start = datetime.now()
        primary, secondary = self.read_inventories()
        self.selection = self.select_streams(primary, secondary)
        logger.info(f"Selection: {self.selection}")

        try:
            jobs = self.orchestrator.run(self.selection, on_launched=self._write_manifest)
        except KeyboardInterrupt:
            logger.warning("Run interrupted.")
            self.orchestrator.terminate_all()
            raise

        elapsed = datetime.now() - start
        self._write_reports(jobs, start, elapsed)

        failed = self.orchestrator.failed_jobs
        if failed:
            logger.error(f"{len(failed)} of {len(jobs)} rendition(s) failed: {', '.join(j.name for j in failed)}")
        if failed or self.manifest_error:
            return 1
        logger.info(f"All {len(jobs)} rendition(s) finished in {format_timedelta(elapsed)}")
        return 0

    def _write_reports(self, jobs, start: datetime, elapsed):
        error_log = None
        for job in jobs:
            if job.succeeded:
                continue
            error_log = error_log or ErrorLog(self.output_root)
            error_log.write(
                f"Rendition: {job.name}",
                f"Status: {job.status}",
                f"Reason: {job.error_message}",
                f"Command: {format_cmd(job.cmd)}",
            )

        selection = self.selection
        SummaryLog(self.output_root).write(
            {
                "started_at": format_timestamp(start),
                "elapsed": format_timedelta(elapsed),
                "input": selection.av_path,
                "subtitle_input": selection.st_path,
                "video_track": selection.video_index,
                "audio_track": selection.audio_index,
                "subtitle_track": selection.subtitle_index,
                "manifest": str(self.manifest_writer.manifest_path),
                "manifest_error": self.manifest_error,
            },
            [job.as_dict() for job in jobs],
        )
