"""Static video assembly: one still image held for the length of an audio track.

The image is painted once onto a black 1280x720 surface and muxed with the
audio by ffmpeg into a WebM container (VP9 + Opus). The output runs for the
audio's duration plus a short grace period.
"""

import asyncio
import enum
import io
import logging
import math
import os
import shutil
import tempfile
from concurrent.futures import ThreadPoolExecutor

import requests
from PIL import Image, UnidentifiedImageError

from podcast_producer import config
from podcast_producer.assembly import probe_audio_duration_async
from podcast_producer.constants import (
    FALLBACK_DURATION_S,
    HTTP_TIMEOUT_S,
    MEDIA_LOAD_TIMEOUT_S,
    PROGRESS_INTERVAL_S,
    STOP_GRACE_S,
    VIDEO_BITRATE,
    VIDEO_FPS,
    VIDEO_HEIGHT,
    VIDEO_MIME_TYPE,
    VIDEO_WIDTH,
)
from podcast_producer.errors import (
    AudioLoadError,
    ImageLoadError,
    MediaTimeoutError,
    RecorderError,
)
from podcast_producer.media import load_source
from podcast_producer.models import VideoBlob

logger = logging.getLogger(__name__)


class JobState(enum.Enum):
    LOADING_MEDIA = "loading_media"
    READY = "ready"
    RECORDING = "recording"
    STOPPING = "stopping"
    DONE = "done"
    FAILED = "failed"


def load_image(url: str, timeout: float = HTTP_TIMEOUT_S) -> Image.Image:
    """Fetch and decode an image, returned as RGB."""
    try:
        data = load_source(url, timeout=timeout)
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError, requests.RequestException) as e:
        raise ImageLoadError("Unable to load image") from e
    return image.convert("RGB")


async def load_audio(url: str, path: str, timeout: float = HTTP_TIMEOUT_S, executor=None) -> float:
    """Fetch an audio source into path and probe its duration (may be NaN).

    The download runs on `executor`; the probe is a child process that dies
    with the awaiting task.
    """
    loop = asyncio.get_running_loop()
    try:
        data = await loop.run_in_executor(executor, load_source, url, timeout)
    except (OSError, ValueError, requests.RequestException) as e:
        raise AudioLoadError("Unable to load audio") from e
    with open(path, "wb") as f:
        f.write(data)
    return await probe_audio_duration_async(path)


def resolve_duration(duration: float, fallback: float = FALLBACK_DURATION_S) -> float:
    """Usable recording length for a probed duration."""
    if duration is None or not math.isfinite(duration) or duration <= 0:
        logger.warning("Audio reported no usable duration (%s), assuming %.0fs", duration, fallback)
        return fallback
    return duration


def render_frame(image: Image.Image, width: int = VIDEO_WIDTH, height: int = VIDEO_HEIGHT) -> Image.Image:
    """Aspect-fit image onto a black canvas, centred."""
    canvas = Image.new("RGB", (width, height), (0, 0, 0))
    scale = min(width / image.width, height / image.height)
    size = (max(1, round(image.width * scale)), max(1, round(image.height * scale)))
    fitted = image.resize(size, Image.Resampling.LANCZOS)
    canvas.paste(fitted, ((width - size[0]) // 2, (height - size[1]) // 2))
    return canvas


def build_ffmpeg_command(
    frame_path: str,
    audio_path: str,
    output_path: str,
    length: float,
    fps: int = VIDEO_FPS,
    ffmpeg: str = "ffmpeg",
) -> list[str]:
    """ffmpeg invocation looping one frame under padded audio for `length` seconds."""
    return [
        ffmpeg, "-y", "-hide_banner", "-loglevel", "error", "-nostats",
        "-loop", "1", "-framerate", str(fps), "-i", frame_path,
        "-i", audio_path,
        "-filter_complex", "[1:a]apad[a]",
        "-map", "0:v", "-map", "[a]",
        "-t", f"{length:.3f}",
        "-c:v", "libvpx-vp9", "-b:v", VIDEO_BITRATE, "-pix_fmt", "yuv420p",
        "-c:a", "libopus",
        "-progress", "pipe:1", "-stats_period", str(PROGRESS_INTERVAL_S),
        "-f", "webm",
        output_path,
    ]


class StaticVideoAssembler:
    """One video-generation job. Create a new instance per request."""

    def __init__(
        self,
        image_url: str,
        audio_url: str,
        on_progress=None,
        width: int = VIDEO_WIDTH,
        height: int = VIDEO_HEIGHT,
        fps: int = VIDEO_FPS,
        load_timeout: float = MEDIA_LOAD_TIMEOUT_S,
        fallback_duration: float = FALLBACK_DURATION_S,
        grace: float = STOP_GRACE_S,
        ffmpeg: str | None = None,
    ):
        self.image_url = image_url
        self.audio_url = audio_url
        self.on_progress = on_progress
        self.width = width
        self.height = height
        self.fps = fps
        self.load_timeout = load_timeout
        self.fallback_duration = fallback_duration
        self.grace = grace
        self.ffmpeg = ffmpeg or config.FFMPEG_BINARY
        self.state = JobState.LOADING_MEDIA
        self.duration = None
        self._image = None
        self._process = None
        self._stop_event = None
        self._stop_requested = False

    def stop(self) -> None:
        """Ask a running recording to finish early. The output stays valid."""
        self._stop_requested = True
        if self._stop_event is not None:
            self._stop_event.set()

    def _report(self, percent: float) -> None:
        if self.on_progress:
            self.on_progress(percent)

    async def run(self) -> VideoBlob:
        """Load media, record, and return the finished container."""
        self._stop_event = asyncio.Event()
        if self._stop_requested:
            self._stop_event.set()
        workdir = tempfile.mkdtemp(prefix="podcast-video-")
        try:
            await self._load_media(workdir)
            self.state = JobState.READY

            frame_path = os.path.join(workdir, "frame.png")
            render_frame(self._image, self.width, self.height).save(frame_path)

            output_path = os.path.join(workdir, "video.webm")
            await self._record(frame_path, os.path.join(workdir, "audio"), output_path)

            with open(output_path, "rb") as f:
                data = f.read()
            if not data:
                raise RecorderError("Recorder produced an empty video")
        except BaseException:
            self.state = JobState.FAILED
            raise
        finally:
            await self._release()
            shutil.rmtree(workdir, ignore_errors=True)

        self.state = JobState.DONE
        self._report(100)
        return VideoBlob(data=data, mime_type=VIDEO_MIME_TYPE)

    async def _load_media(self, workdir: str) -> None:
        # Job-owned pool, abandoned without waiting in the finally below
        loop = asyncio.get_running_loop()
        executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="podcast-media")
        audio_path = os.path.join(workdir, "audio")
        image_task = asyncio.ensure_future(
            loop.run_in_executor(executor, load_image, self.image_url, self.load_timeout)
        )
        audio_task = asyncio.ensure_future(asyncio.wait_for(
            load_audio(self.audio_url, audio_path, self.load_timeout, executor),
            timeout=self.load_timeout,
        ))
        try:
            self._image, duration = await asyncio.gather(image_task, audio_task)
        except asyncio.TimeoutError as e:
            raise MediaTimeoutError("Audio loading timed out") from e
        finally:
            for task in (image_task, audio_task):
                task.cancel()
            executor.shutdown(wait=False, cancel_futures=True)
        self.duration = resolve_duration(duration, self.fallback_duration)

    async def _record(self, frame_path: str, audio_path: str, output_path: str) -> None:
        length = self.duration + self.grace
        cmd = build_ffmpeg_command(frame_path, audio_path, output_path, length, self.fps, self.ffmpeg)
        logger.info("Recording %.1fs static video", length)

        try:
            self._process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise RecorderError(f"Unable to start ffmpeg: {e}") from e
        self.state = JobState.RECORDING
        process = self._process

        reader = asyncio.create_task(self._read_progress(process.stdout))
        errors = asyncio.create_task(process.stderr.read())
        stopper = asyncio.create_task(self._stop_event.wait())
        try:
            await asyncio.wait({reader, stopper}, return_when=asyncio.FIRST_COMPLETED)
            self.state = JobState.STOPPING
            if not reader.done() and process.returncode is None:
                logger.info("Stop requested, finalising video early")
                try:
                    process.stdin.write(b"q")
                    await process.stdin.drain()
                except (BrokenPipeError, ConnectionResetError):
                    # ffmpeg already exited on its own
                    logger.debug("ffmpeg closed stdin before stop request")
            await reader
            returncode = await process.wait()
            stderr = (await errors).decode("utf-8", "ignore").strip()
        finally:
            for task in (reader, errors, stopper):
                task.cancel()

        if returncode != 0 and not self._stop_event.is_set():
            logger.error("ffmpeg exited with %s: %s", returncode, stderr)
            raise RecorderError(f"Recorder error: {stderr or f'exit code {returncode}'}")

    async def _read_progress(self, stream) -> None:
        """Translate ffmpeg -progress key=value lines into percentages."""
        while True:
            line = await stream.readline()
            if not line:
                return
            key, _, value = line.decode("utf-8", "ignore").strip().partition("=")
            if key == "out_time_us" and value.lstrip("-").isdigit():
                elapsed = int(value) / 1_000_000
                self._report(min(max(elapsed, 0) / self.duration * 100, 99))
            elif key == "progress" and value == "end":
                return

    async def _release(self) -> None:
        process = self._process
        self._process = None
        if process is not None and process.returncode is None:
            process.kill()
            await process.wait()


async def generate_static_video(image_url: str, audio_url: str, on_progress=None, **kwargs) -> VideoBlob:
    """Assemble a static video from an image URL and an audio URL."""
    assembler = StaticVideoAssembler(image_url, audio_url, on_progress=on_progress, **kwargs)
    return await assembler.run()
