from __future__ import annotations

"""
Still-image + narration -> vertical MP4, by shelling out to ffmpeg.

Files are written under random names so concurrent requests never collide;
the staged image and the narration audio are removed after encoding
whatever the outcome.
"""

import mimetypes
import secrets
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .config import (
    AUDIO_BITRATE,
    VIDEO_FPS,
    VIDEO_HEIGHT,
    VIDEO_URL_PREFIX,
    VIDEO_WIDTH,
    Settings,
)
from .errors import EncoderError


def random_name(suffix: str) -> str:
    return f"{secrets.token_hex(6)}{suffix}"


def unlink_quietly(path: Optional[Path]) -> None:
    if path is None:
        return
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.debug("Could not remove temp file {}: {}", path, e)


def image_suffix(content_type: str) -> str:
    suffix = mimetypes.guess_extension((content_type or "").split(";")[0].strip())
    if suffix in (None, ".jpe", ".jpeg"):
        return ".jpg"
    return suffix


def build_ffmpeg_command(binary: str, image_path: Path, audio_path: Path, out_path: Path) -> List[str]:
    w, h = VIDEO_WIDTH, VIDEO_HEIGHT
    vf = f"scale={w}:{h}:force_original_aspect_ratio=decrease,pad={w}:{h}:(ow-iw)/2:(oh-ih)/2"
    return [
        binary, "-y",
        "-loop", "1", "-i", str(image_path),
        "-i", str(audio_path),
        "-vf", vf,
        "-r", str(VIDEO_FPS),
        "-c:v", "libx264",
        "-tune", "stillimage",
        "-pix_fmt", "yuv420p",
        "-c:a", "aac",
        "-b:a", AUDIO_BITRATE,
        "-shortest",
        str(out_path),
    ]


def run(cmd: List[str]) -> None:
    logger.debug("RUN: {}", " ".join(shlex.quote(c) for c in cmd))
    try:
        proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
    except OSError as e:
        raise EncoderError(f"could not start encoder '{cmd[0]}': {e}") from e
    if proc.returncode != 0:
        tail = (proc.stderr or "").strip()[-800:]
        raise EncoderError(f"encoder exited with {proc.returncode}: {tail}")


class VideoEncoder:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.video_dir = Path(settings.video_dir)
        self.tmp_dir = Path(settings.tmp_dir)

    def ensure_dirs(self) -> None:
        self.video_dir.mkdir(parents=True, exist_ok=True)
        self.tmp_dir.mkdir(parents=True, exist_ok=True)

    def stage_audio(self, audio: bytes, suffix: str = ".mp3") -> Path:
        self.ensure_dirs()
        path = self.tmp_dir / random_name(suffix)
        try:
            path.write_bytes(audio)
        except OSError:
            unlink_quietly(path)
            raise
        return path

    def public_url(self, filename: str) -> str:
        rel = f"{VIDEO_URL_PREFIX}/{filename}"
        base = self.settings.public_base_url.rstrip("/")
        return f"{base}{rel}" if base else rel

    def encode(self, image: bytes, audio_path: Path, content_type: str = "image/jpeg") -> str:
        """
        Encode ``image`` + ``audio_path`` to a 1080x1920 MP4 whose length
        follows the audio. Returns the public video URL.

        ``audio_path`` is consumed: it is deleted together with the staged
        image on every path out of here, including failures before ffmpeg
        starts.
        """
        img_path: Optional[Path] = None
        try:
            self.ensure_dirs()
            img_path = self.tmp_dir / random_name(image_suffix(content_type))
            out_path = self.video_dir / random_name(".mp4")
            img_path.write_bytes(image)
            run(build_ffmpeg_command(self.settings.ffmpeg_binary, img_path, audio_path, out_path))
        except OSError as e:
            raise EncoderError(f"could not stage media files: {e}") from e
        finally:
            unlink_quietly(img_path)
            unlink_quietly(audio_path)

        logger.info("Video written to {}", out_path)
        return self.public_url(out_path.name)
