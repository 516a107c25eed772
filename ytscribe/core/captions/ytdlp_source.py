"""
Caption source that runs the yt-dlp command line tool as a subprocess.

yt-dlp needs a cookie jar and a JavaScript runtime to get past the platform's
bot challenge. Output is written to a per-call temporary directory that is
removed on every exit path.
"""

import json
import asyncio
import tempfile
from pathlib import Path
from typing import List, Optional, Union

from ytscribe.config import config
from ytscribe.core.captions.base import CaptionSource
from ytscribe.core.captions.cookies import cookie_file_readable
from ytscribe.core.captions.parsers import parse_transcript_json3, clean_vtt_content
from ytscribe.core.exceptions import CaptionSourceError
from ytscribe.models.schemas import CaptionLine
from ytscribe.utils.error_handling import log_diagnostic_info
from ytscribe.utils.helpers import truncate_text
from ytscribe.utils.logger import logging

_NO_SUBTITLES_MARKERS = ("no subtitles", "there are no subtitles")


def _first_file(directory: Path, extension: str) -> Optional[Path]:
    files = sorted(directory.glob(f"*{extension}"))
    return files[0] if files else None


class YtDlpCaptionSource(CaptionSource):
    """Fetch auto-generated captions with yt-dlp."""

    name = "yt-dlp"

    def __init__(
        self,
        binary: str = config.YTDLP_BINARY,
        cookies_file: Union[str, Path] = config.COOKIES_FILE,
        js_runtime: str = config.JS_RUNTIME,
        timeout: float = config.YTDLP_TIMEOUT,
    ):
        self.binary = binary
        self.cookies_file = Path(cookies_file)
        self.js_runtime = js_runtime
        self.timeout = timeout

    def build_args(self, video_id: str, language: str, output_dir: Path) -> List[str]:
        """Command line for a subtitle-only run writing into ``output_dir``."""
        return [
            self.binary,
            "--cookies", str(self.cookies_file),
            "--js-runtimes", self.js_runtime,
            "--write-auto-subs",
            "--sub-lang", language,
            "--skip-download",
            "--sub-format", "json3/vtt",
            "--quiet",
            "--no-warnings",
            "-o", str(output_dir / "%(id)s.%(ext)s"),
            f"https://youtube.com/watch?v={video_id}",
        ]

    async def _run(self, args: List[str]) -> None:
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise CaptionSourceError.transient(f"could not start {self.binary}: {e}", self.name) from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise CaptionSourceError.transient(
                f"{self.binary} timed out after {self.timeout:.0f}s", self.name
            )
        finally:
            # Timeouts and cancellation both leave the child running; it must
            # be gone before the output directory is removed
            if process.returncode is None:
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                await process.wait()

        if process.returncode != 0:
            error_output = (stderr or b"").decode("utf-8", errors="replace").strip()
            log_diagnostic_info({
                "source": self.name,
                "returncode": process.returncode,
                "stdout": (stdout or b"").decode("utf-8", errors="replace"),
                "stderr": error_output,
            })
            if any(marker in error_output.lower() for marker in _NO_SUBTITLES_MARKERS):
                raise CaptionSourceError.not_available("no subtitles for this video", self.name)
            logging.error(
                f"{self.binary} exited with {process.returncode}: {truncate_text(error_output, 500)}"
            )
            raise CaptionSourceError.transient(
                f"{self.binary} failed with exit code {process.returncode}", self.name
            )

    def _read_output(self, output_dir: Path) -> List[CaptionLine]:
        json_path = _first_file(output_dir, ".json3")
        if json_path:
            try:
                payload = json.loads(json_path.read_text(encoding="utf-8"))
            except ValueError as e:
                logging.warning(f"Unreadable json3 subtitles at {json_path.name}: {e}")
            else:
                lines = parse_transcript_json3(payload)
                if lines:
                    return lines

        vtt_path = _first_file(output_dir, ".vtt")
        if vtt_path:
            text = clean_vtt_content(vtt_path.read_text(encoding="utf-8", errors="replace"))
            if text:
                # VTT cues carry no usable timing once rolled-up duplicates are stripped
                return [CaptionLine(start=0.0, duration=0.0, text=text)]
            raise CaptionSourceError.not_available("vtt subtitles were empty", self.name)

        raise CaptionSourceError.not_available("no json3 or vtt subtitles produced", self.name)

    async def fetch(self, video_id: str, language: str) -> List[CaptionLine]:
        if not cookie_file_readable(self.cookies_file):
            raise CaptionSourceError.transient(
                f"cookie file not readable at {self.cookies_file}", self.name
            )

        with tempfile.TemporaryDirectory(prefix="ytscribe-") as tmp_dir:
            output_dir = Path(tmp_dir)
            await self._run(self.build_args(video_id, language, output_dir))
            return self._read_output(output_dir)
