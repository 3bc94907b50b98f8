"""Renderer that shells out to pandoc."""

import asyncio
import shutil
import subprocess

from loguru import logger

from .base_renderer import BaseRenderer
from ..exceptions import RenderError
from ..schema import RenderedArtifact

PANDOC_FAILED = "Parsing markdown with pandoc failed"


class PandocRenderer(BaseRenderer):
    """Converts markdown to HTML5 with an external ``pandoc`` process.

    ``render_html`` raises RenderError when pandoc cannot run or fails.
    ``async_render`` never raises: the artifact carries a visible error
    message instead, so a missing or crashing pandoc only affects the page
    it renders.
    """

    name = "pandoc"

    def __init__(self, executable: str = "pandoc", from_format: str = "markdown", timeout: float = 30.0, **kwargs):
        super().__init__(**kwargs)
        self.executable: str = executable
        self.from_format: str = from_format
        self.timeout: float = timeout

    @property
    def command(self) -> list[str]:
        return [self.executable, "-f", self.from_format, "-t", "html5", "-", "-o", "-"]

    def is_available(self) -> bool:
        return shutil.which(self.executable) is not None

    def render_html(self, text: str) -> str:
        try:
            completed = subprocess.run(
                self.command,
                input=text.encode("utf-8"),
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise RenderError(f"Could not run {self.executable}: {e}") from e

        if completed.returncode != 0:
            raise RenderError(f"{self.executable} exited with {completed.returncode}: {completed.stderr.decode(errors='replace')}")
        return completed.stdout.decode("utf-8", errors="replace")

    async def async_render(self, text: str) -> RenderedArtifact:
        """Run pandoc as an asyncio subprocess so the build task suspends instead of holding a thread."""
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error(f"Could not start {self.executable}: {e}")
            return self.make_artifact(text, PANDOC_FAILED, is_error=True)

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(text.encode("utf-8")), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            logger.error(f"{self.executable} timed out after {self.timeout}s")
            return self.make_artifact(text, PANDOC_FAILED, is_error=True)

        if process.returncode != 0:
            logger.error(f"{self.executable} exited with {process.returncode}: {stderr.decode(errors='replace')}")
            return self.make_artifact(text, PANDOC_FAILED, is_error=True)
        return self.make_artifact(text, stdout.decode("utf-8", errors="replace"))
