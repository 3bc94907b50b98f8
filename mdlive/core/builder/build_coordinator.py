"""Single-flight build coordination.

Turns a raw source read into a stored artifact exactly once per logical
change. While a build for a path is in flight its Build Token sits in the
registry; other callers for the same path wait on the token instead of
starting a second render, and readers use ``await_build`` to observe the
result of the in-flight build rather than a stale artifact.
"""

import asyncio
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from loguru import logger

from ..exceptions import SourceReadError
from ..renderer import BaseRenderer
from ..schema import BuildResult, RenderedArtifact
from ..store import ArtifactStore
from ..utils import call_maybe_async, join_root, to_logical_path

ReadFunction = Callable[[Path], Any]


def read_source_file(path: Path) -> str:
    """Default read function: the whole file as UTF-8 text."""
    return Path(path).read_text(encoding="utf-8")


class BuildCoordinator:
    """Owns all writes to the artifact store and the Build Token registry."""

    def __init__(
        self,
        root_dir: str | Path,
        store: ArtifactStore,
        renderer: BaseRenderer,
        read_file: ReadFunction | None = None,
        build_concurrency: int = 16,
        build_wait_timeout: float | None = None,
    ):
        self.root_dir: Path = Path(root_dir)
        self.store: ArtifactStore = store
        self.renderer: BaseRenderer = renderer
        self.read_file: ReadFunction = read_file or read_source_file
        self.build_concurrency: int = max(1, build_concurrency)
        self.build_wait_timeout: float | None = build_wait_timeout

        # logical path -> future resolved with the BuildResult when the build ends
        self._tokens: dict[str, asyncio.Future] = {}

    def is_building(self, path: str) -> bool:
        return to_logical_path(path) in self._tokens

    @property
    def in_flight(self) -> list[str]:
        return list(self._tokens)

    async def await_build(self, path: str, timeout: float | None = None) -> BuildResult | None:
        """Block until the in-flight build of ``path`` finishes; return at once when there is none.

        Returns the finished build's result, or None when nothing was in
        flight or the wait timed out.
        """
        logical = to_logical_path(path)
        token = self._tokens.get(logical)
        if token is None:
            return None

        timeout = timeout if timeout is not None else self.build_wait_timeout
        logger.debug(f"Waiting for build of {logical}")
        try:
            # shield: a cancelled waiter must not cancel the token other callers share
            if timeout is None:
                return await asyncio.shield(token)
            return await asyncio.wait_for(asyncio.shield(token), timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Gave up waiting for build of {logical} after {timeout}s")
            return None

    async def build(self, path: str) -> BuildResult:
        """Read, render and store ``path``.

        When a build of the same path is already in flight this call joins it
        and returns its result instead of rendering again.
        """
        logical = to_logical_path(path)

        token = self._tokens.get(logical)
        if token is not None:
            logger.debug(f"Joining in-flight build of {logical}")
            result: BuildResult = await asyncio.shield(token)
            return result.model_copy(update={"joined": True})

        # No await between the lookup above and this registration.
        token = asyncio.get_running_loop().create_future()
        self._tokens[logical] = token

        result = BuildResult(path=logical, success=False)
        try:
            result = await self._process(logical)
        finally:
            if self._tokens.get(logical) is token:
                del self._tokens[logical]
            if not token.done():
                token.set_result(result)

        return result

    async def rebuild(self, path: str) -> BuildResult:
        """Wait out any racing build, then build again so the latest source is rendered."""
        await self.await_build(path)
        return await self.build(path)

    async def build_all(self, paths: Iterable[str]) -> list[BuildResult]:
        """Build a batch concurrently with at most ``build_concurrency`` renders at a time."""
        semaphore = asyncio.Semaphore(self.build_concurrency)

        async def _bounded_build(path: str) -> BuildResult:
            async with semaphore:
                return await self.build(path)

        paths = list(paths)
        logger.debug(f"About to process files: {paths}")
        results: list[BuildResult] = list(await asyncio.gather(*[_bounded_build(path) for path in paths]))

        failed = [result.path for result in results if not result.success]
        logger.info(f"Built {len(results) - len(failed)}/{len(results)} files")
        if failed:
            logger.warning(f"Could not build: {failed}")
        return results

    async def _render(self, logical: str, text: str) -> RenderedArtifact:
        try:
            return await self.renderer.async_render(text)
        except Exception as e:
            logger.exception(f"Rendering {logical} failed: {e}")
            return self.renderer.error_artifact(text, e)

    async def _process(self, logical: str) -> BuildResult:
        source_path = join_root(self.root_dir, logical)
        logger.debug(f"Processing file {logical}")

        try:
            text = await call_maybe_async(self.read_file, source_path)
        except (OSError, UnicodeDecodeError, SourceReadError) as e:
            logger.error(f"Error occurred reading file {source_path}: {e}")
            return BuildResult(path=logical, success=False)
        except Exception as e:
            logger.exception(f"Read function failed for {source_path}: {e}")
            return BuildResult(path=logical, success=False)

        artifact = await self._render(logical, text)
        is_new = await self.store.put(logical, artifact)

        logger.debug(f"Processed file {logical}")
        return BuildResult(path=logical, success=True, is_new=is_new, artifact=artifact)
