"""Request/response bridge between external callers and the store."""

from loguru import logger

from ..builder import BuildCoordinator
from ..exceptions import PipelineClosedError
from ..schema import FileQueryResult
from ..store import ArtifactStore
from ..utils import decode_request_path


class QueryService:
    """Answers path lookups and listing requests.

    A lookup first waits out any in-flight build of the path, so a request
    that races a rebuild observes the rebuild's result. Misses and malformed
    paths are not errors: they come back as a result without an artifact,
    always together with the current listing.
    """

    def __init__(self, store: ArtifactStore, coordinator: BuildCoordinator):
        self.store: ArtifactStore = store
        self.coordinator: BuildCoordinator = coordinator
        self._closed: bool = False

    def close(self):
        self._closed = True

    def _ensure_open(self):
        if self._closed:
            raise PipelineClosedError("Query service is shut down")

    async def get_file(self, path: str) -> FileQueryResult:
        """Look up the artifact for a request path (percent-encoded or already decoded)."""
        self._ensure_open()

        logical = decode_request_path(path)
        if logical is None:
            logger.debug(f"Rejected malformed request path {path!r}")
            return FileQueryResult(path=None, artifact=None, listing=await self.store.listing())

        await self.coordinator.await_build(logical)

        artifact = await self.store.get(logical)
        listing = await self.store.listing()
        logger.debug(f"Requested file {logical}: {'hit' if artifact else 'miss'}")
        return FileQueryResult(path=logical, artifact=artifact, listing=listing)

    async def get_listing(self) -> list[str]:
        self._ensure_open()
        return await self.store.listing()
