"""Headless service: keeps the pipeline running and logs every broadcast."""

import asyncio

from loguru import logger

from .base_service import BaseService
from ..fanout import iter_events
from ..utils import run_coro_safely


class CmdService(BaseService):
    """Runs the build pipeline without an HTTP surface, until shutdown or Ctrl-C."""

    async def _log_events(self):
        _subscriber_id, channel = await self.app.attach()
        async for event in iter_events(channel):
            if event.listing is not None:
                logger.info(f"Listing changed ({len(event.listing)} files)")
            else:
                logger.info(f"Rebuilt {event.path} ({event.artifact.word_count} words)")

    async def execute(self):
        async with self.app:
            log_task = asyncio.create_task(self._log_events())
            try:
                await self.app.wait_shutdown()
            finally:
                log_task.cancel()
        logger.info(f"Pipeline stopped: {self.app.shutdown_reason}")

    def run(self):
        """Run the pipeline in the foreground until it shuts down."""
        try:
            run_coro_safely(self.execute())
        except KeyboardInterrupt:
            logger.info("Interrupted")
