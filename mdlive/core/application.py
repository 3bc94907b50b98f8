"""High-level entry point for configuring and running the mdlive pipeline and its services."""

import asyncio
from pathlib import Path

from loguru import logger

from .builder import BuildCoordinator, BuildPipeline
from .builder.build_coordinator import ReadFunction
from .builder.build_pipeline import DiscoverFunction, WatcherFactory
from .exceptions import PipelineClosedError
from .fanout import SubscriberFanout
from .file_watcher import BaseFileWatcher
from .query import QueryService
from .registry_factory import R
from .renderer import BaseRenderer, CachedRenderer
from .schema import FileQueryResult, ServiceConfig
from .service_context import ServiceContext
from .store import ArtifactStore
from .utils import PydanticConfigParser, init_logger, scan

DISABLED_WATCHER = "none"


class Application:
    """Wires the store, build coordinator, watcher, fan-out and query service together.

    Positional ``args`` are ``key=value`` config overrides; keyword arguments
    not consumed here are merged into the config as well. ``read_file``,
    ``discover``, ``renderer`` and ``watcher_factory`` replace the configured
    implementations, which is mainly useful in tests.
    """

    def __init__(
        self,
        *args,
        config_path: str | None = None,
        root_dir: str | Path | None = None,
        service_config: ServiceConfig | None = None,
        parser: type[PydanticConfigParser] | None = None,
        read_file: ReadFunction | None = None,
        discover: DiscoverFunction | None = None,
        renderer: BaseRenderer | None = None,
        watcher_factory: WatcherFactory | None = None,
        **kwargs,
    ):
        self.service_context = ServiceContext(
            *args,
            service_config=service_config,
            parser=parser,
            config_path=config_path,
            root_dir=str(root_dir) if root_dir is not None else None,
            **kwargs,
        )
        self.read_file: ReadFunction | None = read_file
        self.discover: DiscoverFunction = discover or scan
        self.custom_renderer: BaseRenderer | None = renderer
        self.custom_watcher_factory: WatcherFactory | None = watcher_factory
        self._started: bool = False

    @classmethod
    async def create(cls, *args, **kwargs) -> "Application":
        """Create and start an Application instance asynchronously."""
        instance = cls(*args, **kwargs)
        await instance.start()
        return instance

    @property
    def service_config(self) -> ServiceConfig:
        """Get the service configuration."""
        return self.service_context.service_config

    @property
    def root_dir(self) -> Path:
        return Path(self.service_config.root_dir).expanduser()

    @property
    def pipeline(self) -> BuildPipeline | None:
        return self.service_context.pipeline

    @property
    def store(self) -> ArtifactStore | None:
        return self.service_context.store

    @property
    def shutdown_reason(self) -> str:
        return self.pipeline.shutdown_reason if self.pipeline is not None else ""

    def create_renderer(self) -> BaseRenderer:
        """Instantiate the configured render backend, wrapped in a content-hash cache when enabled."""
        if self.custom_renderer is not None:
            renderer = self.custom_renderer
        else:
            config = self.service_config.renderer
            renderer_cls = R.renderers.resolve(config.backend, "Renderer backend")
            renderer = renderer_cls(**config.model_dump(exclude={"backend", "enable_cache", "cache_size"}))

        if self.service_config.renderer.enable_cache and not isinstance(renderer, CachedRenderer):
            renderer = CachedRenderer(renderer, cache_size=self.service_config.renderer.cache_size)
        return renderer

    def create_watcher_factory(self) -> WatcherFactory | None:
        """Return a callable building the configured watcher around an event queue, or None to disable watching."""
        if self.custom_watcher_factory is not None:
            return self.custom_watcher_factory

        config = self.service_config.file_watcher
        if config.backend == DISABLED_WATCHER:
            logger.info("File watching is disabled")
            return None
        watcher_cls = R.file_watchers.resolve(config.backend, "File watcher backend")
        config_dict = config.model_dump(exclude={"backend"})

        def factory(event_queue: asyncio.Queue) -> BaseFileWatcher:
            return watcher_cls(
                root_dir=self.root_dir,
                event_queue=event_queue,
                suffix_filters=self.service_config.source_suffixes,
                ignore_dirs=self.service_config.ignore_dirs,
                **config_dict,
            )

        return factory

    async def start(self) -> "Application":
        """Build every component and start the pipeline: watch, scan, build, then consume changes."""
        if self._started:
            logger.warning("Application has already started.")
            return self

        config = self.service_config
        if config.init_logger:
            init_logger(
                log_dir=config.log_dir,
                level=config.effective_log_level,
                log_to_console=config.log_to_console,
                log_to_file=config.log_to_file,
                app_name=config.app_name,
            )
        logger.info(f"Init {config.app_name} with config: {config.model_dump_json()}")

        ctx = self.service_context
        ctx.renderer = self.create_renderer()
        ctx.store = ArtifactStore()
        ctx.coordinator = BuildCoordinator(
            root_dir=self.root_dir,
            store=ctx.store,
            renderer=ctx.renderer,
            read_file=self.read_file,
            build_concurrency=config.build_concurrency,
            build_wait_timeout=config.build_wait_timeout,
        )
        ctx.fanout = SubscriberFanout(channel_size=config.subscriber_queue_size)
        ctx.query = QueryService(ctx.store, ctx.coordinator)
        ctx.pipeline = BuildPipeline(
            root_dir=self.root_dir,
            coordinator=ctx.coordinator,
            fanout=ctx.fanout,
            watcher_factory=self.create_watcher_factory(),
            event_queue=asyncio.Queue(maxsize=config.event_queue_size),
            suffixes=config.source_suffixes,
            ignore_dirs=config.ignore_dirs,
            discover=self.discover,
        )

        self._started = True
        await ctx.pipeline.start()
        return self

    async def close(self) -> bool:
        """Refuse new queries, stop the pipeline and release the renderer."""
        if not self._started:
            logger.warning("Application is not started")
            return False

        ctx = self.service_context
        ctx.query.close()
        await ctx.pipeline.close()
        await ctx.renderer.close()

        self._started = False
        return False

    async def __aenter__(self):
        """Async context manager entry."""
        return await self.start()

    async def __aexit__(self, exc_type=None, exc_val=None, exc_tb=None):
        """Async context manager exit."""
        return await self.close()

    def _require_started(self):
        if self.pipeline is None:
            raise PipelineClosedError("Application is not started")

    async def wait_shutdown(self):
        """Block until the pipeline fires its shutdown signal."""
        self._require_started()
        await self.pipeline.shutdown_event.wait()

    def request_shutdown(self, reason: str = ""):
        self._require_started()
        self.pipeline.request_shutdown(reason)

    async def get_file(self, path: str) -> FileQueryResult:
        """Look up the rendered artifact for a request path, together with the listing."""
        self._require_started()
        return await self.service_context.query.get_file(path)

    async def get_listing(self) -> list[str]:
        self._require_started()
        return await self.service_context.query.get_listing()

    async def attach(self) -> tuple[int, asyncio.Queue]:
        """Register a subscriber for change notifications."""
        self._require_started()
        return await self.service_context.fanout.attach()

    async def detach(self, subscriber_id: int) -> bool:
        self._require_started()
        return await self.service_context.fanout.detach(subscriber_id)

    async def wait_idle(self):
        """Wait until every queued change has been built and broadcast."""
        self._require_started()
        await self.pipeline.wait_idle()

    def run_service(self):
        """Run the configured service (HTTP or CMD)."""
        service = R.services.resolve(self.service_config.backend, "Service backend")(app=self)
        service.run()
