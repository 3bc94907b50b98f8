"""Service context."""

from typing import TYPE_CHECKING

from loguru import logger

from .base_context import BaseContext
from .schema import ServiceConfig
from .utils import load_env, PydanticConfigParser

if TYPE_CHECKING:
    from .builder import BuildCoordinator, BuildPipeline
    from .fanout import SubscriberFanout
    from .query import QueryService
    from .renderer import BaseRenderer
    from .store import ArtifactStore


class ServiceContext(BaseContext):
    """Holds the parsed configuration and the pipeline components built from it."""

    def __init__(
        self,
        *args,
        service_config: ServiceConfig | None = None,
        parser: type[PydanticConfigParser] | None = None,
        config_path: str | None = None,
        root_dir: str | None = None,
        **kwargs,
    ):
        super().__init__()

        load_env()

        if service_config is None:
            parser_class = parser if parser is not None else PydanticConfigParser
            parser_instance = parser_class(ServiceConfig)
            input_args = []
            if config_path:
                input_args.append(f"config={config_path}")
            if args:
                input_args.extend(args)
            if root_dir:
                kwargs["root_dir"] = str(root_dir)

            logger.debug(f"update with args: {input_args} kwargs: {kwargs}")
            service_config = parser_instance.parse_args(*input_args, **kwargs)

        self.service_config: ServiceConfig = service_config

        self.renderer: "BaseRenderer | None" = None
        self.store: "ArtifactStore | None" = None
        self.coordinator: "BuildCoordinator | None" = None
        self.fanout: "SubscriberFanout | None" = None
        self.query: "QueryService | None" = None
        self.pipeline: "BuildPipeline | None" = None
