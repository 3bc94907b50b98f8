"""schema"""

from .broadcast_event import BroadcastEvent
from .build_result import BuildResult
from .file_change import FileChange
from .file_query_result import FileQueryResult
from .rendered_artifact import RenderedArtifact
from .service_config import FileWatcherConfig, HttpConfig, RendererConfig, ServiceConfig

__all__ = [
    "BroadcastEvent",
    "BuildResult",
    "FileChange",
    "FileQueryResult",
    "FileWatcherConfig",
    "HttpConfig",
    "RenderedArtifact",
    "RendererConfig",
    "ServiceConfig",
]
