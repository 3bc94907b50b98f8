"""Core"""

from . import builder
from . import enumeration
from . import fanout
from . import file_watcher
from . import query
from . import renderer
from . import schema
from . import service
from . import store
from . import utils
from .application import Application
from .base_context import BaseContext
from .registry_factory import R, Registry, RegistryFactory
from .service_context import ServiceContext

__all__ = [
    # Submodules
    "builder",
    "enumeration",
    "fanout",
    "file_watcher",
    "query",
    "renderer",
    "schema",
    "service",
    "store",
    "utils",
    # Classes
    "Application",
    "BaseContext",
    "R",
    "Registry",
    "RegistryFactory",
    "ServiceContext",
]
