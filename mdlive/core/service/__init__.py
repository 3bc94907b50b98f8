"""service"""

from .base_service import BaseService
from .cmd_service import CmdService
from .http_service import HttpService
from ..registry_factory import R

__all__ = [
    "BaseService",
    "CmdService",
    "HttpService",
]

R.services.register("cmd")(CmdService)
R.services.register("http")(HttpService)
