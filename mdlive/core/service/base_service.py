"""Base service definitions."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..application import Application


class BaseService(ABC):
    """Abstract base class for the surfaces that expose a running pipeline."""

    def __init__(self, app: "Application", **kwargs):
        """Initialize the base service."""
        self.app: "Application" = app
        self.service_config = self.app.service_config
        self.kwargs = kwargs

    @abstractmethod
    def run(self):
        """Run the service until the pipeline shuts down."""
