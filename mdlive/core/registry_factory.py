"""Name registries for the pluggable backends: renderers, change watchers and services."""

import inspect
from typing import Callable, TypeVar

from .base_context import BaseContext
from .utils import singleton

T = TypeVar("T")


class Registry(BaseContext):
    """Maps configuration names to backend classes; filled through the ``register`` decorator."""

    def register(self, name: str | type = "") -> Callable[[type[T]], type[T]] | type[T]:
        """Register a class under ``name``, or under its class name when used bare."""
        if inspect.isclass(name):
            self[name.__name__] = name
            return name

        def decorator(cls: type[T]) -> type[T]:
            self[name or cls.__name__] = cls
            return cls

        return decorator

    def resolve(self, name: str, kind: str = "backend") -> type:
        """Return the class registered as ``name`` or fail with the list of known names."""
        if name not in self:
            raise ValueError(f"{kind} {name!r} is not supported, choose one of {sorted(self)}")
        return self[name]


@singleton
class RegistryFactory:
    """One registry per backend family, selected by the ``backend`` keys of ServiceConfig."""

    def __init__(self):
        self.renderers = Registry()
        self.file_watchers = Registry()
        self.services = Registry()


R = RegistryFactory()
