"""Layered configuration parsing into pydantic models.

Configuration is assembled from three layers, later layers winning:

1. the packaged ``default.yaml``
2. an optional YAML file given as ``config=<name or path>``
3. dotted ``key=value`` overrides, e.g. ``http.port=9000``

Override values are parsed with ``yaml.safe_load`` so ``true``, ``8080`` and
``[".md", ".markdown"]`` arrive typed.
"""

import copy
from pathlib import Path
from typing import Generic, TypeVar

import yaml
from loguru import logger
from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class PydanticConfigParser(Generic[T]):
    """Parse command line style arguments into a validated config model."""

    default_config_name: str = "default"

    def __init__(self, config_class: type[T], config_dir: str | Path | None = None):
        self.config_class: type[T] = config_class
        self.config_dir: Path = Path(config_dir) if config_dir else Path(__file__).parent.parent.parent / "config"

    @staticmethod
    def load_yaml(path: str | Path) -> dict:
        """Load a YAML mapping from ``path``; an empty file yields an empty dict."""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
        return data

    def resolve_config_path(self, config: str) -> Path:
        """Resolve ``config`` either as a file path or as a name in the packaged config dir."""
        path = Path(config)
        if path.suffix in (".yaml", ".yml") and path.is_file():
            return path

        candidate = self.config_dir / f"{config}.yaml"
        if candidate.is_file():
            return candidate

        raise FileNotFoundError(f"Config {config} not found (looked for {path} and {candidate})")

    @classmethod
    def merge(cls, base: dict, update: dict) -> dict:
        """Recursively merge ``update`` into a copy of ``base``."""
        merged = copy.deepcopy(base)
        for key, value in update.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = cls.merge(merged[key], value)
            else:
                merged[key] = copy.deepcopy(value)
        return merged

    @staticmethod
    def set_dotted(config: dict, dotted_key: str, value) -> None:
        """Assign ``value`` at ``a.b.c`` inside ``config``, creating mappings on the way."""
        keys = dotted_key.split(".")
        node = config
        for key in keys[:-1]:
            child = node.get(key)
            if not isinstance(child, dict):
                child = {}
                node[key] = child
            node = child
        node[keys[-1]] = value

    @staticmethod
    def split_arg(arg: str) -> tuple[str, object]:
        """Split ``key=value``; a bare ``key`` means ``key=true``."""
        if "=" not in arg:
            return arg.strip().lstrip("-").replace("-", "_"), True

        key, raw_value = arg.split("=", 1)
        key = key.strip().lstrip("-").replace("-", "_")
        try:
            value = yaml.safe_load(raw_value) if raw_value else ""
        except yaml.YAMLError:
            value = raw_value
        return key, value

    def parse_dict(self, *args: str) -> dict:
        """Build the merged configuration mapping without validating it."""
        overrides: list[tuple[str, object]] = [self.split_arg(arg) for arg in args if arg]

        config_name = self.default_config_name
        for key, value in overrides:
            if key == "config":
                config_name = str(value)

        default_path = self.config_dir / f"{self.default_config_name}.yaml"
        config_dict: dict = self.load_yaml(default_path) if default_path.is_file() else {}

        if config_name != self.default_config_name:
            config_path = self.resolve_config_path(config_name)
            logger.debug(f"Loading config from {config_path}")
            config_dict = self.merge(config_dict, self.load_yaml(config_path))

        for key, value in overrides:
            if key == "config":
                continue
            self.set_dotted(config_dict, key, value)

        return config_dict

    def parse_args(self, *args: str, **kwargs) -> T:
        """Parse ``args`` into a validated ``config_class`` instance.

        Keyword arguments are merged last, with nested dicts merged per key.
        """
        config_dict = self.parse_dict(*args)
        if kwargs:
            config_dict = self.merge(config_dict, kwargs)
        return self.config_class.model_validate(config_dict)
