"""Configuration schemas for service components using Pydantic models."""

import os

from pydantic import BaseModel, ConfigDict, Field


class HttpConfig(BaseModel):
    """Configuration for the HTTP server interface and connection lifecycle."""

    model_config = ConfigDict(extra="allow")

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8080)
    timeout_keep_alive: int = Field(default=3600)
    limit_concurrency: int = Field(default=1000)
    open_browser: bool = Field(default=False)


class RendererConfig(BaseModel):
    """Configuration for the render function backend and its memoization."""

    model_config = ConfigDict(extra="allow")

    backend: str = Field(default="commonmark")
    enable_cache: bool = Field(default=True)
    cache_size: int = Field(default=256)


class FileWatcherConfig(BaseModel):
    """Configuration for the change watcher backend."""

    model_config = ConfigDict(extra="allow")

    backend: str = Field(default="native")
    debounce: int = Field(default=50, description="Milliseconds to group raw backend events")
    poll_delay_ms: int = Field(default=300)


class ServiceConfig(BaseModel):
    """Root configuration schema aggregating all service-level settings and components."""

    model_config = ConfigDict(extra="allow")

    backend: str = Field(default="http")
    app_name: str = Field(default_factory=lambda: os.getenv("APP_NAME", "mdlive"))
    root_dir: str = Field(default_factory=lambda: os.getenv("MDLIVE_ROOT_DIR", "."))

    init_logger: bool = Field(default=True)
    verbose: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_dir: str = Field(default="logs")
    log_to_console: bool = Field(default=True)
    log_to_file: bool = Field(default=False)

    source_suffixes: list[str] = Field(default_factory=lambda: [".md"])
    ignore_dirs: list[str] = Field(default_factory=lambda: [".git"])
    event_queue_size: int = Field(default=4096, description="0 means unbounded")
    build_concurrency: int = Field(default=16)
    build_wait_timeout: float | None = Field(default=None, description="Seconds; None waits unboundedly")
    subscriber_queue_size: int = Field(default=128)

    http: HttpConfig = Field(default_factory=HttpConfig)
    renderer: RendererConfig = Field(default_factory=RendererConfig)
    file_watcher: FileWatcherConfig = Field(default_factory=FileWatcherConfig)

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.verbose else self.log_level
