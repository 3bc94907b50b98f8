"""Normalized change watcher event."""

from pydantic import BaseModel, ConfigDict, Field

from ..enumeration import ChangeKind


class FileChange(BaseModel):
    """One qualifying change below the watched root.

    ``path`` is relative to the root in posix form; it is empty for ``EXIT``.
    """

    model_config = ConfigDict(frozen=True)

    kind: ChangeKind = Field(default=...)
    path: str = Field(default="")
    reason: str = Field(default="", description="Failure description carried by EXIT events")
