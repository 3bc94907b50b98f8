"""Subscriber broadcast event schema."""

from pydantic import BaseModel, ConfigDict, Field

from .rendered_artifact import RenderedArtifact
from ..enumeration import BroadcastKind


class BroadcastEvent(BaseModel):
    """Notification pushed to every live subscriber."""

    model_config = ConfigDict(frozen=True)

    kind: BroadcastKind = Field(default=...)
    path: str | None = Field(default=None)
    artifact: RenderedArtifact | None = Field(default=None)
    listing: list[str] | None = Field(default=None)

    @classmethod
    def artifact_changed(cls, path: str, artifact: RenderedArtifact) -> "BroadcastEvent":
        return cls(kind=BroadcastKind.ARTIFACT_CHANGED, path=path, artifact=artifact)

    @classmethod
    def listing_changed(cls, listing: list[str], path: str | None = None) -> "BroadcastEvent":
        return cls(kind=BroadcastKind.LISTING_CHANGED, path=path, listing=list(listing))

    @classmethod
    def exit(cls) -> "BroadcastEvent":
        return cls(kind=BroadcastKind.EXIT)
