"""Query service response schema."""

from pydantic import BaseModel, ConfigDict, Field

from .rendered_artifact import RenderedArtifact


class FileQueryResult(BaseModel):
    """Artifact lookup result; the listing is always present so callers can render navigation on a miss."""

    model_config = ConfigDict(frozen=True)

    path: str | None = Field(default=None, description="Decoded logical path, None for malformed requests")
    artifact: RenderedArtifact | None = Field(default=None)
    listing: list[str] = Field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.artifact is not None
