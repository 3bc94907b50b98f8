"""Rendered artifact schema."""

from pydantic import BaseModel, ConfigDict, Field


class RenderedArtifact(BaseModel):
    """Immutable result of rendering one source document."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(default="", description="Rendered HTML")
    word_count: int = Field(default=0, description="Number of words in the source text")
    source_hash: str = Field(default="", description="Hash of the source text the artifact was rendered from")
    renderer: str = Field(default="", description="Name of the renderer that produced the artifact")
    is_error: bool = Field(default=False, description="True when the content is a substituted error message")
