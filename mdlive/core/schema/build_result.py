"""Build outcome schema."""

from pydantic import BaseModel, ConfigDict, Field

from .rendered_artifact import RenderedArtifact


class BuildResult(BaseModel):
    """Outcome of one build, shared by every caller that joined its Build Token."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(default=..., description="Logical path that was built")
    success: bool = Field(default=False)
    is_new: bool = Field(default=False, description="True when the path entered the listing with this build")
    artifact: RenderedArtifact | None = Field(default=None)
    joined: bool = Field(default=False, description="True when the caller waited on another caller's build")
