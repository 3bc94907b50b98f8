"""builder"""

from .build_coordinator import BuildCoordinator, read_source_file
from .build_pipeline import BuildPipeline

__all__ = [
    "BuildCoordinator",
    "BuildPipeline",
    "read_source_file",
]
