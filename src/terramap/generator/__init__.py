"""Map generation pipeline."""

from .pipeline import (
    GeneratedMap,
    MapPipeline,
    MapProgress,
    ProgressCallback,
    generate_map,
)

__all__ = [
    "GeneratedMap",
    "MapPipeline",
    "MapProgress",
    "ProgressCallback",
    "generate_map",
]
