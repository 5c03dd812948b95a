"""Public API for fractal flame rendering utilities."""

from .canvas import DensityCanvas, create_canvas
from .config import DEFAULT_WORLD, FlameConfig
from .errors import (
    BarrierBroken,
    EmptyTransformationSet,
    FlameError,
    InvalidDimensions,
    ProcessingError,
    RenderError,
    StageError,
    WorkerTimeout,
)
from .geometry import Point, WorldRect
from .pipeline import (
    PipelineResult,
    RenderSummary,
    apply_tone_mapping,
    render,
    row_ranges,
    run_pipeline,
    split_budget,
)
from .renderer import WalkStats, render_walk
from .tone_mapping import GammaLogCorrection, GlobalMax, ToneMappingStage, normalize
from .transformations import Transformation, Variation

__all__ = [
    "BarrierBroken",
    "DEFAULT_WORLD",
    "DensityCanvas",
    "EmptyTransformationSet",
    "FlameConfig",
    "FlameError",
    "GammaLogCorrection",
    "GlobalMax",
    "InvalidDimensions",
    "PipelineResult",
    "Point",
    "ProcessingError",
    "RenderError",
    "RenderSummary",
    "StageError",
    "ToneMappingStage",
    "Transformation",
    "Variation",
    "WalkStats",
    "WorkerTimeout",
    "WorldRect",
    "apply_tone_mapping",
    "create_canvas",
    "normalize",
    "render",
    "render_walk",
    "row_ranges",
    "run_pipeline",
    "split_budget",
]
