"""Limits, defaults and the run configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .errors import InvalidDimensions
from .geometry import WorldRect
from .transformations import Variation, ensure_non_empty

DEFAULT_WORLD = WorldRect(x0=-1.77, y0=-1.0, width=3.54, height=2.0)

MAX_WIDTH = 1920
MAX_HEIGHT = 1080
MAX_SAMPLES = 10_000_000
MAX_THREADS = 12
WARMUP_ITERATIONS = 50
MAX_TIMEOUT = 30 * 60.0
BARRIER_TIMEOUT = 60.0

PICTURE_NAME = "FractalFlame"
DEFAULT_FORMAT = "png"
DEFAULT_GAMMA = 2.2
DEFAULT_TRANSFORMATIONS = ("heart",)


@dataclass(frozen=True)
class FlameConfig:
    """Everything needed for one render-and-tone-map run."""

    width: int
    height: int
    samples: int
    transformations: tuple[Variation, ...]
    threads: int = 1
    warmup_iterations: int = WARMUP_ITERATIONS
    gamma: float = DEFAULT_GAMMA
    world: WorldRect = DEFAULT_WORLD
    timeout: Optional[float] = MAX_TIMEOUT
    barrier_timeout: Optional[float] = BARRIER_TIMEOUT
    seed: Optional[int] = None
    device: Optional[str] = None
    output: Path = field(default_factory=lambda: Path(f"{PICTURE_NAME}.{DEFAULT_FORMAT}"))

    def validate(self) -> "FlameConfig":
        """Reject configurations the core cannot run, before any work starts."""

        for name in ("width", "height", "samples", "threads"):
            value = getattr(self, name)
            if value <= 0:
                raise InvalidDimensions(f"{name} must be positive, got {value}")
        if self.warmup_iterations < 0:
            raise InvalidDimensions(f"warm-up iterations must not be negative, got {self.warmup_iterations}")
        if not self.gamma > 0:
            raise InvalidDimensions(f"gamma must be positive, got {self.gamma}")
        ensure_non_empty(self.transformations)
        return self
