"""Chaos-game sampling of a flame into a density canvas."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from .canvas import DensityCanvas
from .errors import InvalidDimensions, NonFiniteSample
from .geometry import Point, WorldRect
from .transformations import Transformation, ensure_non_empty

logger = logging.getLogger(__name__)

# Steps drawn per batch of random choices; cancellation is checked between batches.
CHUNK_SIZE = 4096

SeedLike = Union[None, int, np.random.SeedSequence]


@dataclass(frozen=True)
class WalkStats:
    """Outcome of a single walk."""

    plotted: int
    dropped: int
    restarts: int


def spawn_seeds(seed: SeedLike, count: int) -> list[np.random.SeedSequence]:
    """Derive ``count`` independent seed sequences from one root seed.

    ``seed=None`` draws fresh OS entropy, so every production run differs
    while tests can pass an integer and get reproducible walks.
    """

    root = seed if isinstance(seed, np.random.SeedSequence) else np.random.SeedSequence(seed)
    return root.spawn(count)


def _random_point(rng: np.random.Generator, world: WorldRect) -> Point:
    return world.point_at(rng.random(), rng.random())


def _step(transformation: Transformation, point: Point) -> Point:
    try:
        result = transformation.apply(point)
    except (ArithmeticError, ValueError) as exc:
        raise NonFiniteSample(str(exc)) from exc
    if not result.is_finite():
        raise NonFiniteSample(f"non-finite point {result}")
    return result


def render_walk(
    canvas: DensityCanvas,
    world: WorldRect,
    transformations: Sequence[Transformation],
    sample_budget: int,
    warmup_iterations: int,
    seed: SeedLike = None,
    *,
    cancel: Optional[threading.Event] = None,
) -> WalkStats:
    """Run one chaos-game walk and merge its hits into ``canvas``.

    The walk takes ``warmup_iterations + sample_budget`` steps; only the
    steps after warm-up are plotted. Hits are collected in a private
    histogram and merged once at the end. A cancelled walk merges nothing.
    """

    transformations = ensure_non_empty(transformations)
    if sample_budget < 0 or warmup_iterations < 0:
        raise InvalidDimensions("sample budget and warm-up iterations must not be negative")

    rng = np.random.default_rng(seed)
    histogram = canvas.empty_histogram()
    flat_histogram = histogram.reshape(-1)
    x_res, y_res = canvas.width, canvas.height

    point = _random_point(rng, world)
    plotted = dropped = restarts = 0
    warned = False
    total_steps = warmup_iterations + sample_budget
    step = 0

    while step < total_steps:
        if cancel is not None and cancel.is_set():
            logger.debug("Walk cancelled after %d of %d steps", step, total_steps)
            return WalkStats(plotted=0, dropped=dropped, restarts=restarts)

        chunk = min(CHUNK_SIZE, total_steps - step)
        choices = rng.integers(0, len(transformations), size=chunk)
        hits: list[int] = []

        for index in choices.tolist():
            plotting = step >= warmup_iterations
            step += 1
            try:
                point = _step(transformations[index], point)
            except NonFiniteSample as exc:
                if not warned and isinstance(exc.__cause__, ValueError):
                    logger.warning(
                        "Transformation %s raised %r; treating it as divergence and restarting the walk",
                        getattr(transformations[index], "name", type(transformations[index]).__name__),
                        exc.__cause__,
                    )
                    warned = True
                point = _random_point(rng, world)
                restarts += 1
                if plotting:
                    dropped += 1
                continue

            if not plotting:
                continue
            pixel = world.to_pixel(point, x_res, y_res)
            if pixel is None:
                dropped += 1
            else:
                hits.append(pixel[0] * x_res + pixel[1])

        if hits:
            np.add.at(flat_histogram, np.asarray(hits, dtype=np.intp), 1)
            plotted += len(hits)

    canvas.merge(histogram)
    if restarts:
        logger.debug("Walk restarted %d times after non-finite samples", restarts)
    return WalkStats(plotted=plotted, dropped=dropped, restarts=restarts)
