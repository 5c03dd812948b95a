"""Worker-pool orchestration: render, join, tone map, join."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Optional, Sequence

from .canvas import DensityCanvas, create_canvas
from .config import BARRIER_TIMEOUT, MAX_THREADS, MAX_TIMEOUT, FlameConfig
from .errors import BarrierBroken, InvalidDimensions, ProcessingError, RenderError, WorkerTimeout
from .geometry import WorldRect
from .renderer import SeedLike, WalkStats, render_walk, spawn_seeds
from .tone_mapping import GammaLogCorrection, GlobalMax, ToneMappingStage
from .transformations import Transformation, ensure_non_empty

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderSummary:
    """Per-walk statistics of a completed render stage."""

    walks: tuple[WalkStats, ...]

    @property
    def plotted(self) -> int:
        return sum(walk.plotted for walk in self.walks)

    @property
    def dropped(self) -> int:
        return sum(walk.dropped for walk in self.walks)

    @property
    def restarts(self) -> int:
        return sum(walk.restarts for walk in self.walks)


@dataclass(frozen=True)
class PipelineResult:
    canvas: DensityCanvas
    render: RenderSummary
    elapsed: float


def split_budget(total: int, parts: int) -> list[int]:
    """Split ``total`` into ``parts`` shares; the last share takes the remainder."""

    if parts <= 0:
        raise InvalidDimensions(f"cannot split into {parts} parts")
    base = total // parts
    return [base] * (parts - 1) + [base + total % parts]


def row_ranges(height: int, parts: int) -> list[tuple[int, int]]:
    """Contiguous half-open row ranges covering ``[0, height)`` exactly."""

    ranges = []
    start = 0
    for size in split_budget(height, parts):
        ranges.append((start, start + size))
        start += size
    return ranges


def resolve_thread_count(requested: int, maximum: int = MAX_THREADS) -> int:
    if requested <= 0:
        raise InvalidDimensions(f"thread count must be positive, got {requested}")
    if requested > maximum:
        logger.warning("Requested %d threads, capping at %d", requested, maximum)
        return maximum
    return requested


def _remaining(deadline: Optional[float]) -> Optional[float]:
    if deadline is None:
        return None
    return max(deadline - time.monotonic(), 0.0)


def render(
    canvas: DensityCanvas,
    world: WorldRect,
    transformations: Sequence[Transformation],
    total_samples: int,
    warmup_iterations: int,
    thread_count: int,
    *,
    timeout: Optional[float] = MAX_TIMEOUT,
    seed: SeedLike = None,
) -> RenderSummary:
    """Run ``thread_count`` chaos-game walks into ``canvas`` and wait for all of them.

    Raises :class:`WorkerTimeout` if the walks are still running after
    ``timeout`` seconds and :class:`RenderError` if any walk fails.
    """

    transformations = ensure_non_empty(transformations)
    if total_samples <= 0:
        raise InvalidDimensions(f"sample count must be positive, got {total_samples}")
    if warmup_iterations < 0:
        raise InvalidDimensions(f"warm-up iterations must not be negative, got {warmup_iterations}")
    threads = resolve_thread_count(thread_count)

    budgets = split_budget(total_samples, threads)
    seeds = spawn_seeds(seed, threads)
    cancel = threading.Event()
    logger.debug("Rendering %d samples on %d threads: %s", total_samples, threads, budgets)

    executor = ThreadPoolExecutor(max_workers=threads, thread_name_prefix="flame-render")
    try:
        futures = [
            executor.submit(
                render_walk,
                canvas,
                world,
                transformations,
                budget,
                warmup_iterations,
                walk_seed,
                cancel=cancel,
            )
            for budget, walk_seed in zip(budgets, seeds)
        ]
        _, pending = wait(futures, timeout=timeout)
        if pending:
            cancel.set()
            raise WorkerTimeout("render", timeout)

        walks = []
        for future in futures:
            exc = future.exception()
            if exc is not None:
                raise RenderError(f"{type(exc).__name__}: {exc}") from exc
            walks.append(future.result())
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    return RenderSummary(walks=tuple(walks))


def _raise_stage_failure(futures: list[Future]) -> None:
    broken: Optional[BaseException] = None
    cause: Optional[BaseException] = None
    for future in futures:
        exc = future.exception()
        if exc is None:
            continue
        if isinstance(exc, threading.BrokenBarrierError):
            broken = broken or exc
        elif cause is None:
            cause = exc

    if broken is not None:
        detail = f"{type(cause).__name__}: {cause}" if cause is not None else "a participant did not arrive in time"
        raise BarrierBroken(f"barrier broken, {detail}") from (cause or broken)
    if cause is not None:
        raise ProcessingError(f"{type(cause).__name__}: {cause}") from cause


def _run_stage(
    canvas: DensityCanvas,
    stage: ToneMappingStage,
    ranges: list[tuple[int, int]],
    shared: GlobalMax,
    timeout: Optional[float],
    barrier_timeout: Optional[float],
) -> None:
    """Run one stage and write its output only if every worker succeeded.

    Workers still running after a timeout only fill their own blocks, which
    are discarded, so a failed stage leaves ``canvas.brightness`` untouched.
    """

    shared.reset()
    barrier = threading.Barrier(len(ranges), timeout=barrier_timeout)

    executor = ThreadPoolExecutor(max_workers=len(ranges), thread_name_prefix=f"flame-{stage.name}")
    try:
        futures = [
            executor.submit(stage.process, canvas, start, end, shared, barrier)
            for start, end in ranges
        ]
        _, pending = wait(futures, timeout=timeout)
        if pending:
            barrier.abort()
            raise WorkerTimeout("tone-mapping", timeout)
        _raise_stage_failure(futures)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    for (start, end), future in zip(ranges, futures):
        canvas.brightness[start:end] = future.result()
    logger.debug("Stage %s finished with global value %.6g", stage.name, shared.value)


def apply_tone_mapping(
    canvas: DensityCanvas,
    stages: Sequence[ToneMappingStage],
    thread_count: int,
    *,
    timeout: Optional[float] = MAX_TIMEOUT,
    barrier_timeout: Optional[float] = BARRIER_TIMEOUT,
) -> None:
    """Run each stage over ``canvas`` with ``thread_count`` workers, one stage at a time."""

    threads = resolve_thread_count(thread_count)
    ranges = row_ranges(canvas.height, threads)
    deadline = None if timeout is None else time.monotonic() + timeout
    shared = GlobalMax()
    for stage in stages:
        _run_stage(canvas, stage, ranges, shared, _remaining(deadline), barrier_timeout)


def default_stages(gamma: float, device: Optional[str] = None) -> list[ToneMappingStage]:
    return [GammaLogCorrection(gamma, device=device)]


def run_pipeline(config: FlameConfig, stages: Optional[Sequence[ToneMappingStage]] = None) -> PipelineResult:
    """Build a canvas, render into it, tone map it and return it."""

    config.validate()
    started = time.monotonic()
    deadline = None if config.timeout is None else started + config.timeout
    canvas = create_canvas(config.width, config.height)

    logger.info(
        "Rendering %dx%d flame with %d samples on %d threads (%s)",
        config.width,
        config.height,
        config.samples,
        config.threads,
        ", ".join(t.name for t in config.transformations),
    )
    summary = render(
        canvas,
        config.world,
        config.transformations,
        config.samples,
        config.warmup_iterations,
        config.threads,
        timeout=_remaining(deadline),
        seed=config.seed,
    )
    logger.info(
        "Render finished: %d plotted, %d dropped, %d restarts",
        summary.plotted,
        summary.dropped,
        summary.restarts,
    )

    if stages is None:
        stages = default_stages(config.gamma, config.device)
    apply_tone_mapping(
        canvas,
        stages,
        config.threads,
        timeout=_remaining(deadline),
        barrier_timeout=config.barrier_timeout,
    )

    elapsed = time.monotonic() - started
    logger.info("Tone mapping finished, elapsed time %.3f s", elapsed)
    return PipelineResult(canvas=canvas, render=summary, elapsed=elapsed)
