"""Two-phase, barrier-synchronized tone mapping of a density canvas."""

from __future__ import annotations

import logging
import threading
from typing import Optional

import numpy as np
import tensorflow as tf

from .canvas import DensityCanvas
from .config import DEFAULT_GAMMA

logger = logging.getLogger(__name__)

_SENTINEL = -1.0


class GlobalMax:
    """Shared maximum reduced from every worker's local maximum."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = _SENTINEL

    def reset(self) -> None:
        with self._lock:
            self._value = _SENTINEL

    def publish(self, local: float) -> None:
        with self._lock:
            if local > self._value:
                self._value = local

    @property
    def value(self) -> float:
        with self._lock:
            return self._value



class ToneMappingStage:
    """A post-processing stage run by several workers over disjoint row blocks.

    Every worker calls :meth:`process` once. ``reduce`` computes a local value
    for the block, the values are combined into ``shared``, all workers meet
    at ``barrier``, and only then does ``apply`` compute the new brightness of
    the block from the combined value. ``apply`` returns the block instead of
    writing it, so the caller decides whether the stage's output is kept.
    Subclasses implement ``reduce`` and ``apply``.
    """

    name = "stage"

    def reduce(self, canvas: DensityCanvas, row_start: int, row_end: int) -> float:
        raise NotImplementedError

    def apply(self, canvas: DensityCanvas, row_start: int, row_end: int, global_value: float) -> np.ndarray:
        raise NotImplementedError

    def process(
        self,
        canvas: DensityCanvas,
        row_start: int,
        row_end: int,
        shared: GlobalMax,
        barrier: threading.Barrier,
    ) -> np.ndarray:
        try:
            local = self.reduce(canvas, row_start, row_end)
        except BaseException:
            # Break the rendezvous for the other participants.
            barrier.abort()
            raise
        logger.debug("%s: rows [%d, %d) reduced to %.6g", self.name, row_start, row_end, local)
        shared.publish(local)
        barrier.wait()
        return self.apply(canvas, row_start, row_end, shared.value)


class GammaLogCorrection(ToneMappingStage):
    """Log-density scaling followed by gamma correction.

    Brightness of a cell is ``(log(1 + count) / global_max) ** (1 / gamma)``
    clamped to ``[0, 1]``; empty cells stay at 0.
    """

    name = "gamma-log"

    def __init__(self, gamma: float = DEFAULT_GAMMA, *, device: Optional[str] = None) -> None:
        if not gamma > 0:
            raise ValueError(f"gamma must be positive, got {gamma}")
        self.gamma = float(gamma)
        self.device = device if device is not None else "/CPU:0"

    def reduce(self, canvas: DensityCanvas, row_start: int, row_end: int) -> float:
        block = canvas.counts[row_start:row_end]
        if block.size == 0:
            return 0.0
        with tf.device(self.device):
            counts = tf.convert_to_tensor(block, dtype=tf.float64)
            local = tf.reduce_max(tf.math.log1p(counts))
        return float(local.numpy())

    def apply(self, canvas: DensityCanvas, row_start: int, row_end: int, global_value: float) -> np.ndarray:
        block = canvas.counts[row_start:row_end]
        if block.size == 0 or global_value <= 0.0:
            return np.zeros(block.shape, dtype=np.float64)
        with tf.device(self.device):
            counts = tf.convert_to_tensor(block, dtype=tf.float64)
            scaled = tf.math.log1p(counts) / tf.constant(global_value, dtype=tf.float64)
            scaled = tf.clip_by_value(scaled, 0.0, 1.0)
            corrected = tf.pow(scaled, tf.constant(1.0 / self.gamma, dtype=tf.float64))
            brightness = tf.where(counts > 0, corrected, tf.zeros_like(corrected))
        return brightness.numpy()


def normalize(
    canvas: DensityCanvas,
    row_start: int,
    row_end: int,
    global_max: GlobalMax,
    barrier: threading.Barrier,
    *,
    gamma: float = DEFAULT_GAMMA,
    device: Optional[str] = None,
) -> None:
    """Run the gamma/log correction protocol for one worker's row block and store the result."""

    block = GammaLogCorrection(gamma, device=device).process(canvas, row_start, row_end, global_max, barrier)
    canvas.brightness[row_start:row_end] = block
