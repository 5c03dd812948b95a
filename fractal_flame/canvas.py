"""Density histogram shared by rendering workers."""

from __future__ import annotations

import threading

import numpy as np

from .errors import InvalidDimensions


class DensityCanvas:
    """Per-pixel hit counts plus the brightness written by tone mapping.

    ``counts`` and ``brightness`` are ``(height, width)`` arrays. Writers
    during rendering go through :meth:`increment` or :meth:`merge`, both of
    which hold the canvas lock; tone mapping works on disjoint row blocks
    and needs no locking.
    """

    def __init__(self, width: int, height: int) -> None:
        _check_dimension("width", width)
        _check_dimension("height", height)
        self.width = int(width)
        self.height = int(height)
        self.counts = np.zeros((self.height, self.width), dtype=np.int64)
        self.brightness = np.zeros((self.height, self.width), dtype=np.float64)
        self._lock = threading.Lock()

    @property
    def shape(self) -> tuple[int, int]:
        return self.height, self.width

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def increment(self, row: int, col: int, amount: int = 1) -> bool:
        """Atomically add ``amount`` to one cell; out-of-canvas cells are ignored."""

        if not self.contains(row, col):
            return False
        with self._lock:
            self.counts[row, col] += amount
        return True

    def merge(self, counts: np.ndarray) -> None:
        """Add a private histogram of the same shape into the shared one."""

        if counts.shape != self.shape:
            raise ValueError(f"histogram shape {counts.shape} does not match canvas {self.shape}")
        with self._lock:
            self.counts += counts

    def empty_histogram(self) -> np.ndarray:
        return np.zeros(self.shape, dtype=np.int64)

    def total_hits(self) -> int:
        with self._lock:
            return int(self.counts.sum())

    def to_uint8(self) -> np.ndarray:
        return np.uint8(np.rint(np.clip(self.brightness, 0.0, 1.0) * 255))


def create_canvas(width: int, height: int) -> DensityCanvas:
    return DensityCanvas(width, height)


def _check_dimension(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
        raise InvalidDimensions(f"canvas {name} must be a positive integer, got {value!r}")
