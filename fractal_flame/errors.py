"""Exceptions raised by the flame pipeline."""

from __future__ import annotations

from typing import Optional


class FlameError(Exception):
    """Base class for every error raised by :mod:`fractal_flame`."""


class InvalidDimensions(FlameError, ValueError):
    """A size, count or extent that must be positive was not."""


class EmptyTransformationSet(FlameError, ValueError):
    """A render was requested without any transformation."""


class StageError(FlameError):
    """A pipeline stage failed after its workers were launched."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"{stage} stage failed: {message}")
        self.stage = stage
        self.reason = message


class RenderError(StageError):
    def __init__(self, message: str) -> None:
        super().__init__("render", message)


class ProcessingError(StageError):
    def __init__(self, message: str) -> None:
        super().__init__("tone-mapping", message)


class WorkerTimeout(StageError):
    """Workers of a stage did not finish before the deadline."""

    def __init__(self, stage: str, timeout: Optional[float]) -> None:
        super().__init__(stage, f"workers did not finish within {timeout} s")
        self.timeout = timeout


class BarrierBroken(ProcessingError):
    """A tone-mapping participant failed or timed out before the rendezvous."""


class NonFiniteSample(ArithmeticError):
    """A transformation produced a point that cannot be plotted."""
