"""Point transformations (flame variations) and the name registry."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable, Protocol, Sequence

from .errors import EmptyTransformationSet
from .geometry import Point


class Transformation(Protocol):
    """Anything that maps a world-space point to another one, without side effects."""

    def apply(self, point: Point) -> Point: ...


@dataclass(frozen=True)
class Variation:
    """A named, stateless transformation backed by a plain function."""

    name: str
    function: Callable[[float, float], tuple[float, float]]

    def apply(self, point: Point) -> Point:
        x, y = self.function(point.x, point.y)
        return Point(x, y)


def _polar(x: float, y: float) -> tuple[float, float]:
    return math.hypot(x, y), math.atan2(y, x)


def linear(x: float, y: float) -> tuple[float, float]:
    return x, y


def sinusoidal(x: float, y: float) -> tuple[float, float]:
    return math.sin(x), math.sin(y)


def spherical(x: float, y: float) -> tuple[float, float]:
    r2 = x * x + y * y
    return x / r2, y / r2


def swirl(x: float, y: float) -> tuple[float, float]:
    r2 = x * x + y * y
    s, c = math.sin(r2), math.cos(r2)
    return x * s - y * c, x * c + y * s


def horseshoe(x: float, y: float) -> tuple[float, float]:
    r = math.hypot(x, y)
    return (x - y) * (x + y) / r, 2.0 * x * y / r


def polar(x: float, y: float) -> tuple[float, float]:
    r, theta = _polar(x, y)
    return theta / math.pi, r - 1.0


def handkerchief(x: float, y: float) -> tuple[float, float]:
    r, theta = _polar(x, y)
    return r * math.sin(theta + r), r * math.cos(theta - r)


def heart(x: float, y: float) -> tuple[float, float]:
    r, theta = _polar(x, y)
    return r * math.sin(theta * r), -r * math.cos(theta * r)


def disc(x: float, y: float) -> tuple[float, float]:
    r, theta = _polar(x, y)
    k = theta / math.pi
    return k * math.sin(math.pi * r), k * math.cos(math.pi * r)


def spiral(x: float, y: float) -> tuple[float, float]:
    r, theta = _polar(x, y)
    return (math.cos(theta) + math.sin(r)) / r, (math.sin(theta) - math.cos(r)) / r


def hyperbolic(x: float, y: float) -> tuple[float, float]:
    r, theta = _polar(x, y)
    return math.sin(theta) / r, r * math.cos(theta)


def diamond(x: float, y: float) -> tuple[float, float]:
    r, theta = _polar(x, y)
    return math.sin(theta) * math.cos(r), math.cos(theta) * math.sin(r)


def ex(x: float, y: float) -> tuple[float, float]:
    r, theta = _polar(x, y)
    p0 = math.sin(theta + r) ** 3
    p1 = math.cos(theta - r) ** 3
    return r * (p0 + p1), r * (p0 - p1)


REGISTRY: dict[str, Variation] = {
    fn.__name__: Variation(fn.__name__, fn)
    for fn in (
        linear,
        sinusoidal,
        spherical,
        swirl,
        horseshoe,
        polar,
        handkerchief,
        heart,
        disc,
        spiral,
        hyperbolic,
        diamond,
        ex,
    )
}


def available() -> list[str]:
    return sorted(REGISTRY)


def get(name: str) -> Variation:
    try:
        return REGISTRY[name.strip().lower()]
    except KeyError:
        raise KeyError(f"unknown transformation '{name}'. Valid choices: {', '.join(available())}.") from None


def resolve(names: Iterable[str]) -> tuple[Variation, ...]:
    """Look up each name once, keeping the order of first appearance."""

    selected: list[Variation] = []
    for name in names:
        variation = get(name)
        if variation not in selected:
            selected.append(variation)
    return ensure_non_empty(selected)


def ensure_non_empty(transformations: Sequence[Transformation]) -> tuple[Transformation, ...]:
    result = tuple(transformations)
    if not result:
        raise EmptyTransformationSet("at least one transformation is required")
    return result
