import pytest

from fractal_flame import Variation, WorldRect, create_canvas


def _halve(x, y):
    return 0.5 * x, 0.5 * y


def _halve_shift(x, y):
    return 0.5 * x + 0.5, 0.5 * y


def _halve_lift(x, y):
    return 0.5 * x + 0.25, 0.5 * y + 0.5


@pytest.fixture
def unit_world():
    return WorldRect(x0=0.0, y0=0.0, width=1.0, height=1.0)


@pytest.fixture
def sierpinski():
    """Three contractions whose attractor lies inside the unit square."""

    return (
        Variation("halve", _halve),
        Variation("halve_shift", _halve_shift),
        Variation("halve_lift", _halve_lift),
    )


@pytest.fixture
def canvas():
    return create_canvas(32, 24)

