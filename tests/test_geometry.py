import math

import pytest

from fractal_flame import InvalidDimensions, Point, WorldRect


def test_origin_maps_to_first_pixel(unit_world):
    assert unit_world.to_pixel(Point(0.0, 0.0), 10, 5) == (0, 0)


def test_far_corner_is_outside_half_open_grid(unit_world):
    assert unit_world.to_pixel(Point(1.0, 1.0), 10, 5) is None
    assert unit_world.to_pixel(Point(1.0, 0.5), 10, 5) is None
    assert unit_world.to_pixel(Point(0.5, 1.0), 10, 5) is None


def test_point_just_inside_far_corner_maps_to_last_pixel(unit_world):
    inside = Point(math.nextafter(1.0, 0.0), math.nextafter(1.0, 0.0))
    assert unit_world.to_pixel(inside, 10, 5) == (4, 9)


def test_mapping_with_offset_origin():
    world = WorldRect(x0=-1.77, y0=-1.0, width=3.54, height=2.0)
    assert world.to_pixel(Point(-1.77, -1.0), 354, 200) == (0, 0)
    assert world.to_pixel(Point(0.0, 0.0), 354, 200) == (100, 177)


def test_points_left_of_or_above_origin_are_dropped(unit_world):
    assert unit_world.to_pixel(Point(-0.01, 0.5), 10, 10) is None
    assert unit_world.to_pixel(Point(0.5, -0.01), 10, 10) is None


@pytest.mark.parametrize("point", [Point(math.nan, 0.0), Point(0.0, math.inf), Point(-math.inf, math.nan)])
def test_non_finite_points_are_dropped(unit_world, point):
    assert not point.is_finite()
    assert unit_world.to_pixel(point, 10, 10) is None


@pytest.mark.parametrize("width,height", [(0.0, 1.0), (1.0, 0.0), (-2.0, 1.0), (1.0, -0.5)])
def test_world_extents_must_be_positive(width, height):
    with pytest.raises(InvalidDimensions):
        WorldRect(x0=0.0, y0=0.0, width=width, height=height)


def test_point_at_and_contains():
    world = WorldRect(x0=-2.0, y0=1.0, width=4.0, height=2.0)
    assert world.point_at(0.5, 0.5) == Point(0.0, 2.0)
    assert world.contains(Point(-2.0, 1.0))
    assert not world.contains(Point(world.x1, world.y1))


def test_far_away_finite_point_is_dropped(unit_world):
    assert unit_world.to_pixel(Point(1e308, 0.0), 800, 600) is None
    assert unit_world.to_pixel(Point(0.5, -1e308), 800, 600) is None


def test_tiny_world_extent_does_not_overflow():
    world = WorldRect(x0=0.0, y0=0.0, width=1e-310, height=1.0)
    assert world.to_pixel(Point(0.5, 0.5), 800, 600) is None
    assert world.to_pixel(Point(0.0, 0.5), 800, 600) == (300, 0)
