"""Tests for Bowyer-Watson triangulation and mesh attribution."""
import math

import numpy as np
import pytest

from meshgrad.delaunay import (
    Delaunay,
    build_triangles,
    filter_small_triangles,
    in_circumcircle,
    make_triangle,
    triangle_area,
    triangulate,
)
from meshgrad.poisson import add_boundary_points, adaptive_poisson_sampling
from meshgrad.mood import mood_to_settings
from meshgrad.types import AttributedVertex, BLACK, ColorRGB, Point2D, Triangle

WHITE = ColorRGB(255, 255, 255)


def _area_triangle(area):
    v = AttributedVertex(0, 0, BLACK)
    return Triangle(points=(v, v, v), centroid=Point2D(0, 0), area=area, color_variance=0)


class TestInCircumcircle:
    """Test the incircle predicate."""

    def test_inside_either_winding(self):
        a, b, c = Point2D(0, 0), Point2D(4, 0), Point2D(0, 4)
        p = Point2D(1, 1)
        assert in_circumcircle(p, a, b, c)
        assert in_circumcircle(p, a, c, b)

    def test_outside(self):
        a, b, c = Point2D(0, 0), Point2D(4, 0), Point2D(0, 4)
        assert not in_circumcircle(Point2D(10, 10), a, b, c)
        assert not in_circumcircle(Point2D(10, 10), c, b, a)

    def test_on_circle_is_outside(self):
        a, b, c = Point2D(0, 0), Point2D(2, 0), Point2D(0, 2)
        assert not in_circumcircle(Point2D(2, 2), a, b, c)


class TestTriangulate:
    """Test Delaunay triangulation."""

    def test_too_few_points(self):
        assert triangulate([]) == []
        assert triangulate([Point2D(0, 0), Point2D(1, 1)]) == []

    def test_single_triangle(self):
        tris = triangulate([Point2D(0, 0), Point2D(5, 0), Point2D(0, 5)])
        assert len(tris) == 1
        assert sorted(tris[0]) == [0, 1, 2]

    def test_square(self):
        points = [Point2D(0, 0), Point2D(1, 0), Point2D(0, 1), Point2D(1, 1)]
        tris = triangulate(points)
        assert len(tris) == 2
        total = sum(triangle_area(*(points[i] for i in t)) for t in tris)
        assert total == pytest.approx(1.0)

    def test_fan_around_center(self):
        """Rectangle corners around the center triangulate as a four-way fan."""
        points = [Point2D(1, 0.5), Point2D(0, 0), Point2D(2, 0), Point2D(0, 1), Point2D(2, 1)]
        tris = triangulate(points)
        assert len(tris) == 4
        assert all(0 in t for t in tris)

    def test_duplicate_point_skipped(self):
        points = [Point2D(0, 0), Point2D(4, 0), Point2D(0, 4), Point2D(4, 0)]
        tris = triangulate(points)
        assert len(tris) == 1
        assert 3 not in tris[0]

    def test_empty_circumcircle(self, rng):
        """No input point lies strictly inside any triangle's circumcircle."""
        coords = rng.random((40, 2)) * 100
        points = [Point2D(float(x), float(y)) for x, y in coords]
        tris = Delaunay(points).triangles
        assert len(tris) > 0
        for a, b, c in tris:
            assert triangle_area(points[a], points[b], points[c]) > 0
            for i, p in enumerate(points):
                if i in (a, b, c):
                    continue
                assert not in_circumcircle(p, points[a], points[b], points[c])

    def test_indices_reference_input(self, rng):
        coords = rng.random((25, 2)) * 50
        points = [Point2D(float(x), float(y)) for x, y in coords]
        for t in triangulate(points):
            assert all(0 <= i < len(points) for i in t)
        # Euler bound for a planar triangulation
        assert len(triangulate(points)) <= 2 * len(points) - 5

    def test_covers_image_rectangle(self, uniform_sampler):
        """Poisson points plus boundary points tile the whole image."""
        settings = mood_to_settings(50)
        points = adaptive_poisson_sampling(uniform_sampler, 24, settings,
                                           rng=np.random.default_rng(3))
        points = add_boundary_points(points, 100, 100, 24)
        triangles = build_triangles(points, uniform_sampler, cull_ratio=None)
        total = sum(t.area for t in triangles)
        assert total == pytest.approx(100 * 100, rel=0.01)


class TestTriangleAttributes:
    """Test centroid, area and color variance."""

    def test_area(self):
        assert triangle_area(Point2D(0, 0), Point2D(4, 0), Point2D(0, 3)) == 6
        assert triangle_area(Point2D(0, 0), Point2D(0, 3), Point2D(4, 0)) == 6

    def test_make_triangle(self):
        v0 = AttributedVertex(0, 0, BLACK)
        v1 = AttributedVertex(6, 0, BLACK)
        v2 = AttributedVertex(0, 3, WHITE)
        t = make_triangle(v0, v1, v2)
        assert t.centroid == Point2D(2, 1)
        assert t.area == 9
        gray = ColorRGB(85, 85, 85)
        expected = (2 * BLACK.distance(gray) + WHITE.distance(gray)) / 3
        assert t.color_variance == pytest.approx(expected)

    def test_uniform_variance_zero(self):
        c = ColorRGB(10, 20, 30)
        t = make_triangle(AttributedVertex(0, 0, c), AttributedVertex(1, 0, c), AttributedVertex(0, 1, c))
        assert t.color_variance == 0


class TestFilterSmallTriangles:
    """Test micro-triangle culling."""

    def test_drops_below_median_fraction(self):
        tris = [_area_triangle(a) for a in (1, 10, 10, 10)]
        kept = filter_small_triangles(tris)
        assert [t.area for t in kept] == [10, 10, 10]

    def test_threshold_inclusive(self):
        tris = [_area_triangle(a) for a in (2.5, 10, 10)]
        assert len(filter_small_triangles(tris, ratio=0.25)) == 3
        assert len(filter_small_triangles(tris, ratio=0.3)) == 2

    def test_zero_median_counts_as_one(self):
        tris = [_area_triangle(a) for a in (0, 0, 5)]
        kept = filter_small_triangles(tris)
        assert [t.area for t in kept] == [5]

    def test_empty(self):
        assert filter_small_triangles([]) == []

    def test_order_preserved(self):
        tris = [_area_triangle(a) for a in (10, 1, 8, 12)]
        assert [t.area for t in filter_small_triangles(tris)] == [10, 8, 12]


class TestBuildTriangles:

    def test_vertex_colors_sampled(self, split_sampler):
        points = [Point2D(0, 0), Point2D(119, 0), Point2D(0, 79), Point2D(119, 79)]
        triangles = build_triangles(points, split_sampler, cull_ratio=None)
        assert len(triangles) == 2
        for t in triangles:
            for v in t.points:
                assert v.color == (BLACK if v.x < 60 else WHITE)

    def test_culling_applied(self, uniform_sampler):
        points = [
            Point2D(0, 0), Point2D(100, 0), Point2D(0, 100), Point2D(100, 100),
            Point2D(50, 50), Point2D(51, 50.5),
        ]
        all_tris = build_triangles(points, uniform_sampler, cull_ratio=None)
        culled = build_triangles(points, uniform_sampler)
        assert len(culled) < len(all_tris)
        assert math.isclose(sum(t.area for t in all_tris), 10000)

    def test_culling_bound(self, split_sampler):
        """No survivor is below the cut taken from the unculled median."""
        points = adaptive_poisson_sampling(split_sampler, 10, mood_to_settings(20),
                                           rng=np.random.default_rng(21))
        points = add_boundary_points(points, 120, 80, 10)
        all_tris = build_triangles(points, split_sampler, cull_ratio=None)
        areas = sorted(t.area for t in all_tris)
        cut = 0.28 * areas[len(areas) // 2]
        for t in build_triangles(points, split_sampler):
            assert t.area >= cut
