"""Tests for closure tests, simplification and shape descriptors."""

import math

import numpy as np
import pytest

from quickshape.strokes.features import (
    analyze_geometry,
    apply_virtual_closure,
    aspect_ratio,
    closure_metrics,
    is_closed,
    roundness,
    thinness_ratio,
)
from quickshape.strokes.simplify import count_corners, find_corners, rdp_simplify


# Open U shape: 35px gap is 22.6% of its 155px path
NEARLY_CLOSED = [(0, 0), (30, 0), (60, 0), (60, 35), (30, 35), (0, 35)]


class TestClosure:
    """Tests for closed and virtually closed strokes."""

    def test_closed_by_absolute_gap(self, circle_stroke):
        assert is_closed(circle_stroke)

    def test_closed_by_relative_gap(self):
        """A long stroke with a 40px gap is closed because the gap is small relative to it."""
        pts = [(0, 0), (400, 0), (400, 400), (0, 400), (0, 40)]
        metrics = closure_metrics(pts)

        assert metrics.gap == pytest.approx(40.0)
        assert metrics.ratio < 0.2
        assert is_closed(pts)

    def test_open_line(self, line_stroke):
        assert not is_closed(line_stroke)

    def test_virtual_closure_appends_first_point(self):
        assert not is_closed(NEARLY_CLOSED)

        closed = apply_virtual_closure(NEARLY_CLOSED)

        assert len(closed) == len(NEARLY_CLOSED) + 1
        assert tuple(closed[-1]) == NEARLY_CLOSED[0]

    def test_virtual_closure_leaves_wide_gap(self, line_stroke):
        assert len(apply_virtual_closure(line_stroke)) == len(line_stroke)

    def test_virtual_closure_idempotent(self, square_stroke):
        """Already-closed strokes come back unchanged."""
        once = apply_virtual_closure(square_stroke)
        assert np.array_equal(once, square_stroke)

        twice = apply_virtual_closure(apply_virtual_closure(NEARLY_CLOSED))
        assert np.array_equal(twice, apply_virtual_closure(NEARLY_CLOSED))

    def test_virtual_closure_does_not_mutate_input(self):
        pts = np.array(NEARLY_CLOSED, dtype=float)
        apply_virtual_closure(pts)
        assert len(pts) == len(NEARLY_CLOSED)


class TestSimplify:
    """Tests for RDP simplification and corner finding."""

    def test_straight_line_reduces_to_endpoints(self, line_stroke):
        simplified = rdp_simplify(line_stroke, 2.0)
        assert len(simplified) == 2
        assert tuple(simplified[0]) == (0.0, 0.0)
        assert tuple(simplified[-1]) == (100.0, 0.0)

    def test_short_strokes_returned_as_is(self):
        assert len(rdp_simplify([(0, 0), (5, 5)], 2.0)) == 2

    def test_closed_square_corner_count(self, square_stroke):
        """Four corners plus the repeated start point."""
        assert count_corners(square_stroke) == 5

    def test_epsilon_controls_detail(self, circle_stroke):
        assert count_corners(circle_stroke, 0.5) > count_corners(circle_stroke, 5.0)

    def test_find_corners_wraps_closed_strokes(self, square_stroke):
        open_corners = find_corners(square_stroke, 2.0)
        closed_corners = find_corners(square_stroke, 2.0, closed=True)

        assert len(open_corners) == 3
        assert len(closed_corners) == 4


class TestDescriptors:
    """Tests for roundness, thinness and geometry summaries."""

    def test_roundness_of_circle(self, circle_stroke):
        assert roundness(circle_stroke) == pytest.approx(1.0, abs=0.01)

    def test_roundness_of_square(self, square_stroke):
        assert roundness(square_stroke) == pytest.approx(math.sqrt(math.pi) / 2, abs=1e-6)

    def test_roundness_without_area(self, line_stroke):
        assert roundness(line_stroke) == 0.0

    def test_thinness_of_circle_near_four_pi(self, circle_stroke):
        assert thinness_ratio(circle_stroke) == pytest.approx(4 * math.pi, rel=0.01)

    def test_thinness_zero_area_is_infinite(self, line_stroke):
        assert math.isinf(thinness_ratio(line_stroke))

    def test_analyze_square(self, square_stroke):
        geometry = analyze_geometry(square_stroke)

        assert geometry.corner_count == 5
        assert geometry.aspect_ratio == pytest.approx(1.0)
        assert geometry.is_closed
        assert geometry.closure_ratio == 0.0

    def test_analyze_line(self, line_stroke):
        geometry = analyze_geometry(line_stroke)

        assert geometry.corner_count == 2
        assert geometry.aspect_ratio == 0.0
        assert not geometry.is_closed
        assert geometry.closure_ratio == pytest.approx(1.0)

    def test_aspect_ratio_ignores_rotation(self, rectangle_stroke, transform):
        moved = transform(rectangle_stroke, angle=math.radians(35))

        assert aspect_ratio(moved) == pytest.approx(0.5, rel=1e-6)

    def test_diagonal_line_has_no_width(self, line_stroke, transform):
        moved = transform(line_stroke, angle=math.radians(45))

        assert aspect_ratio(moved) == pytest.approx(0.0, abs=1e-9)
