"""
Rule-based geometric classifier.

Closed strokes run independent circle, quadrilateral and triangle detectors
and the best candidate wins, subject to tie-breaks that favour polygons over
circles. Open strokes only run the line detector.
"""

import math

import numpy as np

from quickshape.classify.base import Classifier, is_degenerate
from quickshape.config import RecognizerConfig
from quickshape.geometry.fitting import fit_line
from quickshape.geometry.hull import align_to_rectangle, convex_hull, minimum_area_rectangle
from quickshape.geometry.primitives import (
    bounding_box,
    centroid,
    distance,
    polygon_area,
    segment_distance,
    vertex_angle,
)
from quickshape.models import ClassificationResult, ShapeKind, points_to_array
from quickshape.strokes.features import is_closed
from quickshape.strokes.simplify import (
    decimate_by_angle,
    drop_closing_duplicate,
    find_corners,
    vertex_angles,
)
from quickshape.tracer import get_tracer, trace


# Corner-count score peaks at four corners
CORNER_COUNT_SCORES = {3: 0.25, 4: 1.0, 5: 0.5, 6: 0.25}

TRIANGLE_METHOD_BASES = {
    "corners": 0.4,
    "extremes": 0.35,
    "sides": 0.3,
    "naive": 0.25,
}


class HeuristicClassifier(Classifier):
    """Per-shape geometric tests with explicit tie-break rules."""

    name = "heuristic"

    def __init__(self, config=None):
        config = config or RecognizerConfig()
        self.config = config.heuristic
        self.closure = config.closure

    @trace(label="heuristic_classify")
    def classify(self, points):
        tracer = get_tracer()
        pts = points_to_array(points)

        if is_degenerate(pts):
            tracer.event("Degenerate stroke", points=len(pts))
            return ClassificationResult.none()

        if not is_closed(pts, self.closure):
            return self.detect_line(pts)

        circle = self.detect_circle(pts)
        quad = self.detect_quadrilateral(pts)
        triangle = self.detect_triangle(pts)

        tracer.event(
            "Detector scores",
            circle=f"{circle.kind.value}:{circle.confidence:.3f}",
            quad=f"{quad.kind.value}:{quad.confidence:.3f}",
            triangle=f"{triangle.kind.value}:{triangle.confidence:.3f}",
        )

        return self._resolve(circle, quad, triangle, _rectangle_fill(pts))

    def _resolve(self, circle, quad, triangle, rectangle_fill=1.0):
        """
        Pick among detector results for a closed stroke.

        rectangle_fill is the hull area over the minimum rectangle area; a
        quadrilateral only overrides a circle when the stroke fills its
        rectangle like a polygon does.
        """
        cfg = self.config
        tracer = get_tracer()

        candidates = []
        if circle.is_shape and circle.confidence > cfg.circle_accept:
            candidates.append(circle)
        if quad.is_shape and quad.confidence > cfg.quad_accept:
            candidates.append(quad)
        if triangle.is_shape and triangle.confidence > cfg.triangle_accept:
            candidates.append(triangle)

        if not candidates:
            return ClassificationResult.none()

        best = max(candidates, key=lambda r: r.confidence)

        if best.kind in (ShapeKind.CIRCLE, ShapeKind.OVAL):
            if triangle.is_shape and triangle.confidence > cfg.triangle_over_circle:
                tracer.event("Triangle preferred over circle", triangle=triangle.confidence)
                return triangle
            if (quad.is_shape and quad.confidence > cfg.quad_over_circle
                    and circle.confidence > cfg.circle_contested
                    and rectangle_fill > cfg.quad_over_circle_fill):
                tracer.event("Quadrilateral preferred over circle", quad=quad.confidence, fill=rectangle_fill)
                return quad

        return best

    def detect_circle(self, points):
        """
        Circle/oval test from radius consistency, curvature consistency and
        aspect ratio.
        """
        cfg = self.config
        pts = points_to_array(points)
        if len(pts) < cfg.min_circle_points:
            return ClassificationResult.none()

        center = centroid(pts)
        radii = np.linalg.norm(pts - center, axis=1)
        radius_consistency = 1 - radii.std() / max(radii.mean(), 1.0)

        subtended = np.array([
            vertex_angle(pts[i], center, pts[i + 1]) for i in range(len(pts) - 1)
        ])
        steady = np.abs(np.diff(subtended)) < cfg.curvature_tolerance
        curvature_consistency = steady.sum() / max(len(pts) - 2, 1)

        aspect = minimum_area_rectangle(pts).aspect_ratio
        score = 0.6 * radius_consistency + 0.35 * curvature_consistency + 0.05 * aspect
        score = float(np.clip(score, 0.0, 1.0))

        if score < cfg.circle_min_score or aspect < cfg.circle_min_aspect:
            return ClassificationResult.none()

        kind = ShapeKind.OVAL if aspect < cfg.oval_max_aspect else ShapeKind.CIRCLE
        return ClassificationResult(kind=kind, confidence=score)

    def detect_quadrilateral(self, points):
        """
        Square/rectangle test.

        Weighted corner-count, parallel-sides, right-angle and edge-coverage
        scores, scaled by how well the hull fills its minimum rectangle. The
        side tests run in the frame of that rectangle.
        """
        cfg = self.config
        pts = align_to_rectangle(points_to_array(points))
        if len(pts) < cfg.min_quad_points:
            return ClassificationResult.none()

        bbox = bounding_box(pts)
        min_side = min(bbox.width, bbox.height)
        aspect = bbox.aspect_ratio

        corners = find_corners(pts, cfg.corner_angle, closed=True)
        decimated = decimate_by_angle(pts, min_side * cfg.decimate_tolerance)
        decimated_corners = find_corners(decimated, cfg.decimated_corner_angle, closed=True)

        corner_score = (
            CORNER_COUNT_SCORES.get(len(corners), 0.0)
            + CORNER_COUNT_SCORES.get(len(decimated_corners), 0.0)
        ) / 2

        corner_points = drop_closing_duplicate(pts)[np.asarray(corners, dtype=int)]
        parallel_score = self._parallel_score(pts, bbox)
        orthogonality_score = self._right_angle_score(corner_points, np.array(bbox.center))
        edge_coverage = self._edge_coverage(pts, bbox)

        score = (
            corner_score * 0.3
            + parallel_score * 0.3
            + orthogonality_score * 0.2
            + edge_coverage * 0.2
        )

        if aspect > cfg.square_min_aspect:
            kind = ShapeKind.SQUARE
            score += min(0.25, max(0.0, (aspect - 0.9) * 0.8))
        elif aspect > cfg.rectangle_min_aspect:
            kind = ShapeKind.RECTANGLE
        else:
            return ClassificationResult.none()

        score *= _rectangle_fill(pts) ** 2

        get_tracer().event(
            "Quadrilateral scores",
            level="DEBUG",
            corners=len(corners),
            decimated_corners=len(decimated_corners),
            parallel=parallel_score,
            orthogonality=orthogonality_score,
            coverage=edge_coverage,
        )

        return ClassificationResult(kind=kind, confidence=float(np.clip(score, 0.0, 1.0)))

    def _parallel_score(self, pts, bbox):
        """Fraction of opposite bounding-box side pairs whose bands run parallel."""
        band = min(bbox.width, bbox.height) * self.config.parallel_band
        sides = _side_bands(pts, bbox, band)

        parallel = 0
        for first, second in (("top", "bottom"), ("left", "right")):
            a = sides[first]
            b = sides[second]
            if len(a) > 1 and len(b) > 1:
                if _direction_gap(_principal_direction(a), _principal_direction(b)) < self.config.parallel_tolerance:
                    parallel += 1

        return parallel / 2

    def _right_angle_score(self, corners, center):
        """Share of four corners whose angle, walking around the center, is near 90 degrees."""
        if len(corners) < 3:
            return 0.0

        rel = corners - center
        ordered = corners[np.argsort(np.arctan2(rel[:, 1], rel[:, 0]))]
        n = len(ordered)

        right_angles = 0
        for i in range(n):
            angle = vertex_angle(ordered[i - 1], ordered[i], ordered[(i + 1) % n])
            if self.config.right_angle_min < angle < self.config.right_angle_max:
                right_angles += 1

        return min(1.0, right_angles / 4)

    def _edge_coverage(self, pts, bbox):
        """Fraction of bounding-box sides with enough stroke points near them."""
        band = min(bbox.width, bbox.height) * self.config.coverage_band
        required = max(2, len(pts) * 0.05)
        sides = _side_bands(pts, bbox, band)
        covered = sum(1 for side in sides.values() if len(side) > required)
        return covered / len(sides)

    def detect_triangle(self, points):
        """
        Triangle test trying four corner strategies in priority order.

        The first strategy yielding a valid triangle sets the base confidence,
        which is scaled by how much of the hull the triangle covers.
        """
        cfg = self.config
        pts = points_to_array(points)
        if len(pts) < cfg.min_triangle_points:
            return ClassificationResult.none()

        work = drop_closing_duplicate(pts)
        angles = vertex_angles(work, closed=True)
        method, corners = None, None

        sharp = np.flatnonzero(angles < cfg.sharp_corner_angle)
        if len(sharp) >= 3:
            sharpest = sharp[np.argsort(angles[sharp], kind="stable")[:3]]
            candidate = work[np.sort(sharpest)]
            if self._valid_triangle(candidate):
                method, corners = "corners", candidate

        if method is None:
            extremes = extreme_points(work, cfg.extreme_merge_distance)
            if len(extremes) >= 3:
                center = centroid(work)
                order = np.argsort(np.linalg.norm(extremes - center, axis=1), kind="stable")
                candidate = extremes[order[:3]]
                if self._valid_triangle(candidate):
                    method, corners = "extremes", candidate

        if method is None:
            side_count = int((angles < cfg.side_corner_angle).sum())
            if 2 <= side_count <= 4:
                candidate = find_triangle_corners(work, cfg.extreme_merge_distance)
                if self._valid_triangle(candidate):
                    method, corners = "sides", candidate

        if method is None:
            candidate = _first_mid_last(work)
            if self._valid_triangle(candidate):
                method, corners = "naive", candidate

        if method is None:
            return ClassificationResult.none()

        hull_area = polygon_area(convex_hull(pts))
        fill = min(1.0, polygon_area(corners) / hull_area) if hull_area > 0 else 0.0
        confidence = TRIANGLE_METHOD_BASES[method] * fill ** 2

        get_tracer().event("Triangle candidate", level="DEBUG", method=method, fill=fill)
        return ClassificationResult(kind=ShapeKind.TRIANGLE, confidence=confidence)

    def _valid_triangle(self, corners):
        if len(corners) != 3:
            return False
        for i in range(3):
            for j in range(i + 1, 3):
                if distance(corners[i], corners[j]) < self.config.triangle_min_side:
                    return False
        return polygon_area(corners) > self.config.triangle_min_area

    def detect_line(self, points):
        """
        Straightness of the stroke against its first-to-last chord.

        Distances are clamped to the chord, so a stroke that runs past an
        endpoint and doubles back is not straight.
        """
        cfg = self.config
        pts = points_to_array(points)
        if len(pts) < 3:
            return ClassificationResult.none()

        first, last = pts[0], pts[-1]
        if distance(first, last) < cfg.line_min_length:
            return ClassificationResult.none()

        deviation = float(np.mean([segment_distance(p, first, last) for p in pts]))
        confidence = max(0.0, 1 - deviation / cfg.line_max_deviation)

        if confidence > cfg.line_accept:
            return ClassificationResult(kind=ShapeKind.LINE, confidence=min(1.0, confidence))
        return ClassificationResult.none()


def extreme_points(points, merge_distance=30.0):
    """
    Top, bottom, left and right extremes, dropping any within merge_distance
    of an earlier one.
    """
    pts = points_to_array(points)
    if len(pts) == 0:
        return pts

    indices = [
        int(np.argmin(pts[:, 1])),
        int(np.argmax(pts[:, 1])),
        int(np.argmin(pts[:, 0])),
        int(np.argmax(pts[:, 0])),
    ]

    unique = []
    for idx in indices:
        if all(distance(pts[idx], pts[j]) >= merge_distance for j in unique):
            unique.append(idx)
    return pts[unique]


def find_triangle_corners(points, merge_distance=30.0):
    """
    Three representative triangle corners.

    Uses the first three distinct extremes, falling back to the first,
    middle and last points.
    """
    pts = points_to_array(points)
    extremes = extreme_points(pts, merge_distance)
    if len(extremes) >= 3:
        return extremes[:3]
    return _first_mid_last(pts)


def _first_mid_last(pts):
    if len(pts) < 3:
        return pts[:0]
    return pts[[0, len(pts) // 2, len(pts) - 1]]


def _side_bands(pts, bbox, band):
    return {
        "top": pts[np.abs(pts[:, 1] - bbox.min_y) < band],
        "bottom": pts[np.abs(pts[:, 1] - bbox.max_y) < band],
        "left": pts[np.abs(pts[:, 0] - bbox.min_x) < band],
        "right": pts[np.abs(pts[:, 0] - bbox.max_x) < band],
    }


def _principal_direction(pts):
    """Direction of the best-fit line through the points, in [0, pi)."""
    start, end = fit_line(pts)
    return math.atan2(end[1] - start[1], end[0] - start[0]) % math.pi


def _direction_gap(a, b):
    gap = abs(a - b) % math.pi
    return min(gap, math.pi - gap)


def _rectangle_fill(pts):
    """Hull area over minimum-area rectangle area."""
    rect = minimum_area_rectangle(pts)
    if rect.area <= 0:
        return 0.0
    return min(1.0, polygon_area(convex_hull(pts)) / rect.area)
