"""
Hull-ratio decision-tree classifier.

Simplifies the stroke, takes its convex hull and dispatches on scale-free
ratios: thinness for lines and circles, inscribed-triangle coverage for
triangles, and minimum-rectangle coverage for squares and rectangles. Round
candidates must also sit close to their fitted circle.
"""

import numpy as np

from quickshape.classify.base import Classifier, is_degenerate
from quickshape.config import RecognizerConfig
from quickshape.geometry.fitting import fit_circle, fit_line
from quickshape.geometry.hull import (
    convex_hull,
    largest_inscribed_triangle,
    minimum_area_rectangle,
)
from quickshape.geometry.primitives import distance, polygon_area
from quickshape.models import ClassificationResult, ShapeKind, points_to_array
from quickshape.strokes.features import thinness_ratio
from quickshape.strokes.simplify import rdp_simplify
from quickshape.tracer import get_tracer, trace


class HullRatioClassifier(Classifier):
    """Decision tree over convex-hull ratios."""

    name = "hull"

    def __init__(self, config=None):
        config = config or RecognizerConfig()
        self.config = config.hull
        self.epsilon = config.simplify.rdp_epsilon

    @trace(label="hull_classify")
    def classify(self, points):
        tracer = get_tracer()
        cfg = self.config
        pts = points_to_array(points)

        if is_degenerate(pts):
            return ClassificationResult.none()

        simplified = rdp_simplify(pts, self.epsilon)
        hull = convex_hull(simplified)
        hull_area = polygon_area(hull)
        thinness = thinness_ratio(hull)

        tracer.event(
            "Hull properties",
            simplified=len(simplified),
            hull=len(hull),
            area=hull_area,
            thinness=thinness,
        )

        if thinness > cfg.line_thinness:
            start, end = fit_line(simplified)
            if distance(start, end) > cfg.min_line_length:
                return ClassificationResult(kind=ShapeKind.LINE, confidence=0.9)

        if cfg.circle_thinness_min <= thinness <= cfg.circle_thinness_max and self._is_round(simplified):
            aspect = minimum_area_rectangle(hull).aspect_ratio
            if aspect > cfg.circle_aspect:
                return ClassificationResult(kind=ShapeKind.CIRCLE, confidence=0.85)
            if aspect > cfg.oval_aspect:
                return ClassificationResult(kind=ShapeKind.OVAL, confidence=0.8)

        triangle = largest_inscribed_triangle(hull)
        triangle_ratio = polygon_area(triangle) / hull_area if hull_area > 0 else 0.0
        if triangle_ratio > cfg.triangle_ratio and len(hull) >= 3:
            return ClassificationResult(kind=ShapeKind.TRIANGLE, confidence=0.8)

        rect = minimum_area_rectangle(hull)
        rect_ratio = hull_area / rect.area if rect.area > 0 else 0.0
        tracer.event("Enclosure ratios", triangle=triangle_ratio, rectangle=rect_ratio)

        if rect_ratio > cfg.rectangle_ratio and len(hull) >= 4:
            if rect.aspect_ratio > cfg.square_aspect:
                return ClassificationResult(kind=ShapeKind.SQUARE, confidence=0.85)
            return ClassificationResult(kind=ShapeKind.RECTANGLE, confidence=0.8)

        return ClassificationResult.none()

    def _is_round(self, points):
        """Whether the points keep a steady distance from their fitted circle."""
        center, radius = fit_circle(points)
        if radius <= 0:
            return False
        spread = float(np.linalg.norm(points - center, axis=1).std()) / radius
        get_tracer().event("Circle fit", level="DEBUG", radius=radius, spread=spread)
        return spread <= self.config.circle_max_spread
