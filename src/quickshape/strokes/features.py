"""
Stroke feature extraction.

Closure tests, virtual closure and the shape descriptors (corner count,
aspect ratio, roundness, thinness) shared by the classifiers.
"""

import math
from dataclasses import dataclass

import numpy as np

from quickshape.config import ClosureConfig, SimplifyConfig
from quickshape.geometry.hull import minimum_area_rectangle
from quickshape.geometry.primitives import (
    distance,
    path_length,
    polygon_area,
    polygon_perimeter,
)
from quickshape.models import StrokeGeometry, points_to_array
from quickshape.strokes.simplify import count_corners


@dataclass(frozen=True)
class ClosureMetrics:
    """Endpoint gap of a stroke, absolute and relative to its path length."""
    gap: float
    path_length: float

    @property
    def ratio(self):
        if self.path_length <= 0:
            return 1.0
        return self.gap / self.path_length


def closure_metrics(points):
    pts = points_to_array(points)
    if len(pts) < 2:
        return ClosureMetrics(gap=0.0, path_length=0.0)
    return ClosureMetrics(gap=distance(pts[0], pts[-1]), path_length=path_length(pts))


def is_closed(points, config=None):
    """
    Whether the stroke ends near where it started.

    Closed when the endpoint gap is under the absolute threshold OR under the
    given fraction of the path length.
    """
    config = config or ClosureConfig()
    pts = points_to_array(points)
    if len(pts) < 3:
        return False

    metrics = closure_metrics(pts)
    return metrics.gap < config.closed_distance or metrics.ratio < config.closed_ratio


def apply_virtual_closure(points, config=None):
    """
    Append a copy of the first point to a nearly-closed stroke.

    Strokes that are already closed, or whose gap is too large, are returned
    unchanged. The caller's stroke is never mutated.
    """
    config = config or ClosureConfig()
    pts = points_to_array(points)
    if len(pts) < 3 or is_closed(pts, config):
        return pts

    metrics = closure_metrics(pts)
    if metrics.gap < config.virtual_distance and metrics.ratio < config.virtual_ratio:
        return np.vstack([pts, pts[:1]])
    return pts


def roundness(points):
    """
    Perimeter of the equal-area circle over the actual perimeter, at most 1.

    Zero for strokes without area.
    """
    pts = points_to_array(points)
    perimeter = polygon_perimeter(pts)
    area = polygon_area(pts)
    if perimeter <= 0 or area <= 0:
        return 0.0
    ideal = 2 * math.pi * math.sqrt(area / math.pi)
    return min(1.0, ideal / perimeter)


def thinness_ratio(points):
    """Perimeter squared over area; infinite when the area is zero."""
    pts = points_to_array(points)
    area = polygon_area(pts)
    if area <= 0:
        return math.inf
    perimeter = polygon_perimeter(pts)
    return perimeter * perimeter / area


def aspect_ratio(points):
    """Short side over long side of the minimum-area enclosing rectangle."""
    return minimum_area_rectangle(points).aspect_ratio


def analyze_geometry(points, closure=None, simplify=None):
    """
    Summarize a stroke as a StrokeGeometry.

    Args:
        points: stroke to describe
        closure: ClosureConfig (defaults if None)
        simplify: SimplifyConfig (defaults if None)
    """
    closure = closure or ClosureConfig()
    simplify = simplify or SimplifyConfig()
    pts = points_to_array(points)

    return StrokeGeometry(
        corner_count=count_corners(pts, simplify.rdp_epsilon),
        aspect_ratio=aspect_ratio(pts),
        roundness=roundness(pts),
        is_closed=is_closed(pts, closure),
        closure_ratio=closure_metrics(pts).ratio,
    )
