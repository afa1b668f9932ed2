"""
Convex hull and hull-derived enclosures.

Graham scan hull, minimum-area bounding rectangle over hull edges, the
rotation that aligns a stroke with that rectangle, and the largest triangle
inscribed in a hull.
"""

import math
from dataclasses import dataclass

import numpy as np

from quickshape.geometry.primitives import cross_product, polygon_area
from quickshape.models import points_to_array


@dataclass(frozen=True)
class MinAreaRect:
    """Minimum-area enclosing rectangle, rotated by `angle` radians."""
    width: float
    height: float
    angle: float

    @property
    def area(self):
        return self.width * self.height

    @property
    def aspect_ratio(self):
        longest = max(self.width, self.height)
        if longest <= 0:
            return 0.0
        return min(self.width, self.height) / longest


def convex_hull(points):
    """
    Convex hull using the Graham scan.

    Duplicate points are removed first. The pivot is the lowest point
    (leftmost on ties); the rest are sorted by polar angle around it with
    distance as the tie-break, and the sweep pops while the last three hull
    points make a non-left turn.

    Returns:
        (M, 2) array of hull vertices in counter-clockwise order
    """
    pts = points_to_array(points)
    if len(pts) == 0:
        return pts

    pts = np.unique(pts, axis=0)
    if len(pts) < 3:
        return pts

    pivot_idx = np.lexsort((pts[:, 0], pts[:, 1]))[0]
    pivot = pts[pivot_idx]
    rest = np.delete(pts, pivot_idx, axis=0)

    rel = rest - pivot
    angles = np.arctan2(rel[:, 1], rel[:, 0])
    dists = np.hypot(rel[:, 0], rel[:, 1])
    order = np.lexsort((dists, angles))

    hull = [pivot, rest[order[0]]]
    for idx in order[1:]:
        p = rest[idx]
        while len(hull) > 1 and cross_product(hull[-2], hull[-1], p) <= 0:
            hull.pop()
        hull.append(p)

    return np.array(hull)


def minimum_area_rectangle(points):
    """
    Minimum-area rectangle enclosing a point set.

    Each hull edge is rotated onto the x-axis and the axis-aligned box of the
    rotated hull is measured; the smallest box wins.
    """
    hull = convex_hull(points)
    if len(hull) < 2:
        return MinAreaRect(0.0, 0.0, 0.0)
    if len(hull) == 2:
        # collinear input: the rectangle lies along the segment
        dx, dy = hull[1] - hull[0]
        return MinAreaRect(float(math.hypot(dx, dy)), 0.0, math.atan2(dy, dx))

    best = None
    for i in range(len(hull)):
        p1 = hull[i]
        p2 = hull[(i + 1) % len(hull)]
        angle = math.atan2(p2[1] - p1[1], p2[0] - p1[0])

        cos_a = math.cos(-angle)
        sin_a = math.sin(-angle)
        rotation = np.array([[cos_a, -sin_a], [sin_a, cos_a]])
        rotated = hull @ rotation.T

        span = rotated.max(axis=0) - rotated.min(axis=0)
        rect = MinAreaRect(float(span[0]), float(span[1]), angle)
        if best is None or rect.area < best.area:
            best = rect

    return best


def align_to_rectangle(points):
    """
    Rotate a stroke about its centroid so its minimum-area rectangle is
    axis-aligned.

    Measurements taken against the bounding box of the result no longer
    depend on how the stroke was rotated when drawn.
    """
    pts = points_to_array(points)
    if len(pts) < 2:
        return pts.copy()

    angle = minimum_area_rectangle(pts).angle
    center = pts.mean(axis=0)
    cos_a = math.cos(-angle)
    sin_a = math.sin(-angle)
    rotation = np.array([[cos_a, -sin_a], [sin_a, cos_a]])
    return (pts - center) @ rotation.T + center


def largest_inscribed_triangle(hull):
    """
    Largest-area triangle with vertices on the hull.

    Exhaustive over vertex triples; hulls from simplified strokes are small.
    Returns fewer than three points when the hull has fewer than three.
    """
    hull = points_to_array(hull)
    if len(hull) < 3:
        return hull.copy()

    best_area = 0.0
    best = hull[:3].copy()
    n = len(hull)
    for i in range(n):
        for j in range(i + 1, n):
            for k in range(j + 1, n):
                area = polygon_area(hull[[i, j, k]])
                if area > best_area:
                    best_area = area
                    best = hull[[i, j, k]]

    return best
