"""
Polyline simplification and corner detection.

Ramer-Douglas-Peucker simplification drives the corner count; angle-based
decimation and vertex-angle corner finding feed the heuristic classifier.
"""

import numpy as np

from quickshape.geometry.primitives import distance, perpendicular_distances, vertex_angle
from quickshape.models import points_to_array


def rdp_simplify(points, epsilon=2.0):
    """
    Ramer-Douglas-Peucker algorithm for polyline simplification.

    Recursively splits at the point farthest from the line through the
    segment endpoints while that distance exceeds epsilon.

    Args:
        points: stroke as Point models, (x, y) pairs or an (N, 2) array
        epsilon: maximum perpendicular distance threshold

    Returns:
        simplified (M, 2) array; inputs with fewer than 3 points come back as is
    """
    pts = points_to_array(points)
    if len(pts) < 3:
        return pts.copy()

    keep = np.zeros(len(pts), dtype=bool)
    _rdp_mark(pts, 0, len(pts) - 1, epsilon, keep)
    return pts[keep]


def _rdp_mark(points, first, last, epsilon, keep):
    """Mark surviving indices in [first, last]."""
    keep[first] = True
    keep[last] = True
    if last - first < 2:
        return

    # Find point with maximum distance from line between first and last
    inner = points[first + 1:last]
    distances = perpendicular_distances(inner, points[first], points[last])
    max_idx = int(np.argmax(distances))
    max_dist = distances[max_idx]

    if max_dist > epsilon:
        split = first + 1 + max_idx
        _rdp_mark(points, first, split, epsilon, keep)
        _rdp_mark(points, split, last, epsilon, keep)


def count_corners(points, epsilon=2.0):
    """Number of points surviving RDP simplification."""
    return len(rdp_simplify(points, epsilon))


def decimate_by_angle(points, tolerance, sharp_angle=2.6):
    """
    Drop points that neither turn sharply nor lie far from the last kept point.

    The first and last points always survive.
    """
    pts = points_to_array(points)
    if len(pts) < 3:
        return pts.copy()

    kept = [pts[0]]
    previous = pts[0]
    for i in range(1, len(pts) - 1):
        current = pts[i]
        angle = vertex_angle(previous, current, pts[i + 1])
        if angle < sharp_angle or distance(previous, current) > tolerance:
            kept.append(current)
            previous = current

    kept.append(pts[-1])
    return np.array(kept)


def drop_closing_duplicate(points, tolerance=1e-9):
    """Remove a trailing point that repeats the first one."""
    pts = points_to_array(points)
    if len(pts) > 1 and distance(pts[0], pts[-1]) <= tolerance:
        return pts[:-1]
    return pts


def find_corners(points, threshold=1.4, closed=False):
    """
    Indices of vertices whose interior angle is below threshold.

    Closed strokes wrap around so the first and last vertices are tested
    against their cyclic neighbours.
    """
    pts = points_to_array(points)
    if closed:
        pts = drop_closing_duplicate(pts)
    n = len(pts)
    if n < 3:
        return []

    if closed:
        indices = range(n)
    else:
        indices = range(1, n - 1)

    return [
        i for i in indices
        if vertex_angle(pts[(i - 1) % n], pts[i], pts[(i + 1) % n]) < threshold
    ]


def vertex_angles(points, closed=False):
    """Interior angle at every vertex; endpoints of open strokes get pi."""
    pts = points_to_array(points)
    if closed:
        pts = drop_closing_duplicate(pts)
    n = len(pts)
    angles = np.full(n, np.pi)
    if n < 3:
        return angles

    for i in range(n):
        if not closed and (i == 0 or i == n - 1):
            continue
        angles[i] = vertex_angle(pts[(i - 1) % n], pts[i], pts[(i + 1) % n])
    return angles
