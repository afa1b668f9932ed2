"""
Stroke normalization for point-cloud comparison.

Resample to a fixed point count, rotate the indicative angle to zero, scale
uniformly into a reference square and translate the centroid to the origin.
Each stage maps an (N, 2) array to a new (N, 2) array.
"""

import math

import numpy as np

from quickshape.geometry.primitives import bounding_box, centroid, distance, path_length
from quickshape.models import points_to_array
from quickshape.tracer import trace


def resample(points, n=64):
    """
    Resample a stroke to exactly n points equally spaced along its path.

    Each interpolated point is inserted back into the walk, so spacing is
    measured from the previous output point rather than the previous input
    vertex.

    Args:
        points: stroke as Point models, (x, y) pairs or an (N, 2) array
        n: number of output points

    Returns:
        (n, 2) array; empty for an empty stroke
    """
    pts = points_to_array(points)
    if len(pts) == 0 or n <= 0:
        return np.empty((0, 2), dtype=float)
    if n == 1:
        return pts[:1].copy()

    interval = path_length(pts) / (n - 1)
    if interval == 0:
        return np.repeat(pts[:1], n, axis=0)

    src = [p for p in pts]
    out = [src[0]]
    accumulated = 0.0
    i = 1
    while i < len(src):
        d = distance(src[i - 1], src[i])
        if d > 0 and accumulated + d >= interval:
            t = (interval - accumulated) / d
            q = src[i - 1] + t * (src[i] - src[i - 1])
            out.append(q)
            src.insert(i, q)
            accumulated = 0.0
        else:
            accumulated += d
        i += 1

    # rounding can leave the walk one short of the endpoint
    while len(out) < n:
        out.append(pts[-1])

    return np.array(out[:n], dtype=float)


def indicative_angle(points):
    """Angle from the centroid to the first point, in radians."""
    pts = points_to_array(points)
    if len(pts) == 0:
        return 0.0
    c = centroid(pts)
    return math.atan2(pts[0][1] - c[1], pts[0][0] - c[0])


def rotate_by(points, theta):
    """Rotate every point about the centroid by theta radians."""
    pts = points_to_array(points)
    if len(pts) == 0:
        return pts.copy()
    c = centroid(pts)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    rotation = np.array([[cos_t, -sin_t], [sin_t, cos_t]])
    return (pts - c) @ rotation.T + c


def rotate_to_zero(points):
    """Rotate so the first point lies on the positive x axis from the centroid."""
    return rotate_by(points, -indicative_angle(points))


def scale_to_square(points, size=250.0):
    """
    Scale uniformly so the larger bounding-box side equals `size`.

    Aspect ratio is preserved. A stroke with a zero-size box is returned
    unchanged.
    """
    pts = points_to_array(points)
    bbox = bounding_box(pts)
    longest = max(bbox.width, bbox.height)
    if longest == 0:
        return pts.copy()
    return pts * (size / longest)


def translate_to_origin(points):
    """Translate so the centroid sits at the origin."""
    pts = points_to_array(points)
    if len(pts) == 0:
        return pts.copy()
    return pts - centroid(pts)


@trace(label="normalize_stroke", arg_names=["num_points"])
def normalize_stroke(points, num_points=64, size=250.0):
    """Resample, rotate to zero, scale to square and translate to origin."""
    pts = resample(points, num_points)
    pts = rotate_to_zero(pts)
    pts = scale_to_square(pts, size)
    return translate_to_origin(pts)


def path_distance(a, b):
    """
    Mean pointwise distance between two equal-length point clouds.

    Raises:
        ValueError: if the clouds differ in length
    """
    a = points_to_array(a)
    b = points_to_array(b)
    if len(a) != len(b):
        raise ValueError(f"Point clouds differ in length: {len(a)} != {len(b)}")
    if len(a) == 0:
        return 0.0
    return float(np.linalg.norm(a - b, axis=1).mean())
