"""
Least-squares line and circle fits.
"""

import math

import numpy as np

from quickshape.geometry.primitives import bounding_box
from quickshape.models import points_to_array


def fit_line(points, eps=1e-9):
    """
    Fit a line through the points along the principal axis.

    The direction is the eigenvector of the larger eigenvalue of the 2x2
    covariance matrix (closed form). Points are projected onto that axis and
    the extreme projections give the segment endpoints.

    Returns:
        (start, end) as numpy arrays
    """
    pts = points_to_array(points)
    if len(pts) == 0:
        origin = np.zeros(2)
        return origin, origin.copy()
    if len(pts) == 1:
        return pts[0].copy(), pts[0].copy()

    center = pts.mean(axis=0)
    rel = pts - center
    xx = float(np.dot(rel[:, 0], rel[:, 0]))
    yy = float(np.dot(rel[:, 1], rel[:, 1]))
    xy = float(np.dot(rel[:, 0], rel[:, 1]))

    trace = xx + yy
    det = xx * yy - xy * xy
    lambda1 = (trace + math.sqrt(max(0.0, trace * trace - 4 * det))) / 2

    if abs(xy) > eps:
        direction = np.array([lambda1 - yy, xy])
    elif xx >= yy:
        direction = np.array([1.0, 0.0])
    else:
        direction = np.array([0.0, 1.0])

    norm = np.linalg.norm(direction)
    if norm == 0:
        return center.copy(), center.copy()
    direction = direction / norm

    projections = rel @ direction
    start = center + projections.min() * direction
    end = center + projections.max() * direction
    return start, end


def fit_circle(points):
    """
    Fit a circle as the centroid and the mean distance to it.

    Fewer than three points fall back to the bounding box center and half its
    larger side.
    """
    pts = points_to_array(points)
    if len(pts) < 3:
        bbox = bounding_box(pts)
        return np.array(bbox.center), max(bbox.width, bbox.height) / 2

    center = pts.mean(axis=0)
    radius = float(np.linalg.norm(pts - center, axis=1).mean())
    return center, radius
