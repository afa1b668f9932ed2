"""
Geometry primitives for stroke analysis.

Pure functions over (N, 2) point arrays. Degenerate inputs (zero or one point)
return zero-valued results instead of raising.
"""

import math
from dataclasses import dataclass

import numpy as np

from quickshape.models import points_to_array


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box of a point set."""
    min_x: float = 0.0
    min_y: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0

    @property
    def width(self):
        return self.max_x - self.min_x

    @property
    def height(self):
        return self.max_y - self.min_y

    @property
    def center(self):
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    @property
    def aspect_ratio(self):
        """Short side over long side; 0 for a degenerate box."""
        longest = max(self.width, self.height)
        if longest <= 0:
            return 0.0
        return min(self.width, self.height) / longest

    @property
    def area(self):
        return self.width * self.height


def distance(p1, p2):
    """Euclidean distance between two points."""
    return math.hypot(float(p2[0]) - float(p1[0]), float(p2[1]) - float(p1[1]))


def centroid(points):
    """Arithmetic mean of the points; (0, 0) for an empty stroke."""
    pts = points_to_array(points)
    if len(pts) == 0:
        return np.zeros(2)
    return pts.mean(axis=0)


def bounding_box(points):
    pts = points_to_array(points)
    if len(pts) == 0:
        return BoundingBox()
    mins = pts.min(axis=0)
    maxs = pts.max(axis=0)
    return BoundingBox(float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1]))


def path_length(points):
    """Sum of consecutive segment lengths (open polyline)."""
    pts = points_to_array(points)
    if len(pts) < 2:
        return 0.0
    return float(np.linalg.norm(np.diff(pts, axis=0), axis=1).sum())


def polygon_area(points):
    """
    Polygon area using the shoelace formula.

    The polygon is implicitly closed (last vertex connects to the first).
    """
    pts = points_to_array(points)
    if len(pts) < 3:
        return 0.0
    x = pts[:, 0]
    y = pts[:, 1]
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y)) / 2)


def polygon_perimeter(points):
    """Sum of edge lengths, wrapping from the last vertex to the first."""
    pts = points_to_array(points)
    if len(pts) < 2:
        return 0.0
    edges = np.roll(pts, -1, axis=0) - pts
    return float(np.linalg.norm(edges, axis=1).sum())


def vertex_angle(prev, current, nxt):
    """
    Interior angle at `current` in radians (pi for a straight continuation).

    Coincident neighbours yield pi so they never register as corners.
    """
    a = distance(prev, current)
    b = distance(current, nxt)
    c = distance(prev, nxt)
    if a == 0 or b == 0:
        return math.pi
    cos_angle = (a * a + b * b - c * c) / (2 * a * b)
    return math.acos(max(-1.0, min(1.0, cos_angle)))


def perpendicular_distance(point, line_start, line_end):
    """
    Distance from a point to the infinite line through a chord.

    Falls back to the point-to-point distance when the chord has zero length.
    """
    dx = float(line_end[0]) - float(line_start[0])
    dy = float(line_end[1]) - float(line_start[1])
    length = math.hypot(dx, dy)
    if length == 0:
        return distance(point, line_start)
    cross = dx * (float(point[1]) - float(line_start[1])) - dy * (float(point[0]) - float(line_start[0]))
    return abs(cross) / length


def perpendicular_distances(points, line_start, line_end):
    """Vectorised perpendicular_distance for an (N, 2) array."""
    pts = points_to_array(points)
    start = np.asarray(line_start, dtype=float)
    line_vec = np.asarray(line_end, dtype=float) - start
    length = np.linalg.norm(line_vec)
    if length == 0:
        return np.linalg.norm(pts - start, axis=1)
    rel = pts - start
    return np.abs(line_vec[0] * rel[:, 1] - line_vec[1] * rel[:, 0]) / length


def segment_distance(point, seg_start, seg_end):
    """Distance from a point to the closed segment [seg_start, seg_end]."""
    start = np.asarray(seg_start, dtype=float)
    seg = np.asarray(seg_end, dtype=float) - start
    length_sq = float(np.dot(seg, seg))
    p = np.asarray(point, dtype=float)
    if length_sq == 0:
        return float(np.linalg.norm(p - start))
    t = max(0.0, min(1.0, float(np.dot(p - start, seg)) / length_sq))
    return float(np.linalg.norm(p - (start + t * seg)))


def segment_intersection(p1, p2, q1, q2):
    """
    Intersection point of segments p1-p2 and q1-q2.

    Returns None when the segments are parallel or the crossing lies outside
    either segment's [0, 1] parameter range.
    """
    r = (float(p2[0]) - float(p1[0]), float(p2[1]) - float(p1[1]))
    s = (float(q2[0]) - float(q1[0]), float(q2[1]) - float(q1[1]))
    denom = r[0] * s[1] - r[1] * s[0]
    if denom == 0:
        return None

    qp = (float(q1[0]) - float(p1[0]), float(q1[1]) - float(p1[1]))
    t = (qp[0] * s[1] - qp[1] * s[0]) / denom
    u = (qp[0] * r[1] - qp[1] * r[0]) / denom
    if t < 0 or t > 1 or u < 0 or u > 1:
        return None

    return (float(p1[0]) + t * r[0], float(p1[1]) + t * r[1])


def cross_product(o, a, b):
    """Z component of (a - o) x (b - o); positive for a left turn."""
    return (float(a[0]) - float(o[0])) * (float(b[1]) - float(o[1])) - \
        (float(a[1]) - float(o[1])) * (float(b[0]) - float(o[0]))
