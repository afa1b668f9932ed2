"""
Seed strokes for the template library.

One raw stroke per shape kind, all traced clockwise on screen (y grows
downward). The store normalizes them before use.
"""

import math

import numpy as np

from quickshape.models import ShapeKind


def ellipse_stroke(rx, ry, num_points=64, center=(0.0, 0.0)):
    """Points evenly spaced in angle around an ellipse, starting at angle 0."""
    t = np.arange(num_points) * (2 * math.pi / num_points)
    return np.column_stack([center[0] + rx * np.cos(t), center[1] + ry * np.sin(t)])


def polygon_stroke(vertices, points_per_edge=16):
    """
    Closed outline through the vertices, sampled evenly along each edge.

    The first vertex is repeated at the end.
    """
    vertices = np.asarray(vertices, dtype=float)
    samples = []
    for i in range(len(vertices)):
        start = vertices[i]
        end = vertices[(i + 1) % len(vertices)]
        for step in range(points_per_edge):
            samples.append(start + (end - start) * (step / points_per_edge))
    samples.append(vertices[0])
    return np.array(samples)


def line_stroke(length=200.0, num_points=16):
    x = np.linspace(-length / 2, length / 2, num_points)
    return np.column_stack([x, np.zeros(num_points)])


def _equilateral_vertices(side=200.0):
    height = side * math.sqrt(3) / 2
    # bottom-left, apex, bottom-right around the centroid
    return [
        (-side / 2, height / 3),
        (0.0, -2 * height / 3),
        (side / 2, height / 3),
    ]


def default_strokes():
    """Raw seed stroke per shape kind."""
    return {
        ShapeKind.CIRCLE: ellipse_stroke(100.0, 100.0),
        ShapeKind.OVAL: ellipse_stroke(100.0, 50.0),
        ShapeKind.SQUARE: polygon_stroke([(-100, -100), (100, -100), (100, 100), (-100, 100)]),
        ShapeKind.RECTANGLE: polygon_stroke([(-100, -50), (100, -50), (100, 50), (-100, 50)]),
        ShapeKind.TRIANGLE: polygon_stroke(_equilateral_vertices()),
        ShapeKind.LINE: line_stroke(),
    }
