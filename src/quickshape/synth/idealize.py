"""
Idealized shape synthesis.

Turns a classification into a clean parametric shape placed where the user
drew, and flattens shapes into renderable polylines or SVG path data.
"""

import math

from quickshape.classify.heuristic import find_triangle_corners
from quickshape.geometry.primitives import bounding_box
from quickshape.models import (
    CircleShape,
    LineShape,
    OvalShape,
    RectangleShape,
    ShapeKind,
    SquareShape,
    TriangleShape,
    array_to_points,
    make_point,
    points_to_array,
)
from quickshape.tracer import trace


@trace(label="synthesize")
def synthesize(result, points, merge_distance=30.0):
    """
    Build the idealized shape for a classification.

    Geometry comes from the original, unnormalized stroke.

    Args:
        result: ClassificationResult
        points: the stroke that was classified
        merge_distance: extreme points closer than this count as one corner

    Returns:
        matching IdealizedShape variant, or None for ShapeKind.NONE or an
        empty stroke
    """
    pts = points_to_array(points)
    if result.kind == ShapeKind.NONE or len(pts) == 0:
        return None

    bbox = bounding_box(pts)
    center = make_point(*bbox.center)

    if result.kind == ShapeKind.CIRCLE:
        return CircleShape(center=center, radius=max(bbox.width, bbox.height) / 2)

    if result.kind == ShapeKind.OVAL:
        return OvalShape(center=center, width=bbox.width, height=bbox.height)

    if result.kind == ShapeKind.SQUARE:
        size = max(bbox.width, bbox.height)
        return SquareShape(center=center, width=size, height=size)

    if result.kind == ShapeKind.RECTANGLE:
        return RectangleShape(center=center, width=bbox.width, height=bbox.height)

    if result.kind == ShapeKind.TRIANGLE:
        corners = find_triangle_corners(pts, merge_distance)
        if len(corners) < 3:
            # too few samples for distinct corners
            corners = pts[[0, len(pts) // 2, -1]]
        return TriangleShape(points=array_to_points(corners))

    if result.kind == ShapeKind.LINE:
        return LineShape(points=array_to_points(pts[[0, -1]]))

    return None


def flatten(shape, segments=36):
    """
    Tessellate a shape into a polyline.

    Circles and ovals give segments + 1 points, rectangles 5 and triangles 4,
    each ending on its first point. Lines stay open with 2 points.
    """
    if shape is None:
        return []

    if shape.kind in (ShapeKind.CIRCLE, ShapeKind.OVAL):
        if shape.kind == ShapeKind.CIRCLE:
            rx = ry = shape.radius
        else:
            rx = shape.width / 2
            ry = shape.height / 2
        cx, cy = shape.center.x, shape.center.y
        return [
            make_point(
                cx + rx * math.cos(2 * math.pi * i / segments),
                cy + ry * math.sin(2 * math.pi * i / segments),
            )
            for i in range(segments + 1)
        ]

    if shape.kind in (ShapeKind.SQUARE, ShapeKind.RECTANGLE):
        cx, cy = shape.center.x, shape.center.y
        hw = shape.width / 2
        hh = shape.height / 2
        return [
            make_point(cx - hw, cy - hh),
            make_point(cx + hw, cy - hh),
            make_point(cx + hw, cy + hh),
            make_point(cx - hw, cy + hh),
            make_point(cx - hw, cy - hh),
        ]

    if shape.kind == ShapeKind.TRIANGLE:
        return list(shape.points) + [shape.points[0]]

    if shape.kind == ShapeKind.LINE:
        return list(shape.points)

    return []


def shape_to_svg_path(shape, segments=36):
    """
    SVG path data for a shape.

    Circles and ovals use two elliptical arcs; everything else follows the
    flattened outline.
    """
    if shape is None:
        return ""

    if shape.kind in (ShapeKind.CIRCLE, ShapeKind.OVAL):
        if shape.kind == ShapeKind.CIRCLE:
            rx = ry = shape.radius
        else:
            rx = shape.width / 2
            ry = shape.height / 2
        cx, cy = shape.center.x, shape.center.y
        return (
            f"M {cx - rx:.2f} {cy:.2f} "
            f"A {rx:.2f} {ry:.2f} 0 1 0 {cx + rx:.2f} {cy:.2f} "
            f"A {rx:.2f} {ry:.2f} 0 1 0 {cx - rx:.2f} {cy:.2f} Z"
        )

    outline = flatten(shape, segments)
    if not outline:
        return ""

    parts = [f"M {outline[0].x:.2f} {outline[0].y:.2f}"]
    closed = shape.kind != ShapeKind.LINE
    body = outline[1:-1] if closed else outline[1:]
    for p in body:
        parts.append(f"L {p.x:.2f} {p.y:.2f}")
    if closed:
        parts.append("Z")
    return " ".join(parts)
