"""
SVG previews of recognized strokes.

Draws each raw stroke with its idealized replacement as a dashed outline,
the way a host shows a pending shape before the user applies it.
"""

import numpy as np
import svgwrite

from quickshape.geometry.primitives import bounding_box
from quickshape.models import points_to_array
from quickshape.synth.idealize import shape_to_svg_path
from quickshape.tracer import get_tracer, trace


@trace(label="emit_preview_svg")
def emit_preview_svg(strokes, recognitions, margin=20.0, stroke_width=2.0):
    """
    Create an SVG document with raw strokes and idealized outlines.

    Args:
        strokes: list of raw strokes
        recognitions: list of Recognition objects, one per stroke
        margin: padding around the drawing in user units
        stroke_width: line width

    Returns:
        svgwrite.Drawing object
    """
    tracer = get_tracer()

    arrays = [points_to_array(s) for s in strokes]
    non_empty = [a for a in arrays if len(a)]
    if non_empty:
        bbox = bounding_box(np.vstack(non_empty))
    else:
        bbox = bounding_box([])

    width = bbox.width + 2 * margin
    height = bbox.height + 2 * margin

    dwg = svgwrite.Drawing(size=(f"{width:.0f}px", f"{height:.0f}px"))
    dwg.viewbox(bbox.min_x - margin, bbox.min_y - margin, width, height)

    dwg.defs.add(dwg.style("""
        .raw { stroke-linecap: round; stroke-linejoin: round; }
        .ideal { stroke-dasharray: 6 4; }
    """))

    raw_group = dwg.g(id="raw", fill="none", stroke="#888888",
                      stroke_width=stroke_width, class_="raw")
    ideal_group = dwg.g(id="ideal", fill="none", stroke="#1e6fd9",
                        stroke_width=stroke_width, class_="ideal")

    shapes = 0
    for index, (pts, recognition) in enumerate(zip(arrays, recognitions)):
        if len(pts) >= 2:
            raw_group.add(dwg.polyline([(float(x), float(y)) for x, y in pts], id=f"stroke-{index}"))

        path_data = shape_to_svg_path(recognition.shape)
        if path_data:
            path = dwg.path(d=path_data, id=f"shape-{index}")
            path.set_desc(title=f"{recognition.result.kind.value} ({recognition.result.confidence:.2f})")
            ideal_group.add(path)
            shapes += 1

    dwg.add(raw_group)
    dwg.add(ideal_group)

    tracer.event(f"SVG preview emitted with {len(arrays)} strokes and {shapes} shapes")

    return dwg
