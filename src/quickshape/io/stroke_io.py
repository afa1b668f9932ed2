"""
Stroke file loading and artifact saving.

Stroke files are JSON: either {"strokes": [[[x, y], ...], ...]} or a bare
list of strokes. Points may also be written as {"x": ..., "y": ...} objects.
"""

import json
import os

from quickshape.models import points_to_array
from quickshape.tracer import get_tracer


def ensure_dir(path):
    """Create directory if it does not exist."""
    if path:
        os.makedirs(path, exist_ok=True)


def load_strokes(path):
    """
    Load strokes from a JSON file.

    Returns:
        list of (N, 2) float arrays

    Raises:
        ValueError: if the file is not valid stroke JSON
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("strokes")
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of strokes in {path}")

    strokes = []
    for index, raw in enumerate(data):
        try:
            strokes.append(parse_stroke(raw))
        except (TypeError, ValueError, KeyError) as e:
            raise ValueError(f"Stroke {index} in {path} is malformed: {e}") from e

    get_tracer().event(f"Loaded strokes: {path}", count=len(strokes))
    return strokes


def parse_stroke(raw):
    """Convert a JSON stroke (pairs or x/y objects) to an (N, 2) array."""
    if not isinstance(raw, list):
        raise TypeError(f"stroke must be a list, got {type(raw).__name__}")

    pairs = []
    for point in raw:
        if isinstance(point, dict):
            pairs.append((float(point["x"]), float(point["y"])))
        else:
            x, y = point
            pairs.append((float(x), float(y)))
    return points_to_array(pairs)


def save_json(data, path, indent=2):
    """
    Save a dictionary or Pydantic model to JSON.
    """
    tracer = get_tracer()

    ensure_dir(os.path.dirname(path))

    # Handle Pydantic models
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, default=str)

    tracer.event(f"Saved JSON: {path}")


def save_svg(dwg, path):
    """
    Save an svgwrite drawing to file.
    """
    ensure_dir(os.path.dirname(path))
    dwg.saveas(path, pretty=True)
    get_tracer().event(f"Saved SVG: {path}")
