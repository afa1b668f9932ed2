"""
Normalized point-cloud template matching.

The stroke is virtually closed, normalized like the templates and compared to
every template by mean pointwise distance, in both drawing directions. The
best score per label is then adjusted by a per-label fuzzy table driven by the
stroke's geometry, measured in the frame of its minimum-area rectangle so the
correction does not depend on how the stroke was rotated.
"""

import math

from quickshape.classify.base import Classifier, is_degenerate
from quickshape.config import RecognizerConfig
from quickshape.geometry.hull import minimum_area_rectangle
from quickshape.geometry.primitives import bounding_box, path_length
from quickshape.models import ClassificationResult, ShapeKind, points_to_array
from quickshape.strokes.features import analyze_geometry, apply_virtual_closure
from quickshape.strokes.normalize import path_distance
from quickshape.tracer import get_tracer, trace


class TemplateClassifier(Classifier):
    """Template matcher over an injected TemplateStore."""

    name = "template"

    def __init__(self, template_store, config=None):
        self.config = config or RecognizerConfig()
        self.template_store = template_store

    @trace(label="template_classify")
    def classify(self, points):
        tracer = get_tracer()
        pts = points_to_array(points)

        if is_degenerate(pts):
            return ClassificationResult.none()

        closed = apply_virtual_closure(pts, self.config.closure)
        geometry = analyze_geometry(closed, self.config.closure, self.config.simplify)
        candidates = [self.template_store.normalize(closed)]
        if self.config.template.match_reversed:
            candidates.append(self.template_store.normalize(closed[::-1]))

        best_by_label = {}
        for template in self.template_store.templates():
            reference = template.as_array()
            half_diagonal = _half_diagonal(reference)
            if half_diagonal <= 0:
                continue
            d = min(path_distance(candidate, reference) for candidate in candidates)
            score = 1 - d / half_diagonal
            if score > best_by_label.get(template.label, -math.inf):
                best_by_label[template.label] = score

        if not best_by_label:
            return ClassificationResult.none()

        rect = minimum_area_rectangle(closed)
        straightness = path_length(closed) / max(rect.width, rect.height)

        corrected = {
            label: score * fuzzy_factor(label, geometry, rect.area, straightness)
            for label, score in best_by_label.items()
        }

        tracer.event(
            "Template scores",
            level="DEBUG",
            raw={k.value: round(v, 3) for k, v in best_by_label.items()},
            corrected={k.value: round(v, 3) for k, v in corrected.items()},
        )

        best_label = max(corrected, key=corrected.get)
        best_score = corrected[best_label]
        tracer.event("Best template match", label=best_label, score=best_score, geometry=geometry)

        if best_score < self.config.template.min_score:
            return ClassificationResult.none()

        return ClassificationResult(kind=best_label, confidence=min(1.0, best_score))


def _half_diagonal(points):
    """Half the diagonal of the square enclosing the points' bounding box."""
    bbox = bounding_box(points)
    return math.sqrt(2) * max(bbox.width, bbox.height) / 2


def fuzzy_factor(label, geometry, rect_area=0.0, straightness=1.0):
    """
    Multiplicative confidence correction for one label.

    Args:
        label: ShapeKind being scored
        geometry: StrokeGeometry of the (virtually closed) stroke
        rect_area: area of the stroke's minimum-area rectangle
        straightness: path length over the longer rectangle side
    """
    corners = geometry.corner_count
    aspect = geometry.aspect_ratio
    factor = 1.0

    if label == ShapeKind.TRIANGLE:
        if 2 <= corners <= 5:
            factor *= 1.1
        elif corners > 8:
            factor *= 0.7

    elif label == ShapeKind.SQUARE:
        if 3 <= corners <= 6:
            factor *= 1.1
        elif corners > 8:
            factor *= 0.7
        if aspect >= 0.7:
            factor *= 1.05
        elif aspect < 0.3:
            factor *= 0.8

    elif label == ShapeKind.RECTANGLE:
        if 3 <= corners <= 6:
            factor *= 1.1
        elif corners > 8:
            factor *= 0.7
        if aspect < 0.95:
            factor *= 1.05

    elif label == ShapeKind.CIRCLE:
        if geometry.roundness >= 0.95:
            factor *= 1.1
        elif geometry.roundness < 0.9:
            factor *= 0.75
        if aspect > 0.5:
            factor *= 1.05
        elif aspect < 0.2:
            factor *= 0.8

    elif label == ShapeKind.OVAL:
        if 0.3 <= aspect < 0.85:
            factor *= 1.1
        elif aspect >= 0.9:
            factor *= 0.85
        if geometry.roundness >= 0.85:
            factor *= 1.05

    elif label == ShapeKind.LINE:
        if corners <= 2:
            factor *= 1.2
        elif corners > 3:
            factor *= 0.3
        if aspect < 0.2:
            factor *= 1.3
        elif aspect > 0.3:
            factor *= 0.2
        factor *= 0.5 if geometry.is_closed else 1.1
        if rect_area > 50000:
            factor *= 0.4
        if straightness > 1.5:
            factor *= 0.3

    if label != ShapeKind.LINE and geometry.is_closed:
        factor *= 1.05

    return factor
