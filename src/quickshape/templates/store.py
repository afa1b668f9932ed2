"""
Template library and correction log.

TemplateStore holds the normalized reference strokes read by the template
classifier. FeedbackStore records user corrections and teaches the template
store a new exemplar whenever a correction changes the shape kind.
Both serialize mutation with their own lock.
"""

import threading
import time

from quickshape.config import RecognizerConfig
from quickshape.geometry.primitives import path_length
from quickshape.models import (
    FeedbackRecord,
    FeedbackStats,
    LabelStats,
    ShapeKind,
    Template,
    array_to_points,
    points_to_array,
)
from quickshape.strokes.features import analyze_geometry, apply_virtual_closure
from quickshape.strokes.normalize import normalize_stroke
from quickshape.templates.defaults import default_strokes
from quickshape.tracer import get_tracer


class TemplateStore:
    """Mutable library of normalized templates, seeded one per shape kind."""

    def __init__(self, config=None, seed=True):
        self.config = config or RecognizerConfig()
        self._lock = threading.RLock()
        self._templates = []
        if seed:
            self.reset_defaults()

    def normalize(self, points):
        """Virtually close and normalize a stroke the way templates are stored."""
        closed = apply_virtual_closure(points, self.config.closure)
        return normalize_stroke(
            closed,
            num_points=self.config.normalize.num_points,
            size=self.config.normalize.square_size,
        )

    def add_template(self, label, points):
        """
        Normalize a stroke and append it under label.

        Raises:
            ValueError: for the none label or a stroke with no extent
        """
        label = ShapeKind(label)
        if label == ShapeKind.NONE:
            raise ValueError("Templates need a concrete shape label")

        pts = points_to_array(points)
        if len(pts) < 2 or path_length(pts) == 0:
            raise ValueError(f"Cannot learn a template from a stroke of {len(pts)} points with no length")

        template = Template(label=label, points=array_to_points(self.normalize(pts)))
        with self._lock:
            self._templates.append(template)
            count = sum(1 for t in self._templates if t.label == label)

        get_tracer().event("Template added", label=label, count=count)
        return template

    def templates(self):
        """Snapshot of the current templates."""
        with self._lock:
            return list(self._templates)

    def get_template_count(self, label):
        label = ShapeKind(label)
        with self._lock:
            return sum(1 for t in self._templates if t.label == label)

    def all_template_counts(self):
        counts = {}
        with self._lock:
            for t in self._templates:
                counts[t.label.value] = counts.get(t.label.value, 0) + 1
        return counts

    def clear(self):
        with self._lock:
            self._templates = []

    def reset_defaults(self):
        """Replace the library with the seeded templates."""
        seeded = [
            Template(label=label, points=array_to_points(self.normalize(stroke)))
            for label, stroke in default_strokes().items()
        ]
        with self._lock:
            self._templates = seeded

    def __len__(self):
        with self._lock:
            return len(self._templates)


class FeedbackStore:
    """Append-only log of user corrections that feeds template learning."""

    def __init__(self, template_store, clock=time.time):
        self.template_store = template_store
        self._clock = clock
        self._lock = threading.RLock()
        self._records = []

    def record_correction(self, detected_type, detected_confidence, corrected_type, stroke):
        """
        Log a correction and learn from it.

        When the corrected kind differs from the detected one, the stroke is
        added to the template store under the corrected kind. Strokes with no
        length are logged but not learned.

        Returns:
            the appended FeedbackRecord
        """
        tracer = get_tracer()
        config = self.template_store.config
        pts = points_to_array(stroke)

        record = FeedbackRecord(
            timestamp=self._clock(),
            detected_type=ShapeKind(detected_type),
            detected_confidence=min(1.0, max(0.0, float(detected_confidence))),
            corrected_type=ShapeKind(corrected_type),
            stroke=array_to_points(pts),
            geometry=analyze_geometry(pts, config.closure, config.simplify),
        )

        with self._lock:
            self._records.append(record)

        tracer.event(
            "Feedback recorded",
            detected=record.detected_type,
            corrected=record.corrected_type,
            confidence=record.detected_confidence,
        )

        if record.is_correction and record.corrected_type != ShapeKind.NONE:
            if len(pts) >= 2 and path_length(pts) > 0:
                self.template_store.add_template(record.corrected_type, pts)
            else:
                tracer.event("Correction not learned from empty stroke", level="WARN")

        return record

    def compute_stats(self):
        """Overall and per-detected-label accuracy over the log."""
        with self._lock:
            records = list(self._records)

        per_label = {}
        corrections = 0
        for record in records:
            stats = per_label.setdefault(record.detected_type.value, LabelStats())
            if record.is_correction:
                corrections += 1
                stats.incorrect += 1
            else:
                stats.correct += 1

        for stats in per_label.values():
            judged = stats.correct + stats.incorrect
            stats.accuracy = stats.correct / judged if judged else 0.0

        total = len(records)
        accuracy = (total - corrections) / total if total else 0.0
        return FeedbackStats(
            total=total,
            corrections=corrections,
            accuracy=accuracy,
            per_label=per_label,
        )

    def export_records(self):
        with self._lock:
            return list(self._records)

    def clear(self):
        with self._lock:
            self._records = []
        get_tracer().event("Feedback log cleared")
