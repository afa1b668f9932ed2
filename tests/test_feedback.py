"""Tests for the template library and correction feedback."""

import math

import pytest

from quickshape.models import ShapeKind
from quickshape.templates.store import FeedbackStore, TemplateStore


CONCRETE_KINDS = [k for k in ShapeKind if k != ShapeKind.NONE]


@pytest.fixture
def store(default_config):
    return TemplateStore(default_config)


@pytest.fixture
def feedback(store):
    ticks = iter(range(1000))
    return FeedbackStore(store, clock=lambda: float(next(ticks)))


class TestTemplateStore:
    """Tests for the seeded template library."""

    def test_one_seed_per_kind(self, store):
        assert len(store) == len(CONCRETE_KINDS)
        for kind in CONCRETE_KINDS:
            assert store.get_template_count(kind) == 1
        assert store.get_template_count(ShapeKind.NONE) == 0

    def test_templates_are_normalized(self, store, default_config):
        for template in store.templates():
            assert len(template.points) == default_config.normalize.num_points

    def test_add_template(self, store, triangle_stroke):
        template = store.add_template("triangle", triangle_stroke)

        assert template.label == ShapeKind.TRIANGLE
        assert store.get_template_count(ShapeKind.TRIANGLE) == 2
        assert store.all_template_counts()["triangle"] == 2

    def test_add_template_rejects_none_label(self, store, square_stroke):
        with pytest.raises(ValueError):
            store.add_template(ShapeKind.NONE, square_stroke)

    @pytest.mark.parametrize("stroke", [[], [(4, 4)], [(4, 4), (4, 4), (4, 4)]])
    def test_add_template_rejects_empty_strokes(self, store, stroke):
        with pytest.raises(ValueError):
            store.add_template(ShapeKind.CIRCLE, stroke)

    def test_templates_is_a_snapshot(self, store, square_stroke):
        snapshot = store.templates()
        store.add_template(ShapeKind.SQUARE, square_stroke)

        assert len(snapshot) == len(CONCRETE_KINDS)

    def test_clear_and_reset(self, store, square_stroke):
        store.add_template(ShapeKind.SQUARE, square_stroke)
        store.clear()
        assert len(store) == 0

        store.reset_defaults()
        assert store.all_template_counts() == {k.value: 1 for k in CONCRETE_KINDS}

    def test_unseeded_store_is_empty(self, default_config):
        assert len(TemplateStore(default_config, seed=False)) == 0


class TestFeedbackStore:
    """Tests for corrections and learning."""

    def test_correction_adds_exactly_one_template(self, store, feedback, triangle_stroke):
        before = store.get_template_count(ShapeKind.TRIANGLE)
        total_before = len(store)

        record = feedback.record_correction(ShapeKind.CIRCLE, 0.7, ShapeKind.TRIANGLE, triangle_stroke)

        assert record.is_correction
        assert store.get_template_count(ShapeKind.TRIANGLE) == before + 1
        assert len(store) == total_before + 1
        assert feedback.compute_stats().corrections == 1

    def test_confirmation_adds_no_template(self, store, feedback, square_stroke):
        total_before = len(store)

        record = feedback.record_correction("square", 0.9, "square", square_stroke)

        assert not record.is_correction
        assert len(store) == total_before

    def test_correction_to_none_is_not_learned(self, store, feedback, square_stroke):
        total_before = len(store)

        record = feedback.record_correction(ShapeKind.SQUARE, 0.6, ShapeKind.NONE, square_stroke)

        assert record.is_correction
        assert len(store) == total_before

    def test_empty_stroke_logged_not_learned(self, store, feedback):
        total_before = len(store)

        feedback.record_correction(ShapeKind.LINE, 0.3, ShapeKind.CIRCLE, [(1, 1), (1, 1)])

        assert len(store) == total_before
        assert len(feedback.export_records()) == 1

    def test_record_contents(self, feedback, square_stroke):
        record = feedback.record_correction(ShapeKind.RECTANGLE, 1.7, ShapeKind.SQUARE, square_stroke)

        assert record.timestamp == 0.0
        assert record.detected_confidence == 1.0
        assert len(record.stroke) == len(square_stroke)
        assert record.geometry.is_closed

    def test_learned_correction_changes_classification(self, default_config, make_polygon):
        """After one correction the same stroke classifies as the corrected kind."""
        from quickshape.classify.template_match import TemplateClassifier

        store = TemplateStore(default_config)
        classifier = TemplateClassifier(store, default_config)
        feedback = FeedbackStore(store)
        star = make_polygon([
            (100 * math.cos(a), 100 * math.sin(a)) if i % 2 == 0
            else (38 * math.cos(a), 38 * math.sin(a))
            for i, a in enumerate(math.radians(-90 + 36 * k) for k in range(10))
        ])

        detected = classifier.classify(star)
        if detected.kind != ShapeKind.OVAL:
            feedback.record_correction(detected.kind, detected.confidence, ShapeKind.OVAL, star)

        assert classifier.classify(star).kind == ShapeKind.OVAL


class TestFeedbackStats:
    """Tests for accuracy statistics."""

    def test_empty_stats(self, feedback):
        stats = feedback.compute_stats()

        assert stats.total == 0
        assert stats.accuracy == 0.0
        assert stats.per_label == {}

    def test_per_label_accuracy(self, feedback, square_stroke, circle_stroke):
        feedback.record_correction(ShapeKind.SQUARE, 0.9, ShapeKind.SQUARE, square_stroke)
        feedback.record_correction(ShapeKind.SQUARE, 0.8, ShapeKind.SQUARE, square_stroke)
        feedback.record_correction(ShapeKind.SQUARE, 0.5, ShapeKind.RECTANGLE, square_stroke)
        feedback.record_correction(ShapeKind.CIRCLE, 0.9, ShapeKind.OVAL, circle_stroke)

        stats = feedback.compute_stats()

        assert stats.total == 4
        assert stats.corrections == 2
        assert stats.accuracy == pytest.approx(0.5)
        assert stats.per_label["square"].correct == 2
        assert stats.per_label["square"].incorrect == 1
        assert stats.per_label["square"].accuracy == pytest.approx(2 / 3)
        assert stats.per_label["circle"].accuracy == 0.0

    def test_export_and_clear(self, store, feedback, triangle_stroke):
        feedback.record_correction(ShapeKind.CIRCLE, 0.4, ShapeKind.TRIANGLE, triangle_stroke)
        templates_after = len(store)

        exported = feedback.export_records()
        feedback.clear()

        assert len(exported) == 1
        assert exported[0].corrected_type == ShapeKind.TRIANGLE
        assert feedback.export_records() == []
        assert feedback.compute_stats().total == 0
        assert len(store) == templates_after
