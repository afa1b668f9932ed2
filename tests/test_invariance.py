"""Tests that recognition ignores where, how large and at what angle a shape is drawn."""

import math

import pytest

from quickshape.classify.base import create_classifier
from quickshape.models import ShapeKind


STRATEGIES = ["heuristic", "hull", "template"]


@pytest.fixture
def make_classifier(default_config):
    def factory(strategy):
        return create_classifier(strategy, default_config)
    return factory


class TestPoseInvariance:
    """Rotated, scaled and translated copies keep their shape kind."""

    @pytest.mark.parametrize("strategy", STRATEGIES)
    @pytest.mark.parametrize("degrees", [30, 45, 135, 250])
    @pytest.mark.parametrize("fixture,expected", [
        ("line_stroke", ShapeKind.LINE),
        ("square_stroke", ShapeKind.SQUARE),
        ("rectangle_stroke", ShapeKind.RECTANGLE),
        ("triangle_stroke", ShapeKind.TRIANGLE),
        ("circle_stroke", ShapeKind.CIRCLE),
    ])
    def test_moved_shape_keeps_kind(self, request, make_classifier, transform,
                                    strategy, degrees, fixture, expected):
        stroke = request.getfixturevalue(fixture)
        classifier = make_classifier(strategy)
        moved = transform(stroke, angle=math.radians(degrees), scale=1.5, offset=(320, -140))

        assert classifier.classify(stroke).kind == expected
        assert classifier.classify(moved).kind == expected

    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_counter_clockwise_square(self, make_classifier, square_stroke, strategy):
        assert make_classifier(strategy).classify(square_stroke[::-1]).kind == ShapeKind.SQUARE


class TestNoisyCircleRoundTrip:
    """A hand-drawn circle comes back as the circle that was traced."""

    @pytest.mark.parametrize("strategy", STRATEGIES)
    @pytest.mark.parametrize("seed", range(8))
    def test_round_trip(self, default_config, make_noisy_circle, strategy, seed):
        from quickshape.pipeline import recognize

        classifier = create_classifier(strategy, default_config)
        recognition = recognize(make_noisy_circle(seed), classifier=classifier, config=default_config)

        assert recognition.result.kind == ShapeKind.CIRCLE
        assert recognition.result.confidence > 0.5
        assert abs(recognition.shape.radius - 100.0) / 100.0 < 0.15
        assert recognition.shape.center.x == pytest.approx(300.0, abs=5.0)
        assert recognition.shape.center.y == pytest.approx(200.0, abs=5.0)
