"""
Classifier contract and strategy registry.

Every strategy maps a stroke to a ClassificationResult; hosts select one by
name through create_classifier.
"""

from abc import ABC, abstractmethod

from quickshape.config import RecognizerConfig
from quickshape.geometry.primitives import bounding_box
from quickshape.models import points_to_array


class UnknownStrategyError(ValueError):
    """Raised when a classifier strategy name is not registered."""


class Classifier(ABC):
    """A stroke classification strategy."""

    name = ""

    @abstractmethod
    def classify(self, points):
        """
        Classify a stroke.

        Args:
            points: stroke as Point models, (x, y) pairs or an (N, 2) array

        Returns:
            ClassificationResult; never raises for degenerate strokes
        """


def is_degenerate(points, min_points=3):
    """True for strokes too short or too small to classify."""
    pts = points_to_array(points)
    if len(pts) < min_points:
        return True
    bbox = bounding_box(pts)
    return max(bbox.width, bbox.height) <= 0


CLASSIFIERS = ("heuristic", "hull", "template")


def create_classifier(name, config=None, template_store=None):
    """
    Build a classifier by strategy name.

    Args:
        name: one of CLASSIFIERS
        config: RecognizerConfig (defaults if None)
        template_store: TemplateStore for the template strategy; a freshly
            seeded store is created if None

    Raises:
        UnknownStrategyError: for names outside CLASSIFIERS
    """
    config = config or RecognizerConfig()
    key = (name or "").strip().lower()

    if key == "heuristic":
        from quickshape.classify.heuristic import HeuristicClassifier
        return HeuristicClassifier(config)
    if key == "hull":
        from quickshape.classify.hull_ratio import HullRatioClassifier
        return HullRatioClassifier(config)
    if key == "template":
        from quickshape.classify.template_match import TemplateClassifier
        from quickshape.templates.store import TemplateStore
        store = template_store if template_store is not None else TemplateStore(config)
        return TemplateClassifier(store, config)

    raise UnknownStrategyError(
        f"Unknown classifier strategy {name!r}; expected one of {', '.join(CLASSIFIERS)}"
    )
