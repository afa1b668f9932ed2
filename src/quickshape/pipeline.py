"""
Recognition pipeline for QuickShape.

Classifies strokes, synthesizes their idealized shapes and flattens them, and
runs the file-based batch used by the command line.
"""

import os

from quickshape.classify.base import create_classifier
from quickshape.config import RecognizerConfig, load_config
from quickshape.io.stroke_io import load_strokes, save_json, save_svg
from quickshape.models import Recognition
from quickshape.synth.idealize import flatten, synthesize
from quickshape.tracer import get_tracer, trace


@trace(label="recognize")
def recognize(points, classifier=None, config=None, template_store=None):
    """
    Classify one stroke and build its replacement geometry.

    Args:
        points: the raw stroke
        classifier: Classifier to use; built from config.session.strategy if None
        config: RecognizerConfig (defaults if None)
        template_store: TemplateStore for the template strategy

    Returns:
        Recognition with the result, idealized shape and flattened polyline
    """
    config = config or RecognizerConfig()
    if classifier is None:
        classifier = create_classifier(config.session.strategy, config, template_store)

    result = classifier.classify(points)
    shape = synthesize(result, points, config.heuristic.extreme_merge_distance)
    polyline = flatten(shape, config.session.arc_segments)

    get_tracer().event(
        "Recognized stroke",
        strategy=classifier.name,
        kind=result.kind,
        confidence=result.confidence,
    )
    return Recognition(result=result, shape=shape, polyline=polyline)


@trace(label="recognize_strokes")
def recognize_strokes(strokes, config=None, strategy=None, template_store=None):
    """Recognize each stroke independently with a single classifier."""
    config = config or RecognizerConfig()
    classifier = create_classifier(strategy or config.session.strategy, config, template_store)
    return [recognize(stroke, classifier=classifier, config=config) for stroke in strokes]


@trace(label="run_recognition", arg_names=["input_path", "strategy"])
def run_recognition(input_path, out_path=None, svg_path=None, config=None,
                    config_path=None, strategy=None):
    """
    Recognize every stroke in a JSON stroke file.

    Args:
        input_path: path to the strokes JSON file
        out_path: optional path for the recognitions JSON
        svg_path: optional path for an SVG preview
        config: RecognizerConfig object (optional)
        config_path: path to YAML config file (optional)
        strategy: classifier name overriding the configured one

    Returns:
        list of Recognition objects
    """
    tracer = get_tracer()

    if config is None:
        config = load_config(config_path)

    if not os.path.exists(input_path):
        raise FileNotFoundError(f"Stroke file not found: {input_path}")

    strokes = load_strokes(input_path)
    tracer.event(f"Loaded {len(strokes)} strokes from {input_path}")

    recognitions = recognize_strokes(strokes, config=config, strategy=strategy)

    if out_path:
        save_json(
            {
                "strategy": strategy or config.session.strategy,
                "recognitions": [r.model_dump(mode="json") for r in recognitions],
            },
            out_path,
        )

    if svg_path:
        from quickshape.synth.svg_emit import emit_preview_svg
        save_svg(emit_preview_svg(strokes, recognitions), svg_path)

    return recognitions
