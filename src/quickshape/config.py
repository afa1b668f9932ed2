"""
Configuration management for QuickShape.

Loads YAML configuration with sensible defaults for every recognition stage.
The heuristic thresholds are empirically tuned and kept here so they can be
recalibrated against a labelled stroke corpus without code changes.
"""

import os
from dataclasses import asdict, dataclass, field, fields

import yaml


class ConfigError(ValueError):
    """Raised when a configuration file cannot be used."""


@dataclass
class NormalizeConfig:
    """Configuration for stroke normalization."""
    num_points: int = 64
    square_size: float = 250.0


@dataclass
class ClosureConfig:
    """Configuration for closure and virtual closure tests."""
    closed_distance: float = 30.0  # pixels
    closed_ratio: float = 0.2  # gap / path length
    virtual_distance: float = 40.0
    virtual_ratio: float = 0.25


@dataclass
class SimplifyConfig:
    """Configuration for polyline simplification."""
    rdp_epsilon: float = 2.0


@dataclass
class HeuristicConfig:
    """Thresholds for the rule-based classifier."""
    min_circle_points: int = 8
    min_quad_points: int = 8
    min_triangle_points: int = 5
    circle_min_score: float = 0.75
    circle_min_aspect: float = 0.6
    oval_max_aspect: float = 0.85
    curvature_tolerance: float = 0.15  # radians
    corner_angle: float = 2.0  # radians
    decimated_corner_angle: float = 1.8
    decimate_tolerance: float = 0.08  # fraction of the short bbox side
    parallel_band: float = 0.2
    parallel_tolerance: float = 0.35  # radians
    coverage_band: float = 0.12
    right_angle_min: float = 1.35
    right_angle_max: float = 2.2
    square_min_aspect: float = 0.7
    rectangle_min_aspect: float = 0.1
    sharp_corner_angle: float = 2.5
    side_corner_angle: float = 1.65
    circle_accept: float = 0.8
    quad_accept: float = 0.05
    triangle_accept: float = 0.05
    quad_over_circle: float = 0.5
    quad_over_circle_fill: float = 0.9  # hull area / minimum rectangle area
    circle_contested: float = 0.7
    triangle_over_circle: float = 0.2
    triangle_min_side: float = 15.0
    triangle_min_area: float = 25.0
    extreme_merge_distance: float = 30.0
    line_max_deviation: float = 20.0  # pixels
    line_accept: float = 0.6
    line_min_length: float = 10.0


@dataclass
class HullConfig:
    """Thresholds for the hull-ratio decision tree."""
    line_thinness: float = 100.0
    circle_thinness_min: float = 12.5
    circle_thinness_max: float = 13.5
    circle_max_spread: float = 0.2  # radius std / fitted radius
    circle_aspect: float = 0.85
    oval_aspect: float = 0.6
    triangle_ratio: float = 0.8
    rectangle_ratio: float = 0.9
    square_aspect: float = 0.9
    min_line_length: float = 20.0


@dataclass
class TemplateConfig:
    """Configuration for template matching."""
    min_score: float = 0.1
    match_reversed: bool = True


@dataclass
class SessionConfig:
    """Configuration for the detection session."""
    strategy: str = "template"  # "heuristic", "hull" or "template"
    hold_delay_ms: int = 500
    min_preview_confidence: float = 0.2
    arc_segments: int = 36


@dataclass
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class RecognizerConfig:
    """Complete recognizer configuration."""
    normalize: NormalizeConfig = field(default_factory=NormalizeConfig)
    closure: ClosureConfig = field(default_factory=ClosureConfig)
    simplify: SimplifyConfig = field(default_factory=SimplifyConfig)
    heuristic: HeuristicConfig = field(default_factory=HeuristicConfig)
    hull: HullConfig = field(default_factory=HullConfig)
    template: TemplateConfig = field(default_factory=TemplateConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)


SECTIONS = tuple(f.name for f in fields(RecognizerConfig))


def load_config(config_path=None):
    """
    Load configuration from YAML file.

    Falls back to defaults for any missing values.
    """
    config = RecognizerConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            try:
                yaml_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(yaml_data, dict):
            raise ConfigError(f"Configuration root must be a mapping: {config_path}")

        config = _merge_config(config, yaml_data)

    return config


def _merge_config(config, yaml_data):
    """Merge YAML data into config dataclass, ignoring unknown keys."""
    for section in SECTIONS:
        values = yaml_data.get(section)
        if not isinstance(values, dict):
            continue
        target = getattr(config, section)
        for key, value in values.items():
            if hasattr(target, key):
                setattr(target, key, value)

    return config


def save_default_config(path):
    """Save default configuration to YAML file for reference."""
    yaml_data = asdict(RecognizerConfig())
    # file_path has no meaningful default
    yaml_data["tracing"].pop("file_path", None)

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
