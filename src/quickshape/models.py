"""
Pydantic data models for QuickShape.

Points, classification results, idealized shapes, templates and feedback
records all flow through these validated models.
"""

from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field


class ShapeKind(str, Enum):
    """Closed set of recognizable primitives."""
    CIRCLE = "circle"
    OVAL = "oval"
    SQUARE = "square"
    RECTANGLE = "rectangle"
    TRIANGLE = "triangle"
    LINE = "line"
    NONE = "none"


class SessionState(str, Enum):
    """States of a detection session."""
    IDLE = "idle"
    COLLECTING = "collecting"
    PENDING_HOLD = "pending_hold"
    PREVIEW_READY = "preview_ready"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


class Point(BaseModel):
    """An immutable 2D sample."""
    x: float
    y: float

    model_config = ConfigDict(frozen=True, extra="forbid")


class ClassificationResult(BaseModel):
    """Outcome of a classifier run."""
    kind: ShapeKind = ShapeKind.NONE
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def none(cls):
        """The "no shape detected" outcome."""
        return cls(kind=ShapeKind.NONE, confidence=0.0)

    @property
    def is_shape(self):
        return self.kind != ShapeKind.NONE


class CircleShape(BaseModel):
    kind: Literal[ShapeKind.CIRCLE] = ShapeKind.CIRCLE
    center: Point
    radius: float = Field(..., ge=0.0)

    model_config = ConfigDict(extra="forbid")


class OvalShape(BaseModel):
    kind: Literal[ShapeKind.OVAL] = ShapeKind.OVAL
    center: Point
    width: float = Field(..., ge=0.0)
    height: float = Field(..., ge=0.0)

    model_config = ConfigDict(extra="forbid")


class SquareShape(BaseModel):
    kind: Literal[ShapeKind.SQUARE] = ShapeKind.SQUARE
    center: Point
    width: float = Field(..., ge=0.0)
    height: float = Field(..., ge=0.0)

    model_config = ConfigDict(extra="forbid")


class RectangleShape(BaseModel):
    kind: Literal[ShapeKind.RECTANGLE] = ShapeKind.RECTANGLE
    center: Point
    width: float = Field(..., ge=0.0)
    height: float = Field(..., ge=0.0)

    model_config = ConfigDict(extra="forbid")


class TriangleShape(BaseModel):
    kind: Literal[ShapeKind.TRIANGLE] = ShapeKind.TRIANGLE
    points: List[Point] = Field(..., min_length=3, max_length=3)

    model_config = ConfigDict(extra="forbid")


class LineShape(BaseModel):
    kind: Literal[ShapeKind.LINE] = ShapeKind.LINE
    points: List[Point] = Field(..., min_length=2, max_length=2)

    model_config = ConfigDict(extra="forbid")


IdealizedShape = Annotated[
    Union[CircleShape, OvalShape, SquareShape, RectangleShape, TriangleShape, LineShape],
    Field(discriminator="kind"),
]


class Template(BaseModel):
    """A normalized reference point cloud for one shape label."""
    label: ShapeKind
    points: List[Point] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid")

    def as_array(self):
        return points_to_array(self.points)


class StrokeGeometry(BaseModel):
    """Feature summary of a stroke used by fuzzy confidence correction."""
    corner_count: int = 0
    aspect_ratio: float = 0.0
    roundness: float = 0.0
    is_closed: bool = False
    closure_ratio: float = 1.0

    model_config = ConfigDict(extra="forbid")


class FeedbackRecord(BaseModel):
    """A user correction of a classification."""
    timestamp: float
    detected_type: ShapeKind
    detected_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    corrected_type: ShapeKind
    stroke: List[Point] = Field(default_factory=list)
    geometry: Optional[StrokeGeometry] = None

    model_config = ConfigDict(extra="forbid")

    @property
    def is_correction(self):
        return self.detected_type != self.corrected_type


class LabelStats(BaseModel):
    correct: int = 0
    incorrect: int = 0
    accuracy: float = 0.0

    model_config = ConfigDict(extra="forbid")


class FeedbackStats(BaseModel):
    """Aggregate accuracy statistics over the feedback log."""
    total: int = 0
    corrections: int = 0
    accuracy: float = 0.0
    per_label: Dict[str, LabelStats] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


class Recognition(BaseModel):
    """Classification, idealized shape and flattened polyline for one stroke."""
    result: ClassificationResult = Field(default_factory=ClassificationResult.none)
    shape: Optional[IdealizedShape] = None
    polyline: List[Point] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class ShapePreview(BaseModel):
    """What the host renders while a shape awaits apply/cancel."""
    kind: ShapeKind
    confidence: float = Field(..., ge=0.0, le=1.0)
    polyline: List[Point] = Field(default_factory=list)
    shape: Optional[IdealizedShape] = None

    model_config = ConfigDict(extra="forbid")


# Conversions between point models and (N, 2) arrays

def points_to_array(points):
    """
    Convert a stroke to an (N, 2) float array.

    Accepts Point models, (x, y) pairs, or an existing array.
    """
    if isinstance(points, np.ndarray):
        return points.astype(float).reshape(-1, 2)

    points = list(points)
    if not points:
        return np.empty((0, 2), dtype=float)

    if isinstance(points[0], Point):
        return np.array([[p.x, p.y] for p in points], dtype=float)

    return np.asarray(points, dtype=float).reshape(-1, 2)


def array_to_points(arr):
    """Convert an (N, 2) array back into Point models."""
    return [Point(x=float(x), y=float(y)) for x, y in np.asarray(arr, dtype=float).reshape(-1, 2)]


def make_point(x, y):
    return Point(x=float(x), y=float(y))
