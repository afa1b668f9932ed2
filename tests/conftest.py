"""Pytest fixtures for QuickShape tests."""

import math
import tempfile

import numpy as np
import pytest


def _ellipse(rx, ry, num_points=64, center=(0.0, 0.0)):
    t = np.arange(num_points) * (2 * math.pi / num_points)
    return np.column_stack([center[0] + rx * np.cos(t), center[1] + ry * np.sin(t)])


def _polygon(vertices, points_per_edge=20):
    """Closed outline through vertices; the first point is repeated at the end."""
    vertices = np.asarray(vertices, dtype=float)
    samples = []
    for i in range(len(vertices)):
        start = vertices[i]
        end = vertices[(i + 1) % len(vertices)]
        for step in range(points_per_edge):
            samples.append(start + (end - start) * (step / points_per_edge))
    samples.append(vertices[0])
    return np.array(samples)


def _noisy_circle(seed, noise=1.0, num_points=64, radius=100.0, center=(300.0, 200.0)):
    """Circle with uniform radial noise of at most `noise` pixels."""
    rng = np.random.default_rng(seed)
    t = np.arange(num_points) * (2 * math.pi / num_points)
    r = radius + rng.uniform(-noise, noise, size=num_points)
    return np.column_stack([center[0] + r * np.cos(t), center[1] + r * np.sin(t)])


def _transform(points, angle=0.0, scale=1.0, offset=(0.0, 0.0)):
    """Rotate about the origin, scale, then translate."""
    c = math.cos(angle)
    s = math.sin(angle)
    rotation = np.array([[c, -s], [s, c]])
    return (np.asarray(points, dtype=float) @ rotation.T) * scale + np.asarray(offset)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture(autouse=True)
def reset_tracer():
    """Keep the global tracer disabled between tests."""
    yield
    from quickshape.tracer import configure_tracer
    configure_tracer(enabled=False)


@pytest.fixture
def default_config():
    """Create default recognizer configuration."""
    from quickshape.config import RecognizerConfig
    return RecognizerConfig()


@pytest.fixture
def manual_scheduler():
    from quickshape.session.scheduler import ManualScheduler
    return ManualScheduler()


@pytest.fixture
def make_ellipse():
    return _ellipse


@pytest.fixture
def make_polygon():
    return _polygon


@pytest.fixture
def make_noisy_circle():
    return _noisy_circle


@pytest.fixture
def transform():
    return _transform


@pytest.fixture
def circle_stroke():
    """64 points evenly spaced on a radius-100 circle centered at the origin."""
    return _ellipse(100.0, 100.0)


@pytest.fixture
def noisy_circle_stroke():
    """Radius-100 circle at (300, 200) with uniform radial noise of at most 1px."""
    return _noisy_circle(7)


@pytest.fixture
def oval_stroke():
    """Ellipse 200 wide and 160 tall."""
    return _ellipse(100.0, 80.0)


@pytest.fixture
def wide_oval_stroke():
    """Ellipse twice as wide as it is tall."""
    return _ellipse(100.0, 50.0)


@pytest.fixture
def square_stroke():
    """Four equal 200px sides with right-angle corners, starting and ending at (0, 0)."""
    return _polygon([(0, 0), (200, 0), (200, 200), (0, 200)])


@pytest.fixture
def rectangle_stroke():
    return _polygon([(0, 0), (300, 0), (300, 150), (0, 150)])


@pytest.fixture
def triangle_stroke():
    """Equilateral triangle with 200px sides, traced bottom-left, apex, bottom-right."""
    height = 200 * math.sqrt(3) / 2
    return _polygon([(0, height), (100, 0), (200, height)])


@pytest.fixture
def line_stroke():
    """10 collinear points from (0, 0) to (100, 0)."""
    return np.column_stack([np.linspace(0, 100, 10), np.zeros(10)])
