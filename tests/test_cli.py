"""End-to-end tests for the pipeline and command line."""

import json
import os

import pytest

from quickshape.models import ShapeKind


def _write_strokes(temp_dir, strokes, name="strokes.json"):
    path = os.path.join(temp_dir, name)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(strokes, f)
    return path


@pytest.fixture
def strokes_file(temp_dir, square_stroke, circle_stroke, line_stroke):
    return _write_strokes(temp_dir, {
        "strokes": [
            square_stroke.tolist(),
            [{"x": float(x), "y": float(y)} for x, y in circle_stroke],
            line_stroke.tolist(),
        ]
    })


class TestPipeline:
    """Tests for the recognition pipeline."""

    def test_recognize_builds_polyline(self, square_stroke):
        from quickshape.pipeline import recognize

        recognition = recognize(square_stroke)

        assert recognition.result.kind == ShapeKind.SQUARE
        assert recognition.shape.kind == ShapeKind.SQUARE
        assert len(recognition.polyline) == 5

    def test_recognize_none(self):
        from quickshape.pipeline import recognize

        recognition = recognize([(0, 0), (1, 1)])

        assert recognition.result.kind == ShapeKind.NONE
        assert recognition.shape is None
        assert recognition.polyline == []

    def test_recognize_strokes_with_strategy(self, square_stroke, circle_stroke):
        from quickshape.pipeline import recognize_strokes

        recognitions = recognize_strokes([square_stroke, circle_stroke], strategy="hull")

        assert [r.result.kind for r in recognitions] == [ShapeKind.SQUARE, ShapeKind.CIRCLE]

    def test_run_recognition_writes_outputs(self, temp_dir, strokes_file):
        from quickshape.pipeline import run_recognition

        out_path = os.path.join(temp_dir, "out", "recognitions.json")
        svg_path = os.path.join(temp_dir, "out", "preview.svg")

        recognitions = run_recognition(strokes_file, out_path=out_path, svg_path=svg_path)

        assert len(recognitions) == 3
        assert os.path.exists(svg_path)
        with open(out_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        assert data["strategy"] == "template"
        assert [r["result"]["kind"] for r in data["recognitions"]] == ["square", "circle", "line"]
        assert data["recognitions"][0]["shape"]["kind"] == "square"

    def test_run_recognition_missing_file(self, temp_dir):
        from quickshape.pipeline import run_recognition

        with pytest.raises(FileNotFoundError):
            run_recognition(os.path.join(temp_dir, "nope.json"))


class TestLoadStrokes:
    """Tests for the stroke file format."""

    def test_bare_list_accepted(self, temp_dir):
        from quickshape.io.stroke_io import load_strokes

        path = _write_strokes(temp_dir, [[[0, 0], [1, 2]], [[5, 5]]])
        strokes = load_strokes(path)

        assert [s.shape for s in strokes] == [(2, 2), (1, 2)]

    def test_malformed_stroke_raises(self, temp_dir):
        from quickshape.io.stroke_io import load_strokes

        path = _write_strokes(temp_dir, {"strokes": [[[0, 0], [1]]]})

        with pytest.raises(ValueError, match="Stroke 0"):
            load_strokes(path)

    def test_invalid_json_raises(self, temp_dir):
        from quickshape.io.stroke_io import load_strokes

        path = os.path.join(temp_dir, "broken.json")
        with open(path, "w", encoding="utf-8") as f:
            f.write("{not json")

        with pytest.raises(ValueError):
            load_strokes(path)

    def test_missing_strokes_key_raises(self, temp_dir):
        from quickshape.io.stroke_io import load_strokes

        with pytest.raises(ValueError):
            load_strokes(_write_strokes(temp_dir, {"paths": []}))


class TestCli:
    """Tests for the command-line entry point."""

    def test_recognize_command(self, temp_dir, strokes_file, capsys):
        from quickshape.cli import main

        out_path = os.path.join(temp_dir, "recognitions.json")
        svg_path = os.path.join(temp_dir, "preview.svg")

        code = main(["recognize", "-i", strokes_file, "-o", out_path, "--svg", svg_path, "-s", "heuristic"])

        assert code == 0
        stdout = capsys.readouterr().out
        assert "Recognized 3 strokes with the heuristic strategy." in stdout
        assert "square" in stdout
        assert os.path.exists(out_path)
        assert os.path.exists(svg_path)

    def test_recognize_missing_input(self, temp_dir, capsys):
        from quickshape.cli import main

        code = main(["recognize", "-i", os.path.join(temp_dir, "missing.json")])

        assert code == 1
        assert "Error:" in capsys.readouterr().err

    def test_recognize_with_trace_file(self, temp_dir, strokes_file):
        from quickshape.cli import main

        trace_path = os.path.join(temp_dir, "trace.log")

        assert main(["recognize", "-i", strokes_file, "--trace", "--trace-file", trace_path]) == 0
        with open(trace_path, "r", encoding="utf-8") as f:
            assert "cli:cli_recognize" in f.read()

    def test_unknown_strategy_rejected_by_parser(self, strokes_file):
        from quickshape.cli import main

        with pytest.raises(SystemExit):
            main(["recognize", "-i", strokes_file, "-s", "neural"])

    def test_templates_command(self, capsys):
        from quickshape.cli import main

        assert main(["templates"]) == 0
        counts = json.loads(capsys.readouterr().out)
        assert counts == {k.value: 1 for k in ShapeKind if k != ShapeKind.NONE}

    def test_init_config(self, temp_dir):
        from quickshape.cli import main
        from quickshape.config import RecognizerConfig, load_config

        path = os.path.join(temp_dir, "quickshape.yaml")

        assert main(["init-config", "--out", path]) == 0
        assert load_config(path) == RecognizerConfig()

    def test_no_command_prints_help(self, capsys):
        from quickshape.cli import main

        assert main([]) == 0
        assert "recognize" in capsys.readouterr().out
