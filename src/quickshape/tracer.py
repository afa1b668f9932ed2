"""
Hierarchical runtime tracing for QuickShape.

Provides structured, nested logging with timing information so a recognition
pass can be followed (normalization, scoring, tie-breaks) without a debugger.

Span nesting is tracked per thread: hold timers fire on their own thread and
must not interleave with the indentation of the drawing thread.
"""

import functools
import hashlib
import inspect
import json
import sys
import threading
import time
from contextlib import contextmanager
from datetime import datetime
from enum import Enum

import numpy as np
from pydantic import BaseModel


LEVELS = {"ERROR": 0, "WARN": 1, "INFO": 2, "DEBUG": 3}


class TracerConfig:
    """Output settings of the tracer."""

    def __init__(self):
        self.enabled = False
        self.level = "INFO"
        self.file_path = None
        self.json_output = False
        self._file_handle = None

    def configure(self, enabled=False, level="INFO", file_path=None, json_output=False):
        level = level.upper()
        if level not in LEVELS:
            raise ValueError(f"Unknown trace level {level!r}; expected one of {', '.join(LEVELS)}")

        self.close()
        self.enabled = enabled
        self.level = level
        self.file_path = file_path
        self.json_output = json_output

        if file_path and enabled:
            self._file_handle = open(file_path, "w", encoding="utf-8")

    def close(self):
        """Close the trace file if one is open."""
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None


class Tracer:
    """
    Hierarchical tracer for structured recognition logging.

    Text lines go to stderr (and the trace file); with json_output each line
    is followed by a JSON record carrying the summarized metadata.
    """

    def __init__(self):
        self.config = TracerConfig()
        self._local = threading.local()
        self._write_lock = threading.Lock()

    @property
    def _stack(self):
        stack = getattr(self._local, "stack", None)
        if stack is None:
            stack = self._local.stack = []
        return stack

    def enabled_for(self, level):
        if not self.config.enabled:
            return False
        return LEVELS.get(level, 2) <= LEVELS.get(self.config.level, 2)

    def _write(self, level, module, func, message, meta=None):
        if not self.enabled_for(level):
            return

        now = datetime.now()
        timestamp = now.strftime("%H:%M:%S.") + f"{now.microsecond // 1000:03d}"
        depth = len(self._stack)
        location = f"{module}:{func}" if func else module
        thread = threading.current_thread()
        prefix = "" if thread is threading.main_thread() else f"[{thread.name}] "

        lines = [f"{timestamp} {level:<5} {'  ' * depth}{prefix}{location}  {message}"]
        if self.config.json_output:
            lines.append(json.dumps({
                "timestamp": timestamp,
                "level": level,
                "depth": depth,
                "thread": thread.name,
                "module": module,
                "function": func,
                "message": message,
                "meta": {k: summarize(v) for k, v in (meta or {}).items()},
            }))

        with self._write_lock:
            for line in lines:
                print(line, file=sys.stderr)
            handle = self.config._file_handle
            if handle:
                handle.write("\n".join(lines) + "\n")
                handle.flush()

    @contextmanager
    def span(self, name, module="", **meta):
        """Context manager logging start, end and elapsed time of a block."""
        if not self.config.enabled:
            yield
            return

        details = _format_meta(meta)
        self._write("INFO", module, name, f"start {details}".strip(), meta)
        stack = self._stack
        stack.append((name, module))
        start_time = time.perf_counter()

        try:
            yield
        except Exception as e:
            elapsed = (time.perf_counter() - start_time) * 1000
            stack.pop()
            self._write("ERROR", module, name, f"failed dt={elapsed:.0f}ms error={type(e).__name__}: {str(e)[:100]}")
            raise
        else:
            elapsed = (time.perf_counter() - start_time) * 1000
            stack.pop()
            self._write("INFO", module, name, f"end ok dt={elapsed:.0f}ms")

    def event(self, message, level="INFO", **meta):
        """Log a one-off event inside the innermost span of this thread."""
        if not self.enabled_for(level):
            return

        func, module = self._stack[-1] if self._stack else ("", "")
        full_message = f"{message} {_format_meta(meta)}".strip()
        self._write(level, module, func, full_message, meta)


def _format_meta(meta):
    return " ".join(f"{k}={summarize(v)}" for k, v in meta.items())


def summarize(obj, max_len=200):
    """
    Compact, length-capped description of an object for trace lines.

    Strokes (point arrays and Point lists) are reduced to their length and a
    short content hash so two log lines can be compared without dumping
    coordinates.
    """
    try:
        result = _summarize_impl(obj)
    except Exception:
        return f"<{type(obj).__name__}>"
    if len(result) > max_len:
        return result[:max_len - 3] + "..."
    return result


def _digest(data):
    return hashlib.md5(data).hexdigest()[:8]


def _summarize_impl(obj):
    if obj is None:
        return "None"

    type_name = type(obj).__name__

    if isinstance(obj, np.ndarray):
        if obj.ndim == 2 and obj.shape[1] == 2:
            return f"points(n={obj.shape[0]},h={_digest(obj.tobytes())})"
        shape_str = "x".join(str(s) for s in obj.shape)
        h = _digest(obj.tobytes()) if 0 < obj.size < 1000 else _digest(str(obj.shape).encode())
        return f"ndarray({obj.dtype},{shape_str},h={h})"
    if isinstance(obj, np.floating):
        return f"{float(obj):.4g}"
    if isinstance(obj, np.integer):
        return str(int(obj))

    if isinstance(obj, BaseModel):
        if hasattr(obj, "x") and hasattr(obj, "y") and len(type(obj).model_fields) == 2:
            return f"({obj.x:.1f},{obj.y:.1f})"
        kind = getattr(obj, "kind", None)
        if isinstance(kind, Enum) and hasattr(obj, "confidence"):
            return f"{type_name}({kind.value},{obj.confidence:.3f})"
        fields = list(type(obj).model_fields.keys())[:3]
        return f"{type_name}(fields={fields}...)"

    # ShapeKind, SessionState
    if isinstance(obj, Enum):
        return str(obj.value)

    if isinstance(obj, str):
        if len(obj) > 50:
            return f"str(len={len(obj)},h={_digest(obj.encode())})"
        return repr(obj)

    if isinstance(obj, bytes):
        return f"bytes(len={len(obj)},h={_digest(obj)})"

    if isinstance(obj, (list, tuple)):
        if not obj:
            return f"{type_name}(len=0)"
        first = obj[0]
        if isinstance(first, BaseModel) and hasattr(first, "x") and hasattr(first, "y"):
            return f"stroke(n={len(obj)})"
        return f"{type_name}(len={len(obj)},first={type(first).__name__})"

    if isinstance(obj, dict):
        keys = ",".join(str(k) for k in list(obj.keys())[:5])
        return f"dict(len={len(obj)},keys=[{keys}])"

    if isinstance(obj, bool):
        return str(obj)
    if isinstance(obj, float):
        return f"{obj:.4g}"
    if isinstance(obj, int):
        return str(obj)

    return f"<{type_name}>"


def trace(label=None, arg_names=None):
    """
    Decorator wrapping a function in a span.

    Args:
        label: span name (defaults to the function name)
        arg_names: arguments, positional or keyword, to summarize on the
            start line
    """
    def decorator(func):
        signature = inspect.signature(func) if arg_names else None
        module = func.__module__.split(".")[-1] if func.__module__ else ""
        name = label or func.__name__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if not _tracer.config.enabled:
                return func(*args, **kwargs)

            meta = {}
            if signature is not None:
                bound = signature.bind_partial(*args, **kwargs)
                meta = {n: bound.arguments[n] for n in arg_names if n in bound.arguments}

            with _tracer.span(name, module=module, **meta):
                return func(*args, **kwargs)

        return wrapper
    return decorator


_tracer = Tracer()


def get_tracer():
    """Get the global tracer instance."""
    return _tracer


def configure_tracer(enabled=False, level="INFO", file_path=None, json_output=False):
    """Configure the global tracer."""
    _tracer.config.configure(
        enabled=enabled,
        level=level,
        file_path=file_path,
        json_output=json_output,
    )
