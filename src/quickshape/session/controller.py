"""
Detection session state machine.

A session owns one gesture from its first sample to commit or cancel:

    idle -> collecting -> pending_hold -> preview_ready -> committed|cancelled -> idle

Classification runs once, when the hold delay after end_detection() elapses,
on a snapshot of the stroke taken at end_detection().
"""

import threading

from quickshape.classify.base import create_classifier
from quickshape.config import RecognizerConfig
from quickshape.models import SessionState, ShapePreview, make_point
from quickshape.pipeline import recognize
from quickshape.session.scheduler import ThreadingScheduler
from quickshape.tracer import get_tracer


class DetectionSession:
    """
    Interaction controller between a drawing host and a classifier.

    The classifier strategy is resolved at construction, so an unknown
    strategy name raises UnknownStrategyError here rather than mid-gesture.
    A generation counter turns callbacks from superseded timers into no-ops.

    Args:
        config: RecognizerConfig (defaults if None)
        classifier: Classifier to use instead of config.session.strategy
        template_store: TemplateStore shared with the template strategy
        scheduler: Scheduler for the hold delay (ThreadingScheduler if None)
        on_preview: called with a ShapePreview when a preview becomes ready
        on_commit: called with the ShapePreview being applied
        on_transition: called with (old_state, new_state) on every change
    """

    def __init__(self, config=None, classifier=None, template_store=None, scheduler=None,
                 on_preview=None, on_commit=None, on_transition=None):
        self.config = config or RecognizerConfig()
        if classifier is None:
            classifier = create_classifier(self.config.session.strategy, self.config, template_store)
        self.classifier = classifier
        self.scheduler = scheduler or ThreadingScheduler()

        self.on_preview = on_preview
        self.on_commit = on_commit
        self.on_transition = on_transition

        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._points = []
        self._snapshot = []
        self._preview = None
        self._task = None
        self._generation = 0

    @property
    def state(self):
        with self._lock:
            return self._state

    @property
    def points(self):
        """Copy of the stroke collected so far."""
        with self._lock:
            return list(self._points)

    @property
    def preview(self):
        """The pending ShapePreview, if any."""
        with self._lock:
            return self._preview

    def start_detection(self):
        """Begin a new gesture, discarding any pending timer or preview."""
        with self._lock:
            self._cancel_task()
            self._points = []
            self._snapshot = []
            self._preview = None
            self._transition(SessionState.COLLECTING)

    def add_point(self, point):
        """
        Append a sample to the gesture.

        Returns:
            True if the point was accepted; points outside collecting are ignored
        """
        with self._lock:
            if self._state != SessionState.COLLECTING:
                get_tracer().event("Point ignored", level="DEBUG", state=self._state)
                return False
            if hasattr(point, "x"):
                self._points.append(make_point(point.x, point.y))
            else:
                self._points.append(make_point(point[0], point[1]))
            return True

    def end_detection(self):
        """
        Finish the gesture and arm the hold timer.

        Returns:
            True if the timer was armed
        """
        with self._lock:
            if self._state != SessionState.COLLECTING:
                return False

            self._cancel_task()
            self._snapshot = list(self._points)
            generation = self._generation
            self._transition(SessionState.PENDING_HOLD)

            delay = self.config.session.hold_delay_ms / 1000.0
            self._task = self.scheduler.schedule(delay, lambda: self._on_hold_elapsed(generation))
            return True

    def _on_hold_elapsed(self, generation):
        tracer = get_tracer()
        with self._lock:
            if generation != self._generation or self._state != SessionState.PENDING_HOLD:
                tracer.event("Stale hold timer ignored", level="DEBUG")
                return

            self._task = None
            with tracer.span("hold_elapsed", module="session", points=len(self._snapshot)):
                preview = self._evaluate(self._snapshot)

            if preview is None:
                self._transition(SessionState.IDLE)
                return

            self._preview = preview
            self._transition(SessionState.PREVIEW_READY)
            if self.on_preview:
                self.on_preview(preview)

    def _evaluate(self, stroke):
        """Classify the snapshot; None unless it clears the preview bar."""
        if len(stroke) < 3:
            return None

        recognition = recognize(stroke, classifier=self.classifier, config=self.config)
        result = recognition.result
        if not result.is_shape or result.confidence <= self.config.session.min_preview_confidence:
            get_tracer().event("No preview", kind=result.kind, confidence=result.confidence)
            return None

        return ShapePreview(
            kind=result.kind,
            confidence=result.confidence,
            polyline=recognition.polyline,
            shape=recognition.shape,
        )

    def apply_shape(self):
        """
        Commit the previewed shape.

        Returns:
            the flattened polyline to substitute for the raw stroke, or None
            when no preview is ready
        """
        with self._lock:
            if self._state != SessionState.PREVIEW_READY:
                return None

            preview = self._preview
            self._transition(SessionState.COMMITTED)
            if self.on_commit:
                self.on_commit(preview)
            self._reset()
            return list(preview.polyline)

    def cancel_shape(self):
        """
        Discard a pending timer or preview; the raw stroke is left to the host.

        Returns:
            True if something was cancelled
        """
        with self._lock:
            if self._state not in (SessionState.PENDING_HOLD, SessionState.PREVIEW_READY):
                return False

            self._cancel_task()
            self._transition(SessionState.CANCELLED)
            self._reset()
            return True

    def clear(self):
        """Drop everything and return to idle from any state."""
        with self._lock:
            self._cancel_task()
            self._reset()

    def _reset(self):
        self._points = []
        self._snapshot = []
        self._preview = None
        self._transition(SessionState.IDLE)

    def _cancel_task(self):
        self._generation += 1
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _transition(self, new_state):
        old_state = self._state
        if old_state == new_state:
            return
        self._state = new_state
        get_tracer().event("Session transition", old=old_state, new=new_state)
        if self.on_transition:
            self.on_transition(old_state, new_state)
