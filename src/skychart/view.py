"""Display-space view transform, pointer interaction and hit testing."""

import math
from typing import Callable, Iterable, List, Optional, Tuple

from PyQt5.QtCore import QObject, pyqtSignal

from .paths import (
    CLICK_SLOP_PX,
    HIT_RADIUS_PX,
    PAN_LIMIT_PX,
    ZOOM_BUTTON_STEP,
    ZOOM_MAX,
    ZOOM_MIN,
    ZOOM_WHEEL_STEP,
)
from .sky import SkyModel
from .types import CelestialPosition, DisplayOptions, FrameModel, clamp


class ViewTransform(QObject):
    """Zoom factor and pan offset applied on top of projected positions.

    Pan is in pre-zoom canvas pixels. Every setter clamps instead of raising.
    """

    changed = pyqtSignal()
    zoom_changed = pyqtSignal(float)

    def __init__(self, zoom: float = 1.0, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._zoom = clamp(zoom, ZOOM_MIN, ZOOM_MAX)
        self._pan = (0.0, 0.0)

    @property
    def zoom(self) -> float:
        return self._zoom

    @property
    def pan(self) -> Tuple[float, float]:
        return self._pan

    def set_zoom(self, zoom: float) -> float:
        zoom = clamp(zoom, ZOOM_MIN, ZOOM_MAX)
        if zoom != self._zoom:
            self._zoom = zoom
            self.zoom_changed.emit(zoom)
            self.changed.emit()
        return self._zoom

    def zoom_by(self, delta: float) -> float:
        return self.set_zoom(self._zoom + delta)

    def set_pan(self, x: float, y: float) -> Tuple[float, float]:
        pan = (clamp(x, -PAN_LIMIT_PX, PAN_LIMIT_PX), clamp(y, -PAN_LIMIT_PX, PAN_LIMIT_PX))
        if pan != self._pan:
            self._pan = pan
            self.changed.emit()
        return self._pan

    def reset(self) -> None:
        self._zoom = 1.0
        self._pan = (0.0, 0.0)
        self.zoom_changed.emit(1.0)
        self.changed.emit()

    def to_screen(self, x: float, y: float, center: Tuple[float, float]) -> Tuple[float, float]:
        """Map a base (projected) position to its on-screen position."""
        cx, cy = center
        px, py = self._pan
        return cx + (x - cx + px) * self._zoom, cy + (y - cy + py) * self._zoom


def selectable_bodies(frame: FrameModel, magnitude_limit: float) -> List[CelestialPosition]:
    """Stars within the magnitude limit, all planets and the Moon."""
    result = [s for s in frame.stars if (s.vmag if s.vmag is not None else 2.0) <= magnitude_limit]
    result.extend(frame.planets)
    if frame.moon is not None:
        result.append(frame.moon)
    return result


def hit_test(
    candidates: Iterable[CelestialPosition],
    x: float,
    y: float,
    view: ViewTransform,
    center: Tuple[float, float],
) -> Optional[CelestialPosition]:
    """Nearest candidate to (x, y) within 20/zoom pixels, or None."""
    nearest: Optional[CelestialPosition] = None
    nearest_dist = HIT_RADIUS_PX / view.zoom
    for body in candidates:
        sx, sy = view.to_screen(body.x, body.y, center)
        dist = math.hypot(sx - x, sy - y)
        if dist < nearest_dist:
            nearest_dist = dist
            nearest = body
    return nearest


PRIMARY_BUTTON = 1


class InteractionController:
    """Turns pointer, wheel and button input into pan/zoom changes and selections.

    Pointer handling is a small state machine: Idle -> Dragging -> Idle. A
    press followed by a release without dragging counts as a click; a release
    that ends a drag never changes the selection.
    """

    IDLE = "idle"
    DRAGGING = "dragging"

    def __init__(
        self,
        view: ViewTransform,
        model: SkyModel,
        options: DisplayOptions,
        on_select: Optional[Callable[[Optional[CelestialPosition]], None]] = None,
    ):
        self.view = view
        self.model = model
        self.options = options
        self.on_select = on_select
        self.state = self.IDLE
        self._drag_origin = (0.0, 0.0)
        self._pan_at_start = (0.0, 0.0)
        self._dragged = False

    def press(self, x: float, y: float, button: int = PRIMARY_BUTTON) -> bool:
        if button != PRIMARY_BUTTON:
            return False
        self.state = self.DRAGGING
        self._drag_origin = (x, y)
        self._pan_at_start = self.view.pan
        self._dragged = False
        return True

    def move(self, x: float, y: float) -> bool:
        if self.state != self.DRAGGING:
            return False
        dx = x - self._drag_origin[0]
        dy = y - self._drag_origin[1]
        if not self._dragged and math.hypot(dx, dy) < CLICK_SLOP_PX:
            return False
        self._dragged = True
        zoom = self.view.zoom
        self.view.set_pan(self._pan_at_start[0] + dx / zoom, self._pan_at_start[1] + dy / zoom)
        return True

    def release(self, x: float, y: float) -> bool:
        """End a press; returns True when it was a click that ran hit testing."""
        if self.state != self.DRAGGING:
            return False
        self.state = self.IDLE
        if self._dragged:
            self._dragged = False
            return False
        self.click(x, y)
        return True

    def leave(self) -> None:
        self.state = self.IDLE
        self._dragged = False

    def click(self, x: float, y: float) -> Optional[CelestialPosition]:
        frame = self.model.frame
        body = None
        if frame is not None:
            center = (frame.width / 2, frame.height / 2)
            candidates = selectable_bodies(frame, self.options.magnitude_limit)
            body = hit_test(candidates, x, y, self.view, center)
        self.model.select(body)
        if self.on_select is not None:
            self.on_select(body)
        return body

    def wheel(self, angle_delta: float) -> float:
        """Positive angle delta (wheel away from the user) zooms in."""
        if angle_delta > 0:
            return self.view.zoom_by(ZOOM_WHEEL_STEP)
        elif angle_delta < 0:
            return self.view.zoom_by(-ZOOM_WHEEL_STEP)
        return self.view.zoom

    def zoom_in(self) -> float:
        return self.view.zoom_by(ZOOM_BUTTON_STEP)

    def zoom_out(self) -> float:
        return self.view.zoom_by(-ZOOM_BUTTON_STEP)

    def reset_view(self) -> None:
        self.view.reset()
