import logging
from typing import Optional, Sequence

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import (
    QCloseEvent,
    QFont,
    QKeyEvent,
    QMouseEvent,
    QPainter,
    QPaintEvent,
    QResizeEvent,
    QWheelEvent,
)
from PyQt5.QtWidgets import QAction, QApplication, QMainWindow, QWidget

from ..astro import EphemerisProvider
from ..clock import SystemTimeSource, TimeSource
from ..config import save_display_options
from ..paths import MAGNITUDE_LIMIT_STEP
from ..render import draw as render_draw
from ..sky import SkyModel, format_object_info
from ..types import CelestialPosition, ConstellationLines, DisplayOptions, Observer, StarRecord
from ..view import InteractionController, ViewTransform


logger = logging.getLogger(__name__)


class SkyCanvas(QWidget):
    """Chart surface: owns the view transform and routes pointer input to the controller.

    With coalesce_redraws=False every state change repaints synchronously;
    with True, Qt batches repaints to the next paint event.
    """

    # Using Qt signal objects requires attribute creation at runtime; avoid type hints here
    object_selected = pyqtSignal(object)
    zoom_changed = pyqtSignal(float)

    def __init__(
        self,
        model: SkyModel,
        options: DisplayOptions,
        zoom: float = 1.0,
        coalesce_redraws: bool = False,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self.model = model
        self.options = options
        self.coalesce_redraws = coalesce_redraws
        self.view = ViewTransform(zoom, self)
        self.controller = InteractionController(self.view, model, options, on_select=self.object_selected.emit)

        self.view.changed.connect(self.request_redraw)
        self.view.zoom_changed.connect(self.zoom_changed.emit)
        self.model.frame_updated.connect(self.request_redraw)
        self.model.selection_changed.connect(self.request_redraw)

        self.setMinimumSize(400, 400)
        self.setCursor(Qt.CursorShape.OpenHandCursor)

    def request_redraw(self, *_args):
        if self.coalesce_redraws:
            self.update()
        else:
            self.repaint()

    def toggle_option(self, name: str) -> bool:
        value = not getattr(self.options, name)
        setattr(self.options, name, value)
        self.request_redraw()
        return value

    def shift_magnitude_limit(self, delta: float) -> float:
        limit = self.options.set_magnitude_limit(self.options.magnitude_limit + delta)
        self.request_redraw()
        return limit

    def resizeEvent(self, event: QResizeEvent):
        self.model.set_canvas_size(self.width(), self.height())
        super().resizeEvent(event)

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        try:
            if self.model.frame is None:
                painter.fillRect(self.rect(), Qt.GlobalColor.black)
                painter.setPen(Qt.GlobalColor.white)
                painter.setFont(QFont("Arial", 16))
                painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "Loading sky data...")
                return
            render_draw.draw_sky(
                painter,
                self.width(),
                self.height(),
                self.model.frame,
                self.view,
                self.options,
                self.model.selection,
            )
        finally:
            painter.end()

    def mousePressEvent(self, event: QMouseEvent):
        button = 1 if event.button() == Qt.LeftButton else 0
        pos = event.localPos()
        if self.controller.press(pos.x(), pos.y(), button):
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
            event.accept()
        else:
            super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent):
        pos = event.localPos()
        self.controller.move(pos.x(), pos.y())
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent):
        pos = event.localPos()
        self.controller.release(pos.x(), pos.y())
        self.setCursor(Qt.CursorShape.OpenHandCursor)
        event.accept()

    def leaveEvent(self, event):
        self.controller.leave()
        self.setCursor(Qt.CursorShape.OpenHandCursor)
        event.accept()

    def wheelEvent(self, event: QWheelEvent):
        self.controller.wheel(event.angleDelta().y())
        event.accept()


class SkyWindow(QMainWindow):
    def __init__(
        self,
        observer: Observer,
        star_catalog: Sequence[StarRecord],
        constellation_lines: Sequence[ConstellationLines],
        ephemeris: EphemerisProvider,
        time_source: TimeSource,
        options: DisplayOptions,
        zoom: float = 1.0,
        coalesce_redraws: bool = False,
        persist_options: bool = True,
    ):
        super().__init__()
        self.time_source = time_source
        self.persist_options = persist_options

        self.setWindowTitle(f"Sky Chart - {observer.latitude:.4f}, {observer.longitude:.4f}")
        self.setGeometry(100, 100, 800, 800)

        self.model = SkyModel(
            star_catalog,
            constellation_lines,
            ephemeris,
            time_source,
            observer,
            canvas_size=(800, 800),
            parent=self,
        )
        self.canvas = SkyCanvas(self.model, options, zoom=zoom, coalesce_redraws=coalesce_redraws, parent=self)
        self.setCentralWidget(self.canvas)
        self.canvas.object_selected.connect(self.on_object_selected)
        # also fires when a selected body sets and the model drops it
        self.model.selection_changed.connect(self.on_object_selected)
        self.canvas.zoom_changed.connect(self.on_zoom_changed)

        toolbar = self.addToolBar("View")
        for text, shortcut, slot in (
            ("Zoom In", "+", self.canvas.controller.zoom_in),
            ("Zoom Out", "-", self.canvas.controller.zoom_out),
            ("Reset View", "0", self.canvas.controller.reset_view),
        ):
            action = QAction(text, self)
            action.setToolTip(f"{text} ({shortcut})")
            action.triggered.connect(lambda _checked=False, f=slot: f())
            toolbar.addAction(action)

        self.statusBar().showMessage("Drag to pan, scroll to zoom, click objects for details.")

    def on_object_selected(self, body: Optional[CelestialPosition]):
        if body is None:
            self.statusBar().showMessage("No object selected")
            return
        self.statusBar().showMessage("  |  ".join(format_object_info(body)))

    def on_zoom_changed(self, zoom: float):
        logger.debug("Zoom changed to %.1f", zoom)

    def shift_time_offset(self, hours: int):
        if isinstance(self.time_source, SystemTimeSource):
            offset = self.time_source.shift_offset_hours(hours)
            self.statusBar().showMessage(f"Time offset: {offset.total_seconds() / 3600:+.0f}h")

    def keyPressEvent(self, event: QKeyEvent):
        key = event.key() if event else None
        toggles = {
            Qt.Key.Key_C: "show_constellations",
            Qt.Key.Key_L: "show_labels",
            Qt.Key.Key_G: "show_alt_az_grid",
            Qt.Key.Key_E: "show_eq_grid",
        }
        if key == Qt.Key.Key_F11:
            if self.isFullScreen():
                self.showNormal()
            else:
                self.showFullScreen()
        elif key == Qt.Key.Key_Escape:
            if self.isFullScreen():
                self.showNormal()
        elif key == Qt.Key.Key_Q:
            self.close()
            QApplication.quit()
        elif key in (Qt.Key.Key_Plus, Qt.Key.Key_Equal):
            self.canvas.controller.zoom_in()
        elif key == Qt.Key.Key_Minus:
            self.canvas.controller.zoom_out()
        elif key == Qt.Key.Key_0:
            self.canvas.controller.reset_view()
        elif key in toggles:
            self.canvas.toggle_option(toggles[key])
        elif key == Qt.Key.Key_Comma:
            self.canvas.shift_magnitude_limit(-MAGNITUDE_LIMIT_STEP)
        elif key == Qt.Key.Key_Period:
            self.canvas.shift_magnitude_limit(MAGNITUDE_LIMIT_STEP)
        elif key == Qt.Key.Key_BracketLeft:
            self.shift_time_offset(-1)
        elif key == Qt.Key.Key_BracketRight:
            self.shift_time_offset(1)
        else:
            super().keyPressEvent(event)

    def closeEvent(self, event: QCloseEvent):
        self.model.dispose()
        if self.persist_options:
            try:
                save_display_options(self.canvas.options)
            except OSError as e:
                logger.warning("Could not save display settings: %s", e)
        super().closeEvent(event)
