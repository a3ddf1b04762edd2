from typing import List, Optional, Tuple

from PyQt5.QtCore import QEvent, QPointF, QRectF, Qt, pyqtSignal
from PyQt5.QtGui import QColor, QImage, QPainter, QPainterPath, QPen, QPixmap
from PyQt5.QtWidgets import QSizePolicy, QWidget

from CVP_Libs.CropLib.crop_controller import CropController
from CVP_Libs.GeometryLib.geometry import Point, fit_within
from CVP_Libs.ImageEditingLib.image_editing_ops import encode_image
from CVP_Libs.ImageEditingLib.image_models import ImageArtifact


def pil_to_qimage(image) -> QImage:
    """Convert a PIL image to a QImage through an in-memory PNG."""
    return QImage.fromData(encode_image(image, "PNG"), "PNG")


class CropCanvasWidget(QWidget):
    """
    Shows an artifact with the crop overlay and forwards mouse and touch
    input to a CropController as pointer lists.

    The controller's container is the on-screen size of the image, so the
    widget keeps it in sync on every resize.
    """

    region_changed = pyqtSignal()

    OVERLAY_COLOR = QColor(0, 0, 0, 128)
    FRAME_COLOR = QColor(255, 255, 255)
    GRID_COLOR = QColor(255, 255, 255, 110)

    def __init__(self, controller: CropController, parent=None) -> None:
        super().__init__(parent)
        self.controller = controller
        self._pixmap: Optional[QPixmap] = None
        self._image_rect = QRectF()
        self.setAttribute(Qt.WA_AcceptTouchEvents, True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setMinimumSize(320, 240)

    def set_artifact(self, artifact: Optional[ImageArtifact]) -> None:
        if artifact is None:
            self._pixmap = None
        else:
            self._pixmap = QPixmap.fromImage(pil_to_qimage(artifact.pixels()))
        self._layout_image(reset=True)
        self.update()

    @property
    def display_size(self) -> Tuple[float, float]:
        return (self._image_rect.width(), self._image_rect.height())

    # Layout -----------------------------------------------------------------

    def _layout_image(self, reset: bool = False) -> None:
        if self._pixmap is None or self._pixmap.isNull() or self.width() <= 0 or self.height() <= 0:
            self._image_rect = QRectF()
            return
        fit_w, fit_h = fit_within(self._pixmap.width(), self._pixmap.height(), self.width(), self.height())
        left = (self.width() - fit_w) / 2
        top = (self.height() - fit_h) / 2
        self._image_rect = QRectF(left, top, fit_w, fit_h)
        self.controller.set_container_size(fit_w, fit_h)
        if reset:
            self.controller.reset()

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self._layout_image()

    def _to_display(self, pos: QPointF) -> Point:
        return (pos.x() - self._image_rect.left(), pos.y() - self._image_rect.top())

    # Mouse ------------------------------------------------------------------

    def mousePressEvent(self, event) -> None:
        if event.button() == Qt.LeftButton:
            self.controller.on_gesture_start([self._to_display(event.localPos())])
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event) -> None:
        if event.buttons() & Qt.LeftButton:
            self.controller.on_gesture_move([self._to_display(event.localPos())])
            self.region_changed.emit()
            self.update()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event) -> None:
        if event.button() == Qt.LeftButton:
            self.controller.on_gesture_end([])
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def wheelEvent(self, event) -> None:
        steps = event.angleDelta().y() / 120
        if steps:
            self.controller.set_zoom(0.1 * steps)
            self.region_changed.emit()
            self.update()

    # Touch ------------------------------------------------------------------

    def _touch_points(self, event, include_released: bool = False) -> List[Point]:
        points = []
        for touch in event.touchPoints():
            if not include_released and touch.state() == Qt.TouchPointReleased:
                continue
            points.append(self._to_display(touch.pos()))
        return points

    def event(self, event) -> bool:
        kind = event.type()
        if kind == QEvent.TouchBegin:
            self.controller.on_gesture_start(self._touch_points(event))
        elif kind == QEvent.TouchUpdate:
            pressed = any(t.state() == Qt.TouchPointPressed for t in event.touchPoints())
            released = any(t.state() == Qt.TouchPointReleased for t in event.touchPoints())
            active = self._touch_points(event)
            if pressed:
                self.controller.on_gesture_start(active)
            elif released:
                self.controller.on_gesture_end(active)
            else:
                self.controller.on_gesture_move(active)
        elif kind in (QEvent.TouchEnd, QEvent.TouchCancel):
            self.controller.on_gesture_end([])
        else:
            return super().event(event)
        self.region_changed.emit()
        self.update()
        event.accept()
        return True

    # Painting ---------------------------------------------------------------

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.SmoothPixmapTransform)
        painter.fillRect(self.rect(), QColor(30, 30, 30))
        if self._pixmap is None or self._image_rect.isEmpty():
            painter.setPen(QColor(200, 200, 200))
            painter.drawText(self.rect(), Qt.AlignCenter, "No image")
            return

        painter.drawPixmap(self._image_rect, self._pixmap, QRectF(self._pixmap.rect()))

        region = self.controller.region
        crop = QRectF(
            self._image_rect.left() + region.x,
            self._image_rect.top() + region.y,
            region.width,
            region.height,
        )

        shade = QPainterPath()
        shade.addRect(self._image_rect)
        hole = QPainterPath()
        hole.addRect(crop)
        painter.fillPath(shade.subtracted(hole), self.OVERLAY_COLOR)

        painter.setPen(QPen(self.FRAME_COLOR, 2))
        painter.drawRect(crop)

        painter.setPen(QPen(self.GRID_COLOR, 1))
        for i in (1, 2):
            x = crop.left() + crop.width() * i / 3
            y = crop.top() + crop.height() * i / 3
            painter.drawLine(QPointF(x, crop.top()), QPointF(x, crop.bottom()))
            painter.drawLine(QPointF(crop.left(), y), QPointF(crop.right(), y))

        painter.setPen(self.FRAME_COLOR)
        painter.drawText(
            self.rect().adjusted(8, 8, -8, -8),
            Qt.AlignBottom | Qt.AlignLeft,
            f"Zoom: {round(region.zoom * 100)}% | Rotation: {region.rotation_degrees}°",
        )
