from __future__ import annotations

from PySide6.QtCore import Property, QObject, Signal, Slot

from frame_fitter.errors import NotReadyError
from frame_fitter.logger import get_logger
from frame_fitter.ops.gesture_controller import GestureController
from frame_fitter.ops.transform import NormRect, TargetFrame, TransformModel, safe_zones

_logger = get_logger("preview_state")


class PreviewState(QObject):
    """State bound by one interactive preview (one target frame).

    Design:
    - The GestureController is authoritative for the transform; this object
      only forwards pointer/resize events and re-emits changes as Qt signals.
    - Pointer coordinates are container-relative pixels.
    """

    transformChanged = Signal(object)
    scaleChanged = Signal(float)
    panXChanged = Signal(float)
    panYChanged = Signal(float)
    snappedXChanged = Signal(bool)
    snappedYChanged = Signal(bool)
    draggingChanged = Signal(bool)
    fittedRectChanged = Signal(object)

    def __init__(
        self,
        controller: GestureController | None = None,
        frame: TargetFrame | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._controller = controller or GestureController()
        self._frame = frame
        t = self._controller.transform
        self._scale = t.scale
        self._x = t.x
        self._y = t.y
        self._snapped_x = self._controller.snapped_x
        self._snapped_y = self._controller.snapped_y
        self._dragging = False
        self._controller.add_listener(self._on_transform)

    @property
    def controller(self) -> GestureController:
        return self._controller

    @property
    def safe_zones(self) -> tuple[NormRect, ...]:
        return safe_zones(self._frame) if self._frame is not None else ()

    # ---- read-only properties (mutate via slots) ----
    def _get_scale(self) -> float:
        return float(self._scale)

    scale = Property(float, _get_scale, notify=scaleChanged)  # type: ignore[arg-type]

    def _get_x(self) -> float:
        return float(self._x)

    panX = Property(float, _get_x, notify=panXChanged)  # type: ignore[arg-type]

    def _get_y(self) -> float:
        return float(self._y)

    panY = Property(float, _get_y, notify=panYChanged)  # type: ignore[arg-type]

    def _get_snapped_x(self) -> bool:
        return bool(self._snapped_x)

    snappedX = Property(bool, _get_snapped_x, notify=snappedXChanged)  # type: ignore[arg-type]

    def _get_snapped_y(self) -> bool:
        return bool(self._snapped_y)

    snappedY = Property(bool, _get_snapped_y, notify=snappedYChanged)  # type: ignore[arg-type]

    def _get_dragging(self) -> bool:
        return bool(self._dragging)

    dragging = Property(bool, _get_dragging, notify=draggingChanged)  # type: ignore[arg-type]

    def _get_safe_zones(self) -> list:
        # frame fractions; the host scales them to the preview size
        return [z.as_dict() for z in self.safe_zones]

    safeZones = Property(list, _get_safe_zones, constant=True)  # type: ignore[arg-type]

    # ---- slots ----
    @Slot(float, float)
    def containerResized(self, width: float, height: float) -> None:
        self._controller.set_container(width, height)
        self.fittedRectChanged.emit(self._controller.fitted_rect)

    @Slot(float, float, str)
    def pointerDown(self, x: float, y: float, kind: str) -> None:
        try:
            self._controller.pointer_down(x, y, kind)
        except (NotReadyError, ValueError) as e:
            _logger.debug("pointerDown ignored: %s", e)
            return
        self._set_dragging(True)
        self._sync_snap()

    @Slot(float, float)
    def pointerMove(self, x: float, y: float) -> None:
        if not self._controller.is_dragging:
            return
        self._controller.pointer_move(x, y)
        self._sync_snap()

    @Slot()
    def pointerUp(self) -> None:
        self._controller.pointer_up()
        self._set_dragging(False)
        self._sync_snap()

    @Slot()
    def pointerLeave(self) -> None:
        self._controller.pointer_leave()
        self._set_dragging(False)
        self._sync_snap()

    @Slot()
    def reset(self) -> None:
        self._controller.reset()
        self._set_dragging(False)
        self._sync_snap()

    # ---- internal mutation helpers ----
    def _on_transform(self, t: TransformModel) -> None:
        if t.scale != self._scale:
            self._scale = t.scale
            self.scaleChanged.emit(t.scale)
        if t.x != self._x:
            self._x = t.x
            self.panXChanged.emit(t.x)
        if t.y != self._y:
            self._y = t.y
            self.panYChanged.emit(t.y)
        self.transformChanged.emit(t)
        self._sync_snap()

    def _set_dragging(self, value: bool) -> None:
        v = bool(value)
        if v == self._dragging:
            return
        self._dragging = v
        self.draggingChanged.emit(v)

    def _sync_snap(self) -> None:
        sx = self._controller.snapped_x
        sy = self._controller.snapped_y
        if sx != self._snapped_x:
            self._snapped_x = sx
            self.snappedXChanged.emit(sx)
        if sy != self._snapped_y:
            self._snapped_y = sy
            self.snappedYChanged.emit(sy)
