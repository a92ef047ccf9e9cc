from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from frame_fitter.errors import NotReadyError
from frame_fitter.logger import get_logger

from .geometry import ContainerSize, fit_contain, pixel_rect_to_transform, rect_for_transform
from .transform import IDENTITY, FittedRect, MediaDimensions, PixelRect, TransformModel

_logger = get_logger("gesture")

SNAP_THRESHOLD = 0.03

MOVE = "move"
HANDLES = frozenset({"n", "s", "e", "w", "ne", "nw", "se", "sw"})

TransformListener = Callable[[TransformModel], None]


@dataclass(frozen=True, slots=True)
class DragSession:
    """Pointer-held drag. All moves are resolved against `start_transform`."""

    kind: str
    start_pointer: tuple[float, float]
    start_transform: TransformModel

    @property
    def is_move(self) -> bool:
        return self.kind == MOVE


def _validate_kind(kind: str) -> str:
    k = (kind or "").strip().lower()
    if k == MOVE or k in HANDLES:
        return k
    raise ValueError(f"unknown drag kind: {kind!r}")


def _edge_flags(handle: str) -> tuple[bool, bool, bool, bool]:
    """Return (n, s, e, w) edges touched by the handle."""
    return "n" in handle, "s" in handle, "e" in handle, "w" in handle


def resize_box(box: PixelRect, handle: str, dx: float, dy: float) -> PixelRect:
    """Apply a handle drag of (dx, dy) to a pixel box.

    Edge handles resize one axis only. Corner handles keep the box aspect by
    deriving the height from the new width; with a north handle the top edge
    moves so the bottom edge stays put.
    """
    handle = _validate_kind(handle)
    if handle == MOVE:
        return PixelRect(box.left + dx, box.top + dy, box.width, box.height)

    north, south, east, west = _edge_flags(handle)
    left, top, w, h = box.left, box.top, box.width, box.height

    if east:
        w = box.width + dx
    if west:
        w = box.width - dx
        left = box.left + dx
    if south:
        h = box.height + dy
    if north:
        h = box.height - dy
        top = box.top + dy

    # Corner: lock aspect from width only
    if len(handle) == 2 and box.height > 0:
        aspect = box.width / box.height
        h = w / aspect
        if north:
            top = box.top + (box.height - h)

    return PixelRect(left, top, w, h)


class GestureController:
    """Idle/Dragging state machine turning pointer events into transforms.

    The host feeds container-relative pointer positions and the container size;
    the controller owns the committed TransformModel for one (media, frame) pair.
    """

    def __init__(self, transform: TransformModel = IDENTITY, snap_threshold: float = SNAP_THRESHOLD) -> None:
        self._transform = transform
        self._snap_threshold = float(snap_threshold)
        self._session: DragSession | None = None
        self._container = ContainerSize()
        self._media: MediaDimensions | None = None
        self._fitted: FittedRect | None = None
        self._snapped_x = transform.x == 0
        self._snapped_y = transform.y == 0
        self._listeners: list[TransformListener] = []

    # ---- read-only state ----
    @property
    def transform(self) -> TransformModel:
        return self._transform

    @property
    def session(self) -> DragSession | None:
        return self._session

    @property
    def is_dragging(self) -> bool:
        return self._session is not None

    @property
    def container(self) -> ContainerSize:
        return self._container

    @property
    def media(self) -> MediaDimensions | None:
        return self._media

    @property
    def fitted_rect(self) -> FittedRect | None:
        return self._fitted

    @property
    def is_ready(self) -> bool:
        return self._fitted is not None

    @property
    def snapped_x(self) -> bool:
        if self._session is None:
            return self._transform.x == 0
        return self._snapped_x

    @property
    def snapped_y(self) -> bool:
        if self._session is None:
            return self._transform.y == 0
        return self._snapped_y

    def box(self) -> PixelRect:
        """Current media box in container pixels (for drawing handles)."""
        if self._fitted is None:
            raise NotReadyError("media or container size not known yet")
        return rect_for_transform(self._transform, self._fitted, self._container)

    # ---- listeners ----
    def add_listener(self, fn: TransformListener) -> None:
        self._listeners.append(fn)

    def remove_listener(self, fn: TransformListener) -> None:
        if fn in self._listeners:
            self._listeners.remove(fn)

    def _commit(self, transform: TransformModel) -> TransformModel:
        if transform == self._transform:
            return transform
        self._transform = transform
        for fn in list(self._listeners):
            fn(transform)
        return transform

    # ---- environment events ----
    def set_container(self, width: float, height: float) -> None:
        self._container = ContainerSize(float(width), float(height))
        self._refit()

    def set_media(self, media: MediaDimensions | None) -> None:
        self._media = media
        self._refit()

    def _refit(self) -> None:
        if self._media is None or not self._container.is_measured:
            self._fitted = None
            return
        self._fitted = fit_contain(self._media.aspect, self._container.width, self._container.height)
        _logger.debug(
            "refit: media=%sx%s container=%.1fx%.1f fitted=%s",
            self._media.width,
            self._media.height,
            self._container.width,
            self._container.height,
            self._fitted,
        )

    def load_media(self, media: MediaDimensions | None) -> None:
        """Source file changed: drop any drag and start from identity."""
        self._session = None
        self.set_media(media)
        self.reset()

    def reset(self, transform: TransformModel = IDENTITY) -> None:
        self._session = None
        self._commit(transform)

    # ---- pointer events ----
    def pointer_down(self, x: float, y: float, kind: str = MOVE) -> DragSession:
        if self._fitted is None:
            raise NotReadyError("media or container size not known yet")
        k = _validate_kind(kind)
        self._session = DragSession(kind=k, start_pointer=(float(x), float(y)), start_transform=self._transform)
        self._snapped_x = self._transform.x == 0
        self._snapped_y = self._transform.y == 0
        _logger.debug("drag start: kind=%s at=(%.1f,%.1f) transform=%s", k, x, y, self._transform)
        return self._session

    def pointer_move(self, x: float, y: float) -> TransformModel:
        session = self._session
        if session is None or self._fitted is None:
            return self._transform

        dx = float(x) - session.start_pointer[0]
        dy = float(y) - session.start_pointer[1]
        if session.is_move:
            return self._commit(self._move(session.start_transform, dx, dy))
        return self._commit(self._resize(session, dx, dy))

    def pointer_up(self) -> TransformModel:
        if self._session is not None:
            _logger.debug("drag end: kind=%s transform=%s", self._session.kind, self._transform)
        self._session = None
        return self._transform

    # Leaving the container ends the drag exactly like a release.
    pointer_leave = pointer_up

    # ---- transform derivation ----
    def _snap(self, value: float) -> tuple[float, bool]:
        if abs(value) < self._snap_threshold:
            return 0.0, True
        return value, False

    def _move(self, start: TransformModel, dx: float, dy: float) -> TransformModel:
        new_x = start.x + dx / self._container.width
        new_y = start.y + dy / self._container.height
        new_x, self._snapped_x = self._snap(new_x)
        new_y, self._snapped_y = self._snap(new_y)
        return start.moved(new_x, new_y)

    def _resize(self, session: DragSession, dx: float, dy: float) -> TransformModel:
        assert self._fitted is not None
        box = rect_for_transform(session.start_transform, self._fitted, self._container)
        edited = resize_box(box, session.kind, dx, dy)
        return pixel_rect_to_transform(edited, self._fitted, self._container)
