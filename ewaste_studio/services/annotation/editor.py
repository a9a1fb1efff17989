"""
Annotation Editor - pointer gestures, selection and frame caching

Sits between the canvas component and the AnnotationStore: pointer events
arrive in canvas pixels, hand-drawn boxes leave as percentage boxes.
"""
import logging
import threading
from enum import Enum
from typing import Any, Optional, Tuple

from PIL import Image

import ewaste_studio.config as config
from .geometry import (
    fit_canvas_size,
    hit_test,
    normalize_drag,
    pixel_to_percent,
    scale_factor,
)
from .renderer import draw_frame, draw_placeholder, visible_annotations
from .store import AnnotationStore

logger = logging.getLogger(__name__)


class EditorBusyError(RuntimeError):
    """Raised when another editor already holds the editor lock"""


class EditorHandle:
    """
    Proof of ownership of an EditorLock

    Use as a context manager, or call release() on teardown. Releasing
    twice is harmless.
    """

    def __init__(self, lock: "EditorLock", owner: str):
        self._lock = lock
        self.owner = owner
        self.released = False

    def release(self) -> None:
        if not self.released:
            self._lock._release(self)
            self.released = True

    def __enter__(self) -> "EditorHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class EditorLock:
    """
    Exclusive initialization lock for the annotation editor

    Only one editor may be mounted per lock at a time. The lock object is
    owned by the session state and handed to the editor explicitly.
    """

    def __init__(self):
        self._mutex = threading.Lock()
        self._holder: Optional[EditorHandle] = None

    @property
    def owner(self) -> Optional[str]:
        return self._holder.owner if self._holder else None

    @property
    def is_held(self) -> bool:
        return self._holder is not None

    def acquire(self, owner: str) -> EditorHandle:
        """
        Take the lock for an editor

        Args:
            owner: Identifier of the editor instance

        Returns:
            EditorHandle to release on teardown

        Raises:
            EditorBusyError: If another owner holds the lock
        """
        with self._mutex:
            if self._holder is not None:
                raise EditorBusyError(
                    f"Editor lock held by {self._holder.owner!r}, requested by {owner!r}"
                )
            self._holder = EditorHandle(self, owner)
            return self._holder

    def _release(self, handle: EditorHandle) -> None:
        with self._mutex:
            if self._holder is handle:
                self._holder = None


class GestureState(str, Enum):
    """Pointer gesture state of the canvas"""
    IDLE = "idle"
    DRAWING = "drawing"
    SELECTED = "selected"


class AnnotationEditor:
    """
    Interactive bounding-box canvas

    Attributes:
        store: Working copy of the task's boxes
        current_category: Category given to every newly drawn box
        show_ai: Whether AI-generated boxes are rendered
        read_only: Disables all pointer editing
        min_box_size: Drags smaller than this (pixels, either axis) are discarded
        render_count: Number of real draw passes performed
    """

    def __init__(
        self,
        store: AnnotationStore,
        categories: list,
        read_only: bool = False,
        min_box_size: int = None,
        max_canvas_size: Tuple[int, int] = None,
    ):
        self.store = store
        self.categories = list(categories)
        self.current_category = self.categories[0] if self.categories else ""
        self.show_ai = True
        self.read_only = read_only
        self.min_box_size = config.MIN_BOX_SIZE if min_box_size is None else min_box_size
        self.max_canvas_size = max_canvas_size or (
            config.MAX_CANVAS_WIDTH,
            config.MAX_CANVAS_HEIGHT,
        )

        self.state = GestureState.IDLE
        self.selected_id: Optional[str] = None
        self._start: Optional[Tuple[float, float]] = None
        self._current: Optional[Tuple[float, float]] = None

        self.image: Optional[Image.Image] = None
        self.canvas_size: Optional[Tuple[int, int]] = None
        self.scale = 1.0
        self.image_error: Optional[str] = None

        self._handle: Optional[EditorHandle] = None
        self._frame: Optional[Image.Image] = None
        self._frame_key: Any = None
        self.render_count = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def mount(self, lock: EditorLock, owner: str) -> EditorHandle:
        """Acquire the editor lock; raises EditorBusyError if taken"""
        self._handle = lock.acquire(owner)
        return self._handle

    def unmount(self) -> None:
        """Release the editor lock and drop any unfinished gesture"""
        self.cancel_gesture()
        if self._handle is not None:
            self._handle.release()
            self._handle = None

    @property
    def is_mounted(self) -> bool:
        return self._handle is not None and not self._handle.released

    # ------------------------------------------------------------------
    # Image
    # ------------------------------------------------------------------

    def set_image(self, image: Image.Image) -> None:
        """Attach the task image and size the canvas to fit the display box"""
        natural_width, natural_height = image.size
        self.canvas_size = fit_canvas_size(
            natural_width, natural_height, *self.max_canvas_size
        )
        self.scale = scale_factor(self.canvas_size[0], natural_width)
        self.image = image
        self.image_error = None
        logger.debug(
            f"Canvas {self.canvas_size[0]}x{self.canvas_size[1]} "
            f"for {natural_width}x{natural_height} image (scale {self.scale:.3f})"
        )

    def set_image_error(self, message: str) -> None:
        """Record an image load failure; editing stays disabled"""
        logger.warning(f"Image failed to load: {message}")
        self.image = None
        self.canvas_size = None
        self.image_error = message
        self.cancel_gesture()

    @property
    def is_ready(self) -> bool:
        """Canvas dimensions are known, so coordinate math is allowed"""
        return self.image is not None and self.canvas_size is not None

    # ------------------------------------------------------------------
    # Pointer gestures
    # ------------------------------------------------------------------

    def _accepts_input(self) -> bool:
        if self.read_only:
            self.cancel_gesture()
            return False
        return self.is_ready

    def pointer_down(self, x: float, y: float) -> None:
        """Select the box under the pointer, or start drawing a new one"""
        if not self._accepts_input():
            return

        boxes = visible_annotations(self.store.annotations, self.show_ai)
        clicked = hit_test(boxes, x, y, *self.canvas_size)
        if clicked is not None:
            self.selected_id = clicked.id
            self.state = GestureState.SELECTED
            self._start = None
            self._current = None
            return

        self.selected_id = None
        self.state = GestureState.DRAWING
        self._start = (x, y)
        self._current = (x, y)

    def pointer_move(self, x: float, y: float) -> None:
        """Update the live rectangle while drawing"""
        if self.state != GestureState.DRAWING or not self._accepts_input():
            return
        self._current = (x, y)

    def pointer_up(self, x: Optional[float] = None, y: Optional[float] = None):
        """
        Finish a drawing gesture

        Args:
            x, y: Release position; defaults to the last move position

        Returns:
            The new BoundingBox, or None if nothing was created
        """
        if self.state != GestureState.DRAWING or not self._accepts_input():
            return None

        end = (x, y) if x is not None and y is not None else self._current
        start = self._start
        self.cancel_gesture()

        left, top, width, height = normalize_drag(start, end)
        if width < self.min_box_size or height < self.min_box_size:
            return None

        canvas_width, canvas_height = self.canvas_size
        x_pct, y_pct = pixel_to_percent(left, top, canvas_width, canvas_height)
        w_pct, h_pct = pixel_to_percent(width, height, canvas_width, canvas_height)
        return self.store.add(x_pct, y_pct, w_pct, h_pct, self.current_category)

    def pointer_leave(self) -> None:
        """Pointer left the canvas: abort any box being drawn"""
        if self.state == GestureState.DRAWING:
            self.cancel_gesture()

    def cancel_gesture(self) -> None:
        """Drop an unfinished drawing gesture"""
        if self.state == GestureState.DRAWING:
            self.state = GestureState.IDLE
        self._start = None
        self._current = None

    def handle_event(self, event: dict):
        """
        Dispatch one pointer event from the canvas component

        Args:
            event: Dict with "type" (down, move, up, leave) and pixel "x"/"y"

        Returns:
            New BoundingBox if the event completed a box, else None
        """
        event_type = event.get("type")
        x = event.get("x")
        y = event.get("y")

        if event_type == "down":
            self.pointer_down(x, y)
        elif event_type == "move":
            self.pointer_move(x, y)
        elif event_type == "up":
            return self.pointer_up(x, y)
        elif event_type == "leave":
            self.pointer_leave()
        else:
            logger.debug(f"Ignoring unknown pointer event {event_type!r}")
        return None

    @property
    def preview_rect(self) -> Optional[Tuple[float, float, float, float]]:
        """Pixel (left, top, width, height) of the box being drawn"""
        if self.state != GestureState.DRAWING or self._start is None:
            return None
        return normalize_drag(self._start, self._current)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, annotation_id: Optional[str]) -> None:
        """Select a box from the annotation list (None clears)"""
        if annotation_id is not None and self.store.get(annotation_id) is None:
            annotation_id = None
        self.selected_id = annotation_id
        self.state = GestureState.SELECTED if annotation_id else GestureState.IDLE

    def delete_selected(self) -> bool:
        """Remove the selected box; returns True if one was selected"""
        if self.selected_id is None or self.read_only:
            return False
        self.store.remove(self.selected_id)
        self.select(None)
        return True

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render_key(self):
        return (
            tuple(tuple(sorted(b.to_dict().items())) for b in self.store.annotations),
            self.selected_id,
            self.show_ai,
            self.preview_rect,
            self.canvas_size,
            id(self.image),
            self.image_error,
        )

    def render(self) -> Image.Image:
        """
        Current canvas frame

        Redraws only when annotations, selection, AI visibility, the preview
        rectangle or the image changed since the last call.
        """
        key = self._render_key()
        if self._frame is not None and key == self._frame_key:
            return self._frame

        if self.is_ready:
            self._frame = draw_frame(
                self.image,
                self.canvas_size,
                self.store.annotations,
                selected_id=self.selected_id,
                show_ai=self.show_ai,
                preview=self.preview_rect,
            )
        else:
            message = "Image unavailable" if self.image_error else "Loading image..."
            self._frame = draw_placeholder(self.max_canvas_size, message)

        self._frame_key = key
        self.render_count += 1
        return self._frame
