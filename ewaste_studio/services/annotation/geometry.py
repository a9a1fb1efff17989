"""
Coordinate conversions between canvas pixels and percentage space

Annotations are stored as percentages of the image size. Every projection is
re-derived from the current canvas dimensions; no scale state is kept.
"""
from typing import Iterable, Optional, Tuple

import numpy as np

from .models import BoundingBox


def _check_canvas(canvas_width: float, canvas_height: float) -> None:
    if canvas_width <= 0 or canvas_height <= 0:
        raise ValueError(
            f"Canvas size must be positive, got {canvas_width}x{canvas_height}"
        )


def pixel_to_percent(
    px: float, py: float, canvas_width: float, canvas_height: float
) -> Tuple[float, float]:
    """
    Convert a canvas pixel position to percent of canvas size

    Args:
        px: X position in canvas pixels
        py: Y position in canvas pixels
        canvas_width: Current canvas width in pixels
        canvas_height: Current canvas height in pixels

    Returns:
        Tuple of (x_percent, y_percent)
    """
    _check_canvas(canvas_width, canvas_height)
    return (px / canvas_width * 100, py / canvas_height * 100)


def percent_to_pixel(
    x_percent: float, y_percent: float, canvas_width: float, canvas_height: float
) -> Tuple[float, float]:
    """
    Convert a percent position to canvas pixels (inverse of pixel_to_percent)

    Args:
        x_percent: X position, percent of canvas width
        y_percent: Y position, percent of canvas height
        canvas_width: Current canvas width in pixels
        canvas_height: Current canvas height in pixels

    Returns:
        Tuple of (px, py)
    """
    _check_canvas(canvas_width, canvas_height)
    return (x_percent / 100 * canvas_width, y_percent / 100 * canvas_height)


def fit_canvas_size(
    natural_width: int, natural_height: int, max_width: int, max_height: int
) -> Tuple[int, int]:
    """
    Choose a canvas size that keeps the image aspect ratio inside a display box

    The width is set to max_width first; if the resulting height overflows,
    the height is capped and the width derived from it instead. Dimensions
    are rounded to whole pixels.

    Args:
        natural_width: Source image width in pixels
        natural_height: Source image height in pixels
        max_width: Maximum canvas width
        max_height: Maximum canvas height

    Returns:
        Tuple of (canvas_width, canvas_height)
    """
    if natural_width <= 0 or natural_height <= 0:
        raise ValueError(f"Invalid image size {natural_width}x{natural_height}")

    aspect_ratio = natural_width / natural_height
    canvas_width = float(max_width)
    canvas_height = max_width / aspect_ratio

    if canvas_height > max_height:
        canvas_height = float(max_height)
        canvas_width = max_height * aspect_ratio

    return (max(1, int(round(canvas_width))), max(1, int(round(canvas_height))))


def scale_factor(canvas_width: float, natural_width: float) -> float:
    """Display scale of the canvas relative to the source image (informational)"""
    if natural_width <= 0:
        return 1.0
    return canvas_width / natural_width


def normalize_drag(
    start: Tuple[float, float], end: Tuple[float, float]
) -> Tuple[float, float, float, float]:
    """
    Turn a drag from start to end into (left, top, width, height) in pixels

    Works for drags in any direction: the top-left corner is the per-axis minimum.
    """
    left = min(start[0], end[0])
    top = min(start[1], end[1])
    width = abs(end[0] - start[0])
    height = abs(end[1] - start[1])
    return (left, top, width, height)


def box_to_pixel_rect(
    box: BoundingBox, canvas_width: float, canvas_height: float
) -> Tuple[float, float, float, float]:
    """
    Project a box onto the canvas

    Returns:
        Tuple of (x0, y0, x1, y1) in canvas pixels
    """
    x0, y0 = percent_to_pixel(box.x, box.y, canvas_width, canvas_height)
    x1, y1 = percent_to_pixel(
        box.x + box.width, box.y + box.height, canvas_width, canvas_height
    )
    return (x0, y0, x1, y1)


def boxes_to_pixel_rects(
    boxes: Iterable[BoundingBox], canvas_width: float, canvas_height: float
) -> np.ndarray:
    """
    Project many boxes at once

    Returns:
        Float array of shape (N, 4) holding x0, y0, x1, y1 per box
    """
    _check_canvas(canvas_width, canvas_height)
    coords = np.array(
        [[b.x, b.y, b.width, b.height] for b in boxes], dtype=np.float64
    ).reshape(-1, 4)

    scale = np.array([canvas_width, canvas_height, canvas_width, canvas_height]) / 100
    rects = np.empty_like(coords)
    rects[:, :2] = coords[:, :2]
    rects[:, 2:] = coords[:, :2] + coords[:, 2:]
    return rects * scale


def hit_test(
    boxes: list, px: float, py: float, canvas_width: float, canvas_height: float
) -> Optional[BoundingBox]:
    """
    Find the first box (in list order) whose pixel rectangle contains a point

    Edges are inclusive.

    Returns:
        The matching BoundingBox, or None if the point is on empty canvas
    """
    if not boxes:
        return None

    rects = boxes_to_pixel_rects(boxes, canvas_width, canvas_height)
    inside = (
        (px >= rects[:, 0]) & (px <= rects[:, 2])
        & (py >= rects[:, 1]) & (py <= rects[:, 3])
    )
    if not inside.any():
        return None
    return boxes[int(np.argmax(inside))]
