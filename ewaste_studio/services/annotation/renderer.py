"""
Canvas Renderer - draws the annotation frame with Pillow

Produces the image shown by the canvas component: the background image
scaled to the canvas, every visible box color-coded by provenance, label
chips, and the dashed preview of a box being drawn.
"""
from typing import Iterable, List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from .geometry import box_to_pixel_rect
from .models import BoundingBox

# Box colors
AI_COLOR = "#3b82f6"
MANUAL_COLOR = "#10b981"
SELECTED_COLOR = "#ef4444"
PREVIEW_COLOR = "#f59e0b"
LABEL_TEXT_COLOR = "#ffffff"
PLACEHOLDER_COLOR = "#f3f4f6"
PLACEHOLDER_TEXT_COLOR = "#6b7280"

FILL_ALPHA = 0x20
UNVERIFIED_OPACITY = 0.7
LINE_WIDTH = 2
SELECTED_LINE_WIDTH = 3
LABEL_HEIGHT = 20
LABEL_PADDING = 4
DASH_LENGTH = 5


def _rgba(hex_color: str, alpha: int = 255) -> Tuple[int, int, int, int]:
    hex_color = hex_color.lstrip("#")
    r, g, b = (int(hex_color[i:i + 2], 16) for i in (0, 2, 4))
    return (r, g, b, alpha)


def box_color(box: BoundingBox) -> str:
    """Provenance color: blue for AI boxes, green for manual ones"""
    return AI_COLOR if box.is_ai_generated else MANUAL_COLOR


def label_text(box: BoundingBox) -> str:
    """Label chip text, e.g. 'laptop (80%)'"""
    if box.confidence is not None:
        return f"{box.category} ({box.confidence * 100:.0f}%)"
    return box.category


def visible_annotations(boxes: Iterable[BoundingBox], show_ai: bool) -> List[BoundingBox]:
    """Boxes that take part in the render pass"""
    return [b for b in boxes if show_ai or not b.is_ai_generated]


def _draw_dashed_rectangle(draw: ImageDraw.ImageDraw, rect, color, width: int) -> None:
    x0, y0, x1, y1 = rect
    edges = [
        ((x0, y0), (x1, y0)),
        ((x1, y0), (x1, y1)),
        ((x1, y1), (x0, y1)),
        ((x0, y1), (x0, y0)),
    ]
    for (sx, sy), (ex, ey) in edges:
        length = max(abs(ex - sx), abs(ey - sy))
        if length == 0:
            continue
        dx = (ex - sx) / length
        dy = (ey - sy) / length
        pos = 0.0
        while pos < length:
            end = min(pos + DASH_LENGTH, length)
            draw.line(
                [(sx + dx * pos, sy + dy * pos), (sx + dx * end, sy + dy * end)],
                fill=color,
                width=width,
            )
            pos += DASH_LENGTH * 2


def _draw_box(
    draw: ImageDraw.ImageDraw,
    font,
    box: BoundingBox,
    canvas_size: Tuple[int, int],
    selected: bool,
) -> None:
    x0, y0, x1, y1 = box_to_pixel_rect(box, *canvas_size)
    x0, x1 = sorted((x0, x1))
    y0, y1 = sorted((y0, y1))
    color = box_color(box)
    opacity = 1.0 if box.verified else UNVERIFIED_OPACITY

    outline = _rgba(SELECTED_COLOR if selected else color, int(255 * opacity))
    fill = _rgba(color, int(FILL_ALPHA * opacity))
    line_width = SELECTED_LINE_WIDTH if selected else LINE_WIDTH
    draw.rectangle([x0, y0, x1, y1], fill=fill, outline=outline, width=line_width)

    # Label chip above the top-left corner
    text = label_text(box)
    text_width = draw.textlength(text, font=font)
    draw.rectangle(
        [x0, y0 - LABEL_HEIGHT, x0 + text_width + LABEL_PADDING * 2, y0],
        fill=_rgba(color, int(255 * opacity)),
    )
    draw.text(
        (x0 + LABEL_PADDING, y0 - LABEL_HEIGHT + LABEL_PADDING),
        text,
        fill=_rgba(LABEL_TEXT_COLOR, int(255 * opacity)),
        font=font,
    )


def draw_frame(
    background: Image.Image,
    canvas_size: Tuple[int, int],
    boxes: Iterable[BoundingBox],
    selected_id: Optional[str] = None,
    show_ai: bool = True,
    preview: Optional[Tuple[float, float, float, float]] = None,
) -> Image.Image:
    """
    Render one canvas frame

    Args:
        background: Source image (any size, resized to the canvas)
        canvas_size: (width, height) of the canvas in pixels
        boxes: Boxes in z-order
        selected_id: ID of the selected box, drawn with the selection color
        show_ai: If False, AI-generated boxes are left out
        preview: (left, top, width, height) pixel rectangle of the box being drawn

    Returns:
        RGB image of size canvas_size
    """
    frame = background.convert("RGBA").resize(canvas_size)
    overlay = Image.new("RGBA", canvas_size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    font = ImageFont.load_default()

    for box in visible_annotations(boxes, show_ai):
        _draw_box(draw, font, box, canvas_size, selected=box.id == selected_id)

    if preview is not None:
        left, top, width, height = preview
        _draw_dashed_rectangle(
            draw,
            (left, top, left + width, top + height),
            _rgba(PREVIEW_COLOR),
            LINE_WIDTH,
        )

    return Image.alpha_composite(frame, overlay).convert("RGB")


def draw_placeholder(
    canvas_size: Tuple[int, int], message: str = "Image unavailable"
) -> Image.Image:
    """Empty-state frame shown when the task image could not be loaded"""
    frame = Image.new("RGB", canvas_size, PLACEHOLDER_COLOR)
    draw = ImageDraw.Draw(frame)
    font = ImageFont.load_default()
    text_width = draw.textlength(message, font=font)
    draw.text(
        ((canvas_size[0] - text_width) / 2, canvas_size[1] / 2),
        message,
        fill=PLACEHOLDER_TEXT_COLOR,
        font=font,
    )
    return frame
