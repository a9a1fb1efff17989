"""
Bounding-box Canvas - Streamlit component bridge

Shows the editor's rendered frame and returns the pointer events the user
produced on it. All editing logic stays in AnnotationEditor; the frontend
only reports pointer positions in canvas pixels.
"""
import os
import base64
from io import BytesIO
from typing import Any, Dict, List, Optional, Tuple

import streamlit.components.v1 as components
from PIL import Image

import ewaste_studio.config as config

POINTER_EVENT_TYPES = ("down", "move", "up", "leave")

# Frontend shipped inside the package (static index.html, no build step)
COMPONENT_DIR = os.path.normpath(
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "..", "frontend", "bbox_canvas")
)

# Declare the custom component
if config.ANNOTATION_CANVAS_DEV_URL:
    _bbox_canvas = components.declare_component(
        "bbox_canvas",
        url=config.ANNOTATION_CANVAS_DEV_URL,
    )
else:
    _bbox_canvas = components.declare_component(
        "bbox_canvas",
        path=COMPONENT_DIR
    )


def image_to_base64(image: Image.Image) -> str:
    """
    Convert PIL Image to base64 string

    Args:
        image: PIL Image object

    Returns:
        Base64-encoded data URL string
    """
    buffered = BytesIO()
    image.save(buffered, format="PNG")
    img_str = base64.b64encode(buffered.getvalue()).decode()
    return f"data:image/png;base64,{img_str}"


def bbox_canvas(
    frame: Image.Image,
    read_only: bool = False,
    key: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    Display the annotation canvas and collect pointer input

    Args:
        frame: Rendered canvas frame (its size is the canvas size)
        read_only: Show the default cursor and report no events
        key: Streamlit component key

    Returns:
        Dict with:
        - events: List of {"type", "x", "y"} pointer events in canvas pixels
        - eventId: Identifier of this batch of events (None if nothing happened)
    """
    width, height = frame.size

    component_value = _bbox_canvas(
        imageUrl=image_to_base64(frame),
        width=width,
        height=height,
        readOnly=read_only,
        key=key,
        default={"events": [], "eventId": None},
    )

    return component_value


def parse_canvas_events(result: Optional[Dict[str, Any]]) -> Tuple[List[Dict[str, Any]], Optional[str]]:
    """
    Parse the result from bbox_canvas component

    Malformed events are dropped.

    Args:
        result: Raw result dict from component

    Returns:
        Tuple of (events: List[dict], event_id: str | None)
    """
    if result is None:
        return [], None

    events = []
    for event in result.get("events") or []:
        event_type = event.get("type")
        if event_type not in POINTER_EVENT_TYPES:
            continue
        if event_type == "leave":
            events.append({"type": "leave", "x": None, "y": None})
            continue
        try:
            events.append({
                "type": event_type,
                "x": float(event["x"]),
                "y": float(event["y"]),
            })
        except (KeyError, TypeError, ValueError):
            continue

    return events, result.get("eventId")
