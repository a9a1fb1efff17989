"""
Annotation Service

Provides data models, editing state, rendering and the REST gateway for
labeling e-waste objects with bounding boxes.

Usage:
    from ewaste_studio.services.annotation import (
        AnnotationGateway, TaskNavigator, AnnotationEditor, EditorLock,
    )

    # Open a dataset's tasks
    gateway = AnnotationGateway("http://localhost:8080/api/v1")
    navigator = TaskNavigator(gateway, dataset_id="ds_123")
    if navigator.refresh():
        navigator.load_task(0)

    # Edit the current task
    editor = AnnotationEditor(navigator.store, categories=["laptop", "monitor"])
    editor.mount(EditorLock(), owner="task_1")
    editor.set_image(gateway.fetch_image(gateway.get_proxied_image_url(task.image_url)))
    editor.pointer_down(50, 50)
    editor.pointer_move(150, 150)
    editor.pointer_up()
    frame = editor.render()  # PIL Image

    # Persist and move on
    navigator.next()  # saves first if there are unsaved changes
    navigator.complete()

    # Use bounding-box canvas (in Streamlit app)
    from ewaste_studio.services.annotation import bbox_canvas
    result = bbox_canvas(frame, key="canvas")
"""
from .models import (
    TaskStatus,
    BoundingBox,
    BBoxCoords,
    WireAnnotation,
    AnnotationTask,
    wire_to_canvas,
    canvas_to_wire,
)
from .store import AnnotationStore
from .editor import AnnotationEditor, EditorLock, EditorHandle, EditorBusyError, GestureState
from .gateway import AnnotationGateway, GatewayError
from .navigator import TaskNavigator, compute_status

# Lazy imports for Streamlit components (avoid loading Streamlit in non-UI contexts)
_canvas_module = None


def __getattr__(name):
    """Lazy load Streamlit canvas components."""
    global _canvas_module
    if name in ("bbox_canvas", "parse_canvas_events"):
        if _canvas_module is None:
            from . import canvas as _canvas_module
        return getattr(_canvas_module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "TaskStatus",
    "BoundingBox",
    "BBoxCoords",
    "WireAnnotation",
    "AnnotationTask",
    "wire_to_canvas",
    "canvas_to_wire",
    "AnnotationStore",
    "AnnotationEditor",
    "EditorLock",
    "EditorHandle",
    "EditorBusyError",
    "GestureState",
    "AnnotationGateway",
    "GatewayError",
    "TaskNavigator",
    "compute_status",
    "bbox_canvas",
    "parse_canvas_events",
]
