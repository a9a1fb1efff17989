"""
Fixtures for annotation service tests
"""
import pytest

from ewaste_studio.services.annotation import (
    AnnotationEditor,
    BBoxCoords,
    WireAnnotation,
)


@pytest.fixture
def editor(store, categories, sample_image):
    """Editor on an 800x600 canvas with the default 10px minimum"""
    editor = AnnotationEditor(
        store,
        categories,
        min_box_size=10,
        max_canvas_size=(800, 600),
    )
    editor.set_image(sample_image)
    return editor


@pytest.fixture
def wire_annotation():
    """WireAnnotation object for a manual box"""
    return WireAnnotation(
        id="manual_9",
        category="tablet",
        bbox=BBoxCoords(x=1.5, y=2.5, width=3.5, height=4.5),
        is_ai_generated=False,
        verified=True,
    )
