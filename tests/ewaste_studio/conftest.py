"""
Shared pytest fixtures for e-waste studio tests
"""
import pytest
from unittest.mock import MagicMock
from PIL import Image

from ewaste_studio.services.annotation import (
    AnnotationGateway,
    AnnotationStore,
    AnnotationTask,
    BoundingBox,
    TaskStatus,
)


CATEGORIES = ["smartphone", "laptop", "tablet", "monitor"]


@pytest.fixture
def categories():
    """Small category taxonomy"""
    return list(CATEGORIES)


@pytest.fixture
def ai_box():
    """Unverified AI-generated box"""
    return BoundingBox(
        id="ai_1",
        x=10.0,
        y=10.0,
        width=20.0,
        height=20.0,
        category="laptop",
        confidence=0.8,
        is_ai_generated=True,
        verified=False,
    )


@pytest.fixture
def manual_box():
    """Verified hand-drawn box"""
    return BoundingBox(
        id="manual_1",
        x=50.0,
        y=50.0,
        width=25.0,
        height=30.0,
        category="monitor",
        is_ai_generated=False,
        verified=True,
    )


@pytest.fixture
def wire_ai_dict():
    """AI annotation as returned by the API"""
    return {
        "id": "ai_1",
        "category": "laptop",
        "bbox": {"x": 10.0, "y": 10.0, "width": 20.0, "height": 20.0},
        "confidence": 0.8,
        "is_ai_generated": True,
        "verified": False,
    }


@pytest.fixture
def wire_manual_dict():
    """Manual annotation as returned by the API (no confidence)"""
    return {
        "id": "manual_1",
        "category": "monitor",
        "bbox": {"x": 50.0, "y": 50.0, "width": 25.0, "height": 30.0},
        "is_ai_generated": False,
        "verified": True,
    }


@pytest.fixture
def task_dicts(wire_ai_dict, wire_manual_dict):
    """Three tasks as returned by GET /retraining/datasets/{id}/tasks"""
    return [
        {
            "id": "task_1",
            "dataset_id": "ds_1",
            "image_url": "https://storage.googleapis.com/ebs-storage/img1.jpg",
            "original_filename": "img1.jpg",
            "status": "pending",
            "annotations": [wire_ai_dict],
            "notes": None,
        },
        {
            "id": "task_2",
            "dataset_id": "ds_1",
            "image_url": "https://example.com/img2.jpg",
            "status": "completed",
            "annotations": [wire_manual_dict],
            "notes": "blurry",
        },
        {
            "id": "task_3",
            "dataset_id": "ds_1",
            "image_url": "https://example.com/img3.jpg",
            "status": "in_progress",
        },
    ]


@pytest.fixture
def sample_tasks(task_dicts):
    """AnnotationTask objects for the three sample tasks"""
    return [AnnotationTask.from_dict(d) for d in task_dicts]


def _echo_update(task_id, annotations, status, notes=""):
    """Fake update_task: the server returns what was sent"""
    return AnnotationTask(
        id=task_id,
        dataset_id="ds_1",
        status=TaskStatus(status),
        annotations=list(annotations),
        notes=notes,
    )


@pytest.fixture
def mock_gateway(sample_tasks):
    """Gateway mock serving the sample tasks and echoing updates"""
    gateway = MagicMock(spec=AnnotationGateway)
    gateway.list_tasks.return_value = sample_tasks
    gateway.update_task.side_effect = _echo_update
    gateway.assign_task.side_effect = lambda task_id: AnnotationTask(
        id=task_id, dataset_id="ds_1", assigned_to="user_1"
    )
    return gateway


@pytest.fixture
def store():
    """Empty annotation store"""
    return AnnotationStore()


@pytest.fixture
def sample_image():
    """800x600 white image (fits the default canvas exactly)"""
    return Image.new("RGB", (800, 600), color="white")
