"""
Annotation Data Models

Dataclasses for annotation tasks and the two shapes a bounding box takes:
the flat canvas-native BoundingBox used while editing, and the bbox-nested
WireAnnotation exchanged with the REST API.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Any
import uuid


class TaskStatus(str, Enum):
    """Lifecycle status of an annotation task"""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REVIEWED = "reviewed"
    REJECTED = "rejected"


def new_manual_id() -> str:
    """Generate an id for a hand-drawn box"""
    return f"manual_{uuid.uuid4().hex[:12]}"


@dataclass
class BoundingBox:
    """
    Canvas-native bounding box annotation

    Coordinates are percentages (0-100) of the image width/height, so the
    same box can be projected onto a canvas of any size.

    Attributes:
        id: Unique identifier (server-assigned, or generated for new manual boxes)
        x: Left edge, percent of image width
        y: Top edge, percent of image height
        width: Width, percent of image width
        height: Height, percent of image height
        category: Object class from the category taxonomy
        confidence: Detector confidence in [0, 1], AI-generated boxes only
        is_ai_generated: Whether the box came from an upstream detector
        verified: Whether a human has confirmed (or drawn) the box
    """
    id: str = field(default_factory=new_manual_id)
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    category: str = ""
    confidence: Optional[float] = None
    is_ai_generated: bool = False
    verified: bool = False

    def __post_init__(self):
        # Manual boxes never carry a detector score
        if not self.is_ai_generated:
            self.confidence = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "category": self.category,
            "is_ai_generated": self.is_ai_generated,
            "verified": self.verified,
        }
        if self.confidence is not None:
            data["confidence"] = self.confidence
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoundingBox":
        return cls(
            id=data["id"],
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
            category=data["category"],
            confidence=data.get("confidence"),
            is_ai_generated=data.get("is_ai_generated", False),
            verified=data.get("verified", False),
        )


@dataclass
class BBoxCoords:
    """Nested coordinate block of a wire annotation (percent units)"""
    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> "BBoxCoords":
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )


@dataclass
class WireAnnotation:
    """
    Annotation as persisted by the REST API

    Same fields as BoundingBox, except that the coordinates are nested under
    ``bbox``. Only the gateway and the navigator's load/save boundary see
    this shape.
    """
    id: str
    category: str
    bbox: BBoxCoords
    confidence: Optional[float] = None
    is_ai_generated: bool = False
    verified: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "category": self.category,
            "bbox": self.bbox.to_dict(),
            "is_ai_generated": self.is_ai_generated,
            "verified": self.verified,
        }
        # Absent rather than null, as the API omits it for manual boxes
        if self.confidence is not None:
            data["confidence"] = self.confidence
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WireAnnotation":
        return cls(
            id=data["id"],
            category=data["category"],
            bbox=BBoxCoords.from_dict(data["bbox"]),
            confidence=data.get("confidence"),
            is_ai_generated=data.get("is_ai_generated", False),
            verified=data.get("verified", False),
        )


def wire_to_canvas(annotation: WireAnnotation) -> BoundingBox:
    """Flatten a wire annotation into the canvas-native shape"""
    return BoundingBox(
        id=annotation.id,
        x=annotation.bbox.x,
        y=annotation.bbox.y,
        width=annotation.bbox.width,
        height=annotation.bbox.height,
        category=annotation.category,
        confidence=annotation.confidence,
        is_ai_generated=annotation.is_ai_generated,
        verified=annotation.verified,
    )


def canvas_to_wire(box: BoundingBox) -> WireAnnotation:
    """Nest a canvas-native box's coordinates for the wire"""
    return WireAnnotation(
        id=box.id,
        category=box.category,
        bbox=BBoxCoords(x=box.x, y=box.y, width=box.width, height=box.height),
        confidence=box.confidence,
        is_ai_generated=box.is_ai_generated,
        verified=box.verified,
    )


@dataclass
class AnnotationTask:
    """
    One dataset image awaiting bounding-box labeling

    Attributes:
        id: Task identifier
        dataset_id: Owning dataset
        image_url: Image location (may need proxying, see the gateway)
        status: Lifecycle status
        annotations: Persisted annotations in wire format
        notes: Free-text annotator notes
        original_filename: Uploaded file name, if known
        assigned_to: Annotator user id, if assigned
        completed_at: ISO timestamp of completion, if completed
    """
    id: str
    dataset_id: str
    image_url: str = ""
    status: TaskStatus = TaskStatus.PENDING
    annotations: List[WireAnnotation] = field(default_factory=list)
    notes: str = ""
    original_filename: Optional[str] = None
    assigned_to: Optional[str] = None
    completed_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "dataset_id": self.dataset_id,
            "image_url": self.image_url,
            "status": self.status.value,
            "annotations": [a.to_dict() for a in self.annotations],
            "notes": self.notes,
            "original_filename": self.original_filename,
            "assigned_to": self.assigned_to,
            "completed_at": self.completed_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnnotationTask":
        return cls(
            id=data["id"],
            dataset_id=data.get("dataset_id", ""),
            image_url=data.get("image_url") or "",
            status=TaskStatus(data.get("status") or TaskStatus.PENDING.value),
            annotations=[WireAnnotation.from_dict(a) for a in data.get("annotations") or []],
            notes=data.get("notes") or "",
            original_filename=data.get("original_filename"),
            assigned_to=data.get("assigned_to"),
            completed_at=data.get("completed_at"),
        )

    def display_name(self, index: int) -> str:
        """Title shown above the canvas"""
        return self.original_filename or f"Image {index + 1}"

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED
