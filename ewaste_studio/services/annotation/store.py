"""
Annotation Store

In-memory working copy of the open task's bounding boxes and notes, with
change tracking against the last loaded/saved snapshot.
"""
import copy
import logging
from typing import List, Optional, Tuple

from .models import BoundingBox, new_manual_id

logger = logging.getLogger(__name__)


class AnnotationStore:
    """
    Ordered collection of canvas-native boxes for the current task

    The dirty flag compares the current state with a snapshot instead of
    counting mutations, so edits that cancel out (or moving away and back)
    do not report unsaved changes.

    Operations that name a missing box id are no-ops: the box was most
    likely deleted by a previous action.
    """

    def __init__(self):
        self._annotations: List[BoundingBox] = []
        self._notes: str = ""
        self._saved_annotations: List[BoundingBox] = []
        self._saved_notes: str = ""

    def load(self, annotations: List[BoundingBox], notes: str = "") -> None:
        """
        Replace the working state and reset the baseline

        Args:
            annotations: Boxes for the task being opened
            notes: Free-text notes for the task
        """
        self._annotations = copy.deepcopy(list(annotations))
        self._notes = notes or ""
        self.mark_saved()

    def snapshot(self) -> Tuple[List[BoundingBox], str]:
        """Deep copy of the current (annotations, notes)"""
        return copy.deepcopy(self._annotations), self._notes

    def mark_saved(self, snapshot: Optional[Tuple[List[BoundingBox], str]] = None) -> None:
        """
        Make a state the new clean baseline

        Args:
            snapshot: (annotations, notes) that were persisted; defaults to
                the current state
        """
        if snapshot is None:
            snapshot = self.snapshot()
        annotations, notes = snapshot
        self._saved_annotations = copy.deepcopy(annotations)
        self._saved_notes = notes

    def is_dirty(self) -> bool:
        """True if annotations or notes differ from the baseline"""
        return (
            self._annotations != self._saved_annotations
            or self._notes != self._saved_notes
        )

    @property
    def annotations(self) -> List[BoundingBox]:
        """Current boxes in z-order (copy of the list, boxes are shared)"""
        return list(self._annotations)

    @property
    def notes(self) -> str:
        return self._notes

    @notes.setter
    def notes(self, value: str) -> None:
        self._notes = value or ""

    def __len__(self) -> int:
        return len(self._annotations)

    def get(self, annotation_id: str) -> Optional[BoundingBox]:
        """Get a box by ID"""
        for box in self._annotations:
            if box.id == annotation_id:
                return box
        return None

    def add(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        category: str,
    ) -> BoundingBox:
        """
        Append a hand-drawn box

        Args:
            x, y, width, height: Box geometry in percent units
            category: Object class

        Returns:
            The new BoundingBox (manual and verified)
        """
        box = BoundingBox(
            id=new_manual_id(),
            x=x,
            y=y,
            width=width,
            height=height,
            category=category,
            is_ai_generated=False,
            verified=True,
        )
        self._annotations.append(box)
        logger.debug(f"Added box {box.id} ({category})")
        return box

    def update_category(self, annotation_id: str, category: str) -> None:
        """Relabel a box; relabeling counts as verifying it"""
        box = self.get(annotation_id)
        if box is None:
            logger.debug(f"update_category: no box with id {annotation_id}")
            return
        box.category = category
        box.verified = True

    def verify(self, annotation_id: str) -> None:
        """Mark a box as confirmed without changing its category"""
        box = self.get(annotation_id)
        if box is None:
            logger.debug(f"verify: no box with id {annotation_id}")
            return
        box.verified = True

    def remove(self, annotation_id: str) -> None:
        """Delete a box by ID"""
        remaining = [b for b in self._annotations if b.id != annotation_id]
        if len(remaining) == len(self._annotations):
            logger.debug(f"remove: no box with id {annotation_id}")
        self._annotations = remaining

    @property
    def ai_count(self) -> int:
        return sum(1 for b in self._annotations if b.is_ai_generated)

    @property
    def manual_count(self) -> int:
        return sum(1 for b in self._annotations if not b.is_ai_generated)

    @property
    def verified_count(self) -> int:
        return sum(1 for b in self._annotations if b.verified)
