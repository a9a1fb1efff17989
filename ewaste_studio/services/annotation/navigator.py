"""
Annotation Task Navigator

Walks through a dataset's annotation tasks, seeding the AnnotationStore
from the current task and writing it back through the gateway on save,
complete and navigate-away.
"""
import logging
import threading
from typing import List, Optional

from .gateway import AnnotationGateway, GatewayError
from .models import (
    AnnotationTask,
    TaskStatus,
    canvas_to_wire,
    wire_to_canvas,
)
from .store import AnnotationStore

logger = logging.getLogger(__name__)


def compute_status(mark_completed: bool, annotation_count: int) -> TaskStatus:
    """
    Status written on save

    Args:
        mark_completed: Whether the user completed the task
        annotation_count: Number of boxes being saved

    Returns:
        COMPLETED if marked, else IN_PROGRESS with boxes, else PENDING
    """
    if mark_completed:
        return TaskStatus.COMPLETED
    if annotation_count > 0:
        return TaskStatus.IN_PROGRESS
    return TaskStatus.PENDING


class TaskNavigator:
    """
    Session-level owner of the task list, current index and working copy

    Gateway failures never escape: a failed list fetch sets ``load_error``,
    a failed save sets ``save_error`` and keeps the user's edits.

    Attributes:
        gateway: REST client
        dataset_id: Dataset being annotated
        store: Working copy of the current task
        tasks: Ordered task list from the last refresh
        load_error: Message of the last failed refresh, or None
        save_error: Message of the last failed save, or None
        assign_error: Message of the last failed assignment, or None
    """

    def __init__(
        self,
        gateway: AnnotationGateway,
        dataset_id: str,
        store: Optional[AnnotationStore] = None,
    ):
        self.gateway = gateway
        self.dataset_id = dataset_id
        self.store = store if store is not None else AnnotationStore()
        self.tasks: List[AnnotationTask] = []
        self.load_error: Optional[str] = None
        self.save_error: Optional[str] = None
        self.assign_error: Optional[str] = None
        self._loaded_task_id: Optional[str] = None
        self._index = 0
        self._save_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Task list
    # ------------------------------------------------------------------

    def refresh(self) -> bool:
        """
        Fetch the task list from the gateway

        Unsaved edits are saved first. The open task is followed by id; if it
        is gone from the new list the index is clamped and the task now at
        that index is loaded, so the working copy always belongs to
        ``current_task``.

        Returns:
            True on success; on failure the list is emptied and load_error set
        """
        if self.current_task is not None and self.store.is_dirty():
            self.save()

        try:
            tasks = self.gateway.list_tasks(self.dataset_id)
        except GatewayError as e:
            logger.error(f"Failed to fetch annotation tasks for dataset {self.dataset_id}: {e}")
            self.tasks = []
            self.load_error = str(e)
            return False

        self.tasks = tasks
        self.load_error = None
        logger.info(f"Loaded {len(tasks)} annotation tasks for dataset {self.dataset_id}")

        if not tasks:
            self._index = 0
            self._loaded_task_id = None
            self.store.load([], "")
            return True

        task_ids = [t.id for t in tasks]
        if self._loaded_task_id in task_ids:
            self._index = task_ids.index(self._loaded_task_id)
        else:
            self._index = min(max(self._index, 0), len(tasks) - 1)

        if tasks[self._index].id != self._loaded_task_id:
            failed_save = self.save_error
            self.load_task(self._index)
            self.save_error = failed_save
        return True

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_task(self) -> Optional[AnnotationTask]:
        if 0 <= self._index < len(self.tasks):
            return self.tasks[self._index]
        return None

    @property
    def is_first(self) -> bool:
        return self._index == 0

    @property
    def is_last(self) -> bool:
        return self._index >= len(self.tasks) - 1

    @property
    def completed_count(self) -> int:
        return sum(1 for t in self.tasks if t.status == TaskStatus.COMPLETED)

    @property
    def progress(self) -> float:
        """Percentage of tasks in the list that are completed"""
        if not self.tasks:
            return 0.0
        return self.completed_count / len(self.tasks) * 100

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    def load_task(self, index: int) -> AnnotationTask:
        """
        Open the task at index and seed the store from it

        Raises:
            IndexError: If index is outside the task list
        """
        if not 0 <= index < len(self.tasks):
            raise IndexError(f"Task index {index} out of range (0..{len(self.tasks) - 1})")

        task = self.tasks[index]
        self._index = index
        self._loaded_task_id = task.id
        self.store.load([wire_to_canvas(a) for a in task.annotations], task.notes)
        self.save_error = None
        self.assign_error = None
        logger.debug(f"Opened task {task.id} ({len(task.annotations)} annotations)")
        return task

    def save(self, mark_completed: bool = False) -> bool:
        """
        Persist the working copy of the current task

        Saves are serialized: a second call waits for the one in flight.

        Args:
            mark_completed: Write status COMPLETED instead of the computed one

        Returns:
            True if the gateway accepted the update
        """
        with self._save_lock:
            task = self.current_task
            if task is None:
                return False

            snapshot = self.store.snapshot()
            annotations, notes = snapshot
            status = compute_status(mark_completed, len(annotations))
            wire = [canvas_to_wire(box) for box in annotations]

            try:
                updated = self.gateway.update_task(task.id, wire, status, notes)
            except GatewayError as e:
                logger.warning(f"Failed to save task {task.id}: {e}")
                self.save_error = str(e)
                return False

            # Only what was sent becomes the baseline
            self.store.mark_saved(snapshot)
            self.tasks[self._index] = updated
            self.save_error = None
            logger.info(f"Saved task {task.id} as {status.value} ({len(wire)} annotations)")
            return True

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def go_to(self, index: int) -> bool:
        """
        Move to another task, saving unsaved edits first

        A failed save is reported through save_error but does not block
        the move. The index is clamped to the list; no wraparound.

        Returns:
            True if the current task changed
        """
        if self.store.is_dirty():
            self.save()

        if not self.tasks:
            return False

        target = min(max(index, 0), len(self.tasks) - 1)
        if target == self._index:
            return False

        failed_save = self.save_error
        self.load_task(target)
        # Keep reporting a save failure from the task we just left
        self.save_error = failed_save
        logger.info(f"Moved to task {target + 1} of {len(self.tasks)}")
        return True

    def next(self) -> bool:
        return self.go_to(self._index + 1)

    def previous(self) -> bool:
        return self.go_to(self._index - 1)

    def complete(self) -> bool:
        """
        Save the current task as completed and move on to the next one

        Returns:
            True if the save succeeded
        """
        if not self.save(mark_completed=True):
            return False
        if not self.is_last:
            self.next()
        return True

    def assign_current(self) -> bool:
        """Assign the current task to the calling user"""
        task = self.current_task
        if task is None:
            return False
        try:
            updated = self.gateway.assign_task(task.id)
        except GatewayError as e:
            logger.warning(f"Failed to assign task {task.id}: {e}")
            self.assign_error = str(e)
            return False
        self.tasks[self._index] = updated
        self.assign_error = None
        return True
