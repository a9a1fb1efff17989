"""
Application state management for the E-Waste Annotation Studio

Contains dataclasses for session state that persists across Streamlit reruns.
"""
from dataclasses import dataclass, field
from typing import List, Optional

import ewaste_studio.config as config
from ewaste_studio.services.annotation import (
    AnnotationEditor,
    EditorLock,
    TaskNavigator,
)


@dataclass
class AnnotationState:
    """Application state for the annotation page"""
    dataset_id: Optional[str] = None
    navigator: Optional[TaskNavigator] = None
    editor: Optional[AnnotationEditor] = None
    editor_task_id: Optional[str] = None  # task the mounted editor belongs to
    editor_lock: EditorLock = field(default_factory=EditorLock)
    last_event_id: Optional[str] = None  # last canvas event batch processed
    categories: List[str] = field(default_factory=config.get_categories)

    def release_editor(self) -> None:
        """Unmount the current editor, if any"""
        if self.editor is not None:
            self.editor.unmount()
        self.editor = None
        self.editor_task_id = None
        self.last_event_id = None


def init_session_state():
    """Initialize session state if not already done"""
    import streamlit as st

    if "annotation_state" not in st.session_state:
        st.session_state.annotation_state = AnnotationState()
