"""
Annotation Page - Label e-waste objects for detection training

Features:
- Open a dataset's annotation tasks from the platform API
- Task navigation with save-before-leave
- Interactive canvas for drawing and selecting bounding boxes
- Category editing and verification of AI-generated boxes
- Notes, save progress and complete task
- Progress tracking across the dataset
"""
import logging

import streamlit as st

import ewaste_studio.config as config
from ewaste_studio.state import AnnotationState
from ewaste_studio.services.annotation import (
    AnnotationEditor,
    AnnotationGateway,
    EditorBusyError,
    GatewayError,
    TaskNavigator,
    bbox_canvas,
    parse_canvas_events,
)

logger = logging.getLogger(__name__)


def get_annotation_state() -> AnnotationState:
    """Get annotation state from session state"""
    return st.session_state.annotation_state


def get_gateway() -> AnnotationGateway:
    """Get the session's API client, creating it on first use"""
    if "annotation_gateway" not in st.session_state:
        st.session_state.annotation_gateway = AnnotationGateway(
            config.API_BASE_URL,
            token=config.API_TOKEN,
        )
    return st.session_state.annotation_gateway


def open_dataset(gateway: AnnotationGateway, state: AnnotationState, dataset_id: str) -> TaskNavigator:
    """Start a navigator for a dataset and open its first task"""
    state.release_editor()
    navigator = TaskNavigator(gateway, dataset_id)
    navigator.refresh()

    state.dataset_id = dataset_id
    state.navigator = navigator
    return navigator


def ensure_editor(gateway: AnnotationGateway, state: AnnotationState) -> AnnotationEditor:
    """
    Return the editor for the current task, mounting a new one after navigation

    The previous editor is unmounted first so the editor lock is free.
    Tool settings (category, AI visibility) carry over between tasks.
    """
    navigator = state.navigator
    task = navigator.current_task

    if state.editor is not None and state.editor_task_id == task.id:
        return state.editor

    previous = state.editor
    state.release_editor()

    editor = AnnotationEditor(navigator.store, state.categories)
    if previous is not None:
        editor.current_category = previous.current_category
        editor.show_ai = previous.show_ai

    try:
        editor.mount(state.editor_lock, owner=task.id)
    except EditorBusyError as e:
        logger.warning(f"Opening task {task.id} read-only: {e}")
        editor.read_only = True

    try:
        image_url = gateway.get_proxied_image_url(task.image_url)
        editor.set_image(gateway.fetch_image(image_url))
    except GatewayError as e:
        editor.set_image_error(str(e))

    state.editor = editor
    state.editor_task_id = task.id
    state.last_event_id = None
    return editor


def render_dataset_sidebar(gateway: AnnotationGateway, state: AnnotationState):
    """Render dataset selection and progress in sidebar"""
    st.sidebar.header("Dataset")

    dataset_id = st.sidebar.text_input(
        "Dataset ID",
        value=state.dataset_id or "",
        key="dataset_id_input",
    )
    if st.sidebar.button("Open Dataset", disabled=not dataset_id, key="open_dataset"):
        open_dataset(gateway, state, dataset_id)
        st.rerun()

    navigator = state.navigator
    if not navigator or not navigator.tasks:
        return

    task = navigator.current_task
    st.sidebar.divider()
    st.sidebar.markdown(f"**Task {navigator.current_index + 1} of {len(navigator.tasks)}**")
    st.sidebar.caption(f"{navigator.completed_count} completed")
    st.sidebar.progress(navigator.progress / 100)
    st.sidebar.caption(f"{navigator.progress:.1f}% complete")
    if task is not None:
        st.sidebar.caption(f"Status: {task.status.value}")


def render_load_error(state: AnnotationState) -> bool:
    """
    Render the blocking task-list error with a retry action

    Returns:
        True if an error is shown (the rest of the page is skipped)
    """
    navigator = state.navigator
    if not navigator or not navigator.load_error:
        return False

    st.error(f"Failed to load annotation tasks. Error: {navigator.load_error}")
    if st.button("Try Again", key="retry_tasks"):
        state.release_editor()
        navigator.refresh()
        st.rerun()
    return True


def render_task_navigation(state: AnnotationState):
    """Render task navigation controls"""
    navigator = state.navigator
    if not navigator or not navigator.tasks:
        return

    num_tasks = len(navigator.tasks)
    moved = False

    col1, col2, col3, col4, col5 = st.columns([1, 1, 2, 1, 1])

    with col1:
        if st.button("First", disabled=navigator.is_first, key="task_first"):
            moved = navigator.go_to(0)

    with col2:
        if st.button("Prev", disabled=navigator.is_first, key="task_prev"):
            moved = navigator.previous()

    with col3:
        st.markdown(
            f"<div style='text-align: center; padding-top: 5px;'><strong>Task {navigator.current_index + 1} of {num_tasks}</strong></div>",
            unsafe_allow_html=True
        )

    with col4:
        if st.button("Next", disabled=navigator.is_last, key="task_next"):
            moved = navigator.next()

    with col5:
        if st.button("Last", disabled=navigator.is_last, key="task_last"):
            moved = navigator.go_to(num_tasks - 1)

    if moved:
        st.rerun()


def render_canvas_toolbar(state: AnnotationState):
    """Render category picker, AI toggle and box counts"""
    editor = state.editor
    store = state.navigator.store

    col1, col2, col3, col4, col5 = st.columns([2, 2, 1, 1, 1])

    with col1:
        category = st.selectbox(
            "Category",
            state.categories,
            index=state.categories.index(editor.current_category)
            if editor.current_category in state.categories else 0,
            key="current_category",
        )
        if category in state.categories and category != editor.current_category:
            editor.current_category = category

    with col2:
        show_ai = st.toggle("AI Annotations", value=editor.show_ai, key="show_ai_toggle")
        if show_ai != editor.show_ai:
            editor.show_ai = show_ai

    with col3:
        st.metric("Manual", store.manual_count)

    with col4:
        st.metric("AI", store.ai_count)

    with col5:
        if editor.selected_id and not editor.read_only:
            if st.button("Delete", type="secondary", key="delete_annotation"):
                editor.delete_selected()
                st.rerun()


def render_annotation_canvas(state: AnnotationState):
    """Render the annotation canvas and apply pointer input"""
    navigator = state.navigator
    editor = state.editor
    task = navigator.current_task

    st.subheader(task.display_name(navigator.current_index))
    if navigator.store.is_dirty():
        st.caption(":orange[Unsaved Changes]")

    if editor.image_error:
        st.warning(f"Image could not be loaded, editing is disabled. ({editor.image_error})")

    result = bbox_canvas(
        editor.render(),
        read_only=editor.read_only or not editor.is_ready,
        key=f"canvas_{task.id}",
    )

    events, event_id = parse_canvas_events(result)

    # Skip if we already processed this batch (prevents infinite loop)
    if event_id and event_id != state.last_event_id:
        state.last_event_id = event_id
        for event in events:
            editor.handle_event(event)
        if events:
            st.rerun()

    if not editor.read_only:
        st.caption("Click and drag to draw bounding boxes. Click on existing boxes to select them.")


def render_annotation_sidebar(state: AnnotationState):
    """Render annotation list and editor in sidebar"""
    editor = state.editor
    store = state.navigator.store

    st.sidebar.divider()
    st.sidebar.header(f"Annotations ({len(store)})")

    if len(store) == 0:
        st.sidebar.info("No annotations yet. Draw boxes on the image to add annotations.")
        return

    # Annotation list
    for box in store.annotations:
        is_selected = box.id == editor.selected_id
        origin = "AI" if box.is_ai_generated else "Manual"
        check = " ✓" if box.verified else ""
        score = f" {box.confidence * 100:.0f}%" if box.confidence is not None else ""

        if st.sidebar.button(
            f"{'> ' if is_selected else ''}[{origin}] {box.category}{score}{check}",
            key=f"annotation_{box.id}",
            use_container_width=True,
        ):
            editor.select(box.id)
            st.rerun()

    # Annotation editor
    if editor.selected_id:
        box = store.get(editor.selected_id)
        if box:
            st.sidebar.divider()
            st.sidebar.subheader("Edit Annotation")

            if not editor.read_only:
                category = st.sidebar.selectbox(
                    "Category",
                    state.categories,
                    index=state.categories.index(box.category)
                    if box.category in state.categories else 0,
                    key=f"category_{box.id}",
                )
                if category in state.categories and category != box.category:
                    store.update_category(box.id, category)
                    st.rerun()

                if not box.verified:
                    if st.sidebar.button("Verify", key=f"verify_{box.id}", use_container_width=True):
                        store.verify(box.id)
                        st.rerun()
            else:
                st.sidebar.markdown(f"**{box.category}**")

            st.sidebar.caption(f"{box.width:.1f}% × {box.height:.1f}%")


def render_task_actions(state: AnnotationState):
    """Render notes, save and complete controls"""
    navigator = state.navigator
    store = navigator.store
    task = navigator.current_task

    notes = st.text_area(
        "Notes",
        value=store.notes,
        placeholder="Optional notes about this annotation task...",
        key=f"notes_{task.id}",
    )
    if isinstance(notes, str) and notes != store.notes:
        store.notes = notes

    col1, col2, col3 = st.columns(3)

    with col1:
        if st.button("Save Progress", disabled=not store.is_dirty(), key="save_task"):
            if navigator.save():
                st.success("Progress saved")
            st.rerun()

    with col2:
        if st.button("Complete Task", type="primary", disabled=len(store) == 0, key="complete_task"):
            navigator.complete()
            st.rerun()

    with col3:
        if st.button("Assign to Me", key="assign_task"):
            navigator.assign_current()
            st.rerun()

    # Save failures are non-blocking; edits stay in memory for a retry
    if navigator.save_error:
        st.warning(f"Could not save task: {navigator.save_error}. Your changes are kept, try saving again.")
    if navigator.assign_error:
        st.warning(f"Could not assign task: {navigator.assign_error}")


def render_task_overview(state: AnnotationState):
    """Render per-task annotation statistics"""
    store = state.navigator.store

    col1, col2, col3 = st.columns(3)

    with col1:
        st.metric("AI Annotations", store.ai_count)

    with col2:
        st.metric("Manual", store.manual_count)

    with col3:
        st.metric("Verified", store.verified_count)


def render_annotation_page():
    """Main annotation page render function"""
    state = get_annotation_state()
    gateway = get_gateway()

    # Sidebar: Dataset selection
    render_dataset_sidebar(gateway, state)

    # Main content
    navigator = state.navigator
    if not navigator:
        st.info("Enter a dataset ID to start annotating.")
        return

    if render_load_error(state):
        return

    if not navigator.tasks:
        st.info(
            "No images to annotate. This dataset doesn't have any images yet; "
            "add detected objects from e-waste scans to the dataset first."
        )
        return

    ensure_editor(gateway, state)

    # Navigation
    render_task_navigation(state)

    st.divider()

    # Toolbar and canvas
    render_canvas_toolbar(state)
    render_annotation_canvas(state)

    st.divider()

    render_task_actions(state)
    render_task_overview(state)

    # Annotation list in sidebar
    render_annotation_sidebar(state)
