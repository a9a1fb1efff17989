"""
Shared pytest fixtures for backend page tests
"""
import pytest
from unittest.mock import MagicMock, Mock

from ewaste_studio.state import AnnotationState
from ewaste_studio.services.annotation import AnnotationEditor, TaskNavigator


# Number of extra columns beyond expected count
EXTRA_COLUMN_BUFFER = 5


@pytest.fixture
def mock_streamlit():
    """Mock Streamlit module for UI testing."""
    mock_st = MagicMock()

    # Mock sidebar
    mock_st.sidebar = MagicMock()
    mock_st.sidebar.header = MagicMock()
    mock_st.sidebar.subheader = MagicMock()
    mock_st.sidebar.selectbox = MagicMock(return_value=None)
    mock_st.sidebar.info = MagicMock()
    mock_st.sidebar.divider = MagicMock()
    mock_st.sidebar.markdown = MagicMock()
    mock_st.sidebar.caption = MagicMock()
    mock_st.sidebar.progress = MagicMock()
    mock_st.sidebar.button = MagicMock(return_value=False)
    mock_st.sidebar.text_input = MagicMock(return_value="")

    # Mock main UI elements
    mock_st.info = MagicMock()
    mock_st.success = MagicMock()
    mock_st.error = MagicMock()
    mock_st.warning = MagicMock()
    mock_st.button = MagicMock(return_value=False)
    mock_st.toggle = MagicMock(return_value=True)
    mock_st.selectbox = MagicMock(return_value=None)
    mock_st.columns = MagicMock(side_effect=lambda spec: [MagicMock() for _ in range(
        spec if isinstance(spec, int) else len(spec)
    )])
    mock_st.divider = MagicMock()
    mock_st.subheader = MagicMock()
    mock_st.caption = MagicMock()
    mock_st.metric = MagicMock()
    mock_st.markdown = MagicMock()
    mock_st.text_area = MagicMock(return_value=None)
    mock_st.rerun = MagicMock()

    # Mock session state
    mock_st.session_state = MagicMock()

    return mock_st


@pytest.fixture
def mock_streamlit_columns():
    """
    Factory fixture that creates column mocks with extra columns beyond expected.

    Usage:
        columns = mock_streamlit_columns(5)  # Creates 5 + EXTRA_COLUMN_BUFFER columns
    """
    def _create_columns(expected_count):
        cols = []
        for _ in range(expected_count + EXTRA_COLUMN_BUFFER):
            col = MagicMock()
            col.__enter__ = Mock(return_value=col)
            col.__exit__ = Mock(return_value=None)
            cols.append(col)
        return cols
    return _create_columns


@pytest.fixture
def annotation_state_empty(categories):
    """Create AnnotationState with no dataset open."""
    return AnnotationState(categories=categories)


@pytest.fixture
def annotation_state_with_tasks(mock_gateway, categories, sample_image):
    """Create AnnotationState with the sample tasks and a mounted editor."""
    state = AnnotationState(categories=categories)
    navigator = TaskNavigator(mock_gateway, "ds_1")
    navigator.refresh()
    navigator.load_task(0)

    editor = AnnotationEditor(
        navigator.store, categories, min_box_size=10, max_canvas_size=(800, 600)
    )
    editor.mount(state.editor_lock, owner="task_1")
    editor.set_image(sample_image)

    state.dataset_id = "ds_1"
    state.navigator = navigator
    state.editor = editor
    state.editor_task_id = "task_1"
    return state


@pytest.fixture
def annotation_state_load_error(mock_gateway, categories):
    """Create AnnotationState whose task list failed to load."""
    from ewaste_studio.services.annotation import GatewayError

    mock_gateway.list_tasks.side_effect = GatewayError("Service unavailable", status=503)
    state = AnnotationState(categories=categories)
    state.navigator = TaskNavigator(mock_gateway, "ds_1")
    state.navigator.refresh()
    state.dataset_id = "ds_1"
    return state
