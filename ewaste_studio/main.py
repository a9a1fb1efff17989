"""
E-Waste Annotation Studio - bounding-box labeling for detection training data

Main application entry point.
"""
import streamlit as st

import ewaste_studio.config as config
from ewaste_studio.state import init_session_state
from ewaste_studio.utils import setup_logging
from ewaste_studio.backend.pages.annotate import render_annotation_page


def main():
    """Main application entry point"""
    # Page config
    st.set_page_config(
        page_title="Annotation Studio",
        layout="wide",
    )

    setup_logging("ewaste_studio", level=config.LOG_LEVEL)

    # Initialize session state
    init_session_state()

    st.sidebar.title("Annotation Studio")
    st.sidebar.divider()

    render_annotation_page()


if __name__ == "__main__":
    main()
