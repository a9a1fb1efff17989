"""
E-Waste Annotation Studio Package

Contains the Streamlit application organized into:
- config.py: Environment-driven settings
- state.py: Session state management
- main.py: Main entry point
- backend/pages/: Page modules
- services/annotation/: Models, editor, navigator and REST gateway
"""
__version__ = "0.1.0"
