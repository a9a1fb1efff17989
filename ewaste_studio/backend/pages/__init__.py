"""
Streamlit pages for the E-Waste Annotation Studio
"""
from .annotate import render_annotation_page

__all__ = ["render_annotation_page"]
