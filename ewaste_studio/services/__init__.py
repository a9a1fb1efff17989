"""
Services used by the Streamlit pages
"""
