"""
Page rendering for the Streamlit application
"""
