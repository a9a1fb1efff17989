"""
E-Waste Annotation Studio

Run with: streamlit run app.py
"""
from ewaste_studio.main import main

main()
