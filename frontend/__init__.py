"""
Streamlit frontend helpers for SheetLoader.
"""
