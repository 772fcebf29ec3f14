"""
Textual terminal UI for the book catalog.
"""
