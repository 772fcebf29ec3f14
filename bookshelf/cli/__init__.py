"""
Command-line surface for the book catalog.
"""
