"""
Weatherscape: cached AI-generated city weather backgrounds.
"""

__version__ = "0.1.0"
