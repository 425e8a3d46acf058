"""
Drag-to-select engine for day-by-time schedule grids.
"""

__version__ = "0.1.0"
