"""
Adapters layer - Translation of device input into gesture events.
"""

from .input_normalizer import (
    CellLookup,
    GestureSinkProtocol,
    PointerInput,
    PointProbe,
    TouchInput,
)

__all__ = ["CellLookup", "GestureSinkProtocol", "PointerInput", "PointProbe", "TouchInput"]
