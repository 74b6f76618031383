"""
CircleFit Core Package
Core functionality for checking and laying out circles inside a rectangular tray.
"""

from .circle_record import CircleRecord, CircleGroup, Side
from .packer import CircleFitPacker, TraySpec, LayoutPolicy, CheckRequest, ValidationError
from .parser import InputMode, build_request, parse_groups
from .renderer import CircleFitRenderer

__all__ = [
    'CircleRecord',
    'CircleGroup',
    'Side',
    'CircleFitPacker',
    'TraySpec',
    'LayoutPolicy',
    'CheckRequest',
    'ValidationError',
    'InputMode',
    'build_request',
    'parse_groups',
    'CircleFitRenderer'
]
