# liiga_teletext/teletext/__init__.py
"""
Teletext display engine exports.
"""
from .abbreviations import get_team_abbreviation
from .layout import Layout, calculate_layout
from .page import TeletextPage

__all__ = ["Layout", "TeletextPage", "calculate_layout", "get_team_abbreviation"]
