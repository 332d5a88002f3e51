"""
Liiga results in the style of teletext page 221.
"""

__version__ = "1.0.0"
