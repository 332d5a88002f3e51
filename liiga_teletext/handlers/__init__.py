# liiga_teletext/handlers/__init__.py
"""
Orchestration: page building, refresh scheduling and the run modes.
"""
from .interactive import InteractiveController
from .once import run_once
from .page_builder import PageBuilder

__all__ = ["InteractiveController", "PageBuilder", "run_once"]
