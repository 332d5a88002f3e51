# liiga_teletext/services/__init__.py
"""
Services package exports.
"""
from .games_service import GamesService
from .season_countdown import SeasonCountdownService

__all__ = ["GamesService", "SeasonCountdownService"]
