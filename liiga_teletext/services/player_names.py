# liiga_teletext/services/player_names.py
"""
Scorer display names.

Teletext shows only last names. When two players on the same team share a last name,
first-name letters are appended until the names differ: "Koivu M.", then "Koivu Mi.",
then "Koivu Mik.".
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

MAX_FIRST_NAME_CHARS = 3


def format_for_display(name: str) -> str:
    """Last word of the name, capitalized: 'MIKKO KOIVU' -> 'Koivu'."""
    parts = (name or "").split()
    if not parts:
        return ""
    last = parts[-1]
    return last[:1].upper() + last[1:].lower()


def fallback_name(player_id: int) -> str:
    return f"Pelaaja {player_id}"


def first_name_prefix(first_name: str, length: int) -> Optional[str]:
    """
    First 1-3 alphabetic characters of the first given name, e.g. ('Jean-Luc', 2) -> 'Je'.
    """
    length = max(1, min(length, MAX_FIRST_NAME_CHARS))
    first_part = (first_name or "").strip()
    for sep in (" ", "-", "'"):
        first_part = first_part.split(sep)[0]
    letters = [c for c in first_part if c.isalpha()][:length]
    if not letters:
        return None
    return letters[0].upper() + "".join(letters[1:]).lower()


def disambiguate(players: Iterable[Tuple[int, str, str]]) -> Dict[int, str]:
    """
    Build display names for one team's players.

    Args:
        players: (player_id, first_name, last_name) tuples.

    Returns:
        player_id -> display name.
    """
    by_last: Dict[str, List[Tuple[int, str, str]]] = defaultdict(list)
    for pid, first, last in players:
        by_last[format_for_display(last).lower()].append((pid, first, last))

    names: Dict[int, str] = {}
    for group in by_last.values():
        if len(group) == 1:
            pid, first, last = group[0]
            names[pid] = format_for_display(last) or fallback_name(pid)
            continue

        for pid, first, last in group:
            base = format_for_display(last)
            chosen = base
            for length in range(1, MAX_FIRST_NAME_CHARS + 1):
                mine = first_name_prefix(first, length)
                if mine is None:
                    break
                others = [first_name_prefix(f, length) for p, f, _ in group if p != pid]
                chosen = f"{base} {mine}."
                if mine not in others:
                    break
            names[pid] = chosen
    return names
