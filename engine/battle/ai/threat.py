"""
Threat assessment system.

Tracks which tiles the player side can currently strike. Only boss-tier
movement and retreat scoring consult it.
"""

from typing import Optional, Set

from engine.battle.queries import threatened_tiles
from engine.battle.state import BattleState
from engine.battle.types import BattleUnit, Coord


class ThreatMap:
    """
    Snapshot of player-threatened tiles.

    Build a fresh one for every decision; units move and die between
    decisions, so a map must never be carried over.
    """

    def __init__(self, tiles: Set[Coord]):
        self.tiles = tiles

    @classmethod
    def from_state(cls, state: BattleState) -> "ThreatMap":
        return cls(threatened_tiles(state.board, state.units))

    def is_safe(self, tile: Coord) -> bool:
        return tile not in self.tiles

    def unit_threatened(self, unit: BattleUnit) -> bool:
        return unit.position in self.tiles


def boss_threat_map(state: BattleState) -> Optional[ThreatMap]:
    """Threat map on boss levels, None elsewhere."""
    if not state.is_boss_level:
        return None
    return ThreatMap.from_state(state)
