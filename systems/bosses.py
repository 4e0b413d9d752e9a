"""
Boss system.

Defines the named bosses of the level table, the boss stat upgrade, and how
a boss is picked out of an enemy roster.
"""

import math
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from settings import (
    BOSS_HEALTH_MULTIPLIER,
    BOSS_HEALTH_FLOOR,
    BOSS_ATTACK_BONUS,
    BOSS_ATTACK_CAP,
    BOSS_DEFENSE_BONUS,
    BOSS_DEFENSE_CAP,
)
from engine.error_handler import get_logger
from engine.battle.types import BattleUnit
from systems.pieces import normalize_archetype

log = get_logger("bosses")


@dataclass(frozen=True)
class BossSpec:
    """
    Which enemy becomes the boss of a level.

    The first enemy of `archetype` in roster order is promoted.
    """
    archetype: str
    display_name: str = ""
    # Only meaningful for bishops: the boss is locked to one square colour
    # per phase and gets a free colour-switch step.
    shadow_bishop: bool = False


BOSSES: Dict[str, BossSpec] = {}


def register_boss(boss_id: str, boss: BossSpec) -> BossSpec:
    """Register a named boss."""
    BOSSES[boss_id] = boss
    return boss


def get_boss(boss_id: str) -> BossSpec:
    """Get a named boss by ID."""
    return BOSSES[boss_id]


def compute_boss_stats(max_health: int, attack: int, defense: int) -> Tuple[int, int, int]:
    """
    Upgrade a unit's base stats to boss stats.

    Returns (max_health, attack, defense).
    """
    boss_health = max(BOSS_HEALTH_FLOOR, math.ceil(max_health * BOSS_HEALTH_MULTIPLIER))
    boss_attack = min(BOSS_ATTACK_CAP, attack + BOSS_ATTACK_BONUS)
    boss_defense = min(BOSS_DEFENSE_CAP, defense + BOSS_DEFENSE_BONUS)
    return boss_health, boss_attack, boss_defense


def apply_boss_upgrade(unit: BattleUnit, spec: BossSpec) -> BattleUnit:
    """Mark a unit as the boss and raise its stats. Health is refilled."""
    unit.max_health, unit.attack, unit.defense = compute_boss_stats(
        unit.max_health, unit.attack, unit.defense
    )
    unit.health = unit.max_health
    unit.is_boss = True
    if spec.display_name:
        unit.boss_display_name = spec.display_name
    if spec.shadow_bishop and unit.archetype == "bishop":
        unit.shadow_bishop = True
        unit.bishop_diagonal_parity = 0
    return unit


def designate_boss(enemies: Iterable[BattleUnit], spec: BossSpec) -> Optional[BattleUnit]:
    """
    Promote the first enemy matching the boss archetype.

    Returns the boss, or None when the roster has no such piece; the level
    then plays as a regular level.
    """
    archetype = normalize_archetype(spec.archetype)
    for unit in enemies:
        if unit.archetype == archetype:
            apply_boss_upgrade(unit, spec)
            log.debug(f"{unit.id} is boss {unit.display_name} ({unit.max_health} hp, {unit.attack} atk)")
            return unit
    log.warning(f"No {archetype} in enemy roster; boss {spec.display_name or archetype} not placed")
    return None


# ---------------------------------------------------------------------------
# Boss Definitions
# ---------------------------------------------------------------------------

def _build_bosses() -> None:
    """Build and register all named bosses."""
    register_boss("rourke", BossSpec(archetype="knight", display_name="Rourke the Knight of Asteria"))
    register_boss(
        "valdris",
        BossSpec(archetype="bishop", display_name="Valdris the Shadow Bishop", shadow_bishop=True),
    )
    register_boss("torvald", BossSpec(archetype="rook", display_name="Torvald the Iron Tower"))
    register_boss("morana", BossSpec(archetype="queen", display_name="Morana the Crimson Queen"))
    register_boss("aldric", BossSpec(archetype="king", display_name="Aldric the Eternal King"))


_build_bosses()
