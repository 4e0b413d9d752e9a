"""
Combat resolution.

Damage formula and attack-effect classification, shared by player and enemy
attacks.
"""

from engine.battle.types import AttackEffect, AttackStyle, BattleUnit


def compute_damage(attack: int, defense: int) -> int:
    """At least 1 damage always gets through defense."""
    return max(1, attack - defense)


def expected_damage(attacker: BattleUnit, target: BattleUnit) -> int:
    """
    Damage attacker would deal to target right now.

    Boss attacks are always lethal: they deal the target's remaining health.
    """
    if attacker.is_boss:
        return target.health
    return compute_damage(attacker.attack, target.defense)


def apply_damage(target: BattleUnit, damage: int) -> int:
    """Subtract already-resolved damage, clamping health at 0. Returns damage applied."""
    target.health = max(0, target.health - damage)
    return damage


def attack_style(attacker: BattleUnit, target: BattleUnit) -> AttackStyle:
    """
    Melee when the target is adjacent (Chebyshev distance <= 1), otherwise
    ranged. Knights never attack adjacent tiles, so they are always ranged.
    """
    dx = abs(attacker.x - target.x)
    dy = abs(attacker.y - target.y)
    if max(dx, dy) <= 1 and attacker.archetype != "knight":
        return "melee"
    return "ranged"


def make_attack_effect(attacker: BattleUnit, target: BattleUnit) -> AttackEffect:
    return AttackEffect(
        attacker_id=attacker.id,
        target_id=target.id,
        style=attack_style(attacker, target),
        origin=attacker.position,
        impact=target.position,
    )
