"""
End-of-battle score.

Pure function of the final battle state; persisting it is up to the caller.
"""

from dataclasses import dataclass
from typing import List

from settings import SCORE_BASE, SCORE_TURN_PENALTY, SCORE_AP_PENALTY
from systems.pieces import unit_value
from engine.battle.state import BattleState


@dataclass(frozen=True)
class ScoreResult:
    turns: int
    total_ap_spent: int
    units_lost: List[str]
    units_lost_value: int
    score: int


def compute_score(turns: int, total_ap_spent: int, units_lost: List[str]) -> int:
    lost_value = sum(unit_value(a) for a in units_lost)
    raw = SCORE_BASE - SCORE_TURN_PENALTY * turns - SCORE_AP_PENALTY * total_ap_spent - lost_value
    return max(0, raw)


def score_result(state: BattleState) -> ScoreResult:
    lost = list(state.units_lost)
    return ScoreResult(
        turns=state.turn,
        total_ap_spent=state.total_ap_spent,
        units_lost=lost,
        units_lost_value=sum(unit_value(a) for a in lost),
        score=compute_score(state.turn, state.total_ap_spent, lost),
    )
