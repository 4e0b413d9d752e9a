"""
Enemy phase playback.

Drives TurnEngine's enemy phase one action at a time from a frame loop, so a
presentation layer can show each planned action before it lands. The engine
itself never waits; all timing lives here.
"""

from typing import Optional

from settings import ENEMY_AFTER_ATTACK_EXTRA_MS, ENEMY_AFTER_AREA_EXTRA_MS
from engine.config import EngineConfig, get_config
from engine.battle.turns import TurnEngine
from engine.battle.types import EnemyAction, Phase

IDLE = "idle"
STARTING = "starting"
PREVIEWING = "previewing"
SETTLING = "settling"


class EnemyPhaseDirector:
    """
    idle -> starting -> (previewing -> settling)* -> idle

    Call update(dt) every frame with dt in seconds. While an action is being
    previewed it is exposed as state.enemy_preview.
    """

    def __init__(self, engine: TurnEngine, config: Optional[EngineConfig] = None):
        self.engine = engine
        self.config = config or get_config()
        self.stage = IDLE
        self._timer: float = 0.0
        self._pending: Optional[EnemyAction] = None
        self.actions_committed = 0

    @property
    def busy(self) -> bool:
        return self.stage != IDLE

    def update(self, dt: float) -> bool:
        """
        Advance the playback clock.

        Returns True on the frame the enemy phase ends.
        """
        state = self.engine.state
        if state.phase is not Phase.ENEMY_TURN:
            self._reset()
            return False

        if self.stage == IDLE:
            self.stage = STARTING
            self._timer = self.config.enemy_phase_start_ms / 1000.0
            self.actions_committed = 0

        self._timer -= dt
        if self._timer > 0.0:
            return False

        if self.stage in (STARTING, SETTLING):
            return self._plan_next()

        if self.stage == PREVIEWING:
            action = self._pending
            self._pending = None
            self.engine.commit_enemy_action(action)
            self.actions_committed += 1
            self.stage = SETTLING
            self._timer = self._after_delay(action)
            if state.phase.is_terminal:
                self._reset()
                return True
        return False

    def _plan_next(self) -> bool:
        state = self.engine.state
        action = self.engine.plan_enemy_action()
        if action is None:
            self.engine.finish_enemy_phase()
            self._reset()
            return True
        self._pending = action
        state.enemy_preview = action
        self.stage = PREVIEWING
        self._timer = self.config.enemy_preview_ms / 1000.0
        return False

    def _after_delay(self, action: EnemyAction) -> float:
        ms = self.config.enemy_after_action_ms
        if action.kind in ("area_blast", "line_attack"):
            ms += ENEMY_AFTER_AREA_EXTRA_MS
        elif action.kind == "attack":
            ms += ENEMY_AFTER_ATTACK_EXTRA_MS
        return ms / 1000.0

    def _reset(self) -> None:
        self.stage = IDLE
        self._timer = 0.0
        self._pending = None
