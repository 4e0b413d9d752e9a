import argparse
import os
import sys
from typing import Optional

# Headless: the driver only needs pygame's clock, never a window.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import pygame

from settings import FPS, TITLE
from engine.config import get_config, load_config
from engine.error_handler import enable_file_logging, log_error
from engine.battle.pacing import EnemyPhaseDirector
from engine.battle.state import BattleState
from engine.battle.turns import TurnEngine
from engine.battle.types import BattleUnit, Phase
from engine.battle.ai.coordination import manhattan
from systems.scenarios import build_battle, level_count, load_level, tutorial_scenario
from telemetry.logger import telemetry

MAX_TURNS = 200


def _nearest_enemy(state: BattleState, unit: BattleUnit) -> Optional[BattleUnit]:
    enemies = state.enemy_units
    if not enemies:
        return None
    return min(enemies, key=lambda e: manhattan(unit, e))


def autopilot_step(engine: TurnEngine) -> bool:
    """
    Take one greedy player action: attack the weakest enemy in reach, else
    step toward the nearest enemy. Returns False when nothing is left to do.
    """
    state = engine.state
    for unit in state.player_units:
        if not engine.select_unit(unit.id):
            continue

        targets = [state.unit_at(x, y) for x, y in state.attack_range]
        targets = [t for t in targets if t is not None]
        if targets and state.player_ap >= unit.attack_cost:
            target = min(targets, key=lambda t: t.health)
            if engine.attack_with(unit.id, target.id):
                return True

        goal = _nearest_enemy(state, unit)
        if goal is not None and not unit.has_moved and state.valid_moves:
            here = manhattan(unit, goal)
            best = min(state.valid_moves, key=lambda m: abs(m[0] - goal.x) + abs(m[1] - goal.y))
            if abs(best[0] - goal.x) + abs(best[1] - goal.y) < here and engine.move_selected_to(*best):
                return True
    engine.clear_selection()
    return False


def run_battle(engine: TurnEngine, director: EnemyPhaseDirector, paced: bool) -> Phase:
    clock = pygame.time.Clock()
    state = engine.state

    while not state.phase.is_terminal and state.turn <= MAX_TURNS:
        if state.phase is Phase.PLAYER_TURN:
            while state.phase is Phase.PLAYER_TURN and autopilot_step(engine):
                pass
            if state.phase is Phase.PLAYER_TURN:
                engine.end_player_turn()
            continue

        if not paced:
            engine.run_enemy_phase()
            continue

        dt = clock.tick(FPS) / 1000.0
        try:
            if director.update(dt):
                print(f"Turn {state.turn}: {len(state.player_units)} vs {len(state.enemy_units)}")
        except Exception as e:
            log_error(e, "enemy phase playback")
            raise

    return state.phase


def main() -> None:
    parser = argparse.ArgumentParser(description=f"{TITLE}: headless auto-battle")
    parser.add_argument("--level", type=int, default=1, help=f"level number (1-{level_count()})")
    parser.add_argument("--tutorial", type=int, default=None, help="tutorial page (0-2) instead of a level")
    parser.add_argument("--config", default=None, help="JSON engine config")
    parser.add_argument("--telemetry", default=None, help="write JSONL telemetry to this file")
    parser.add_argument("--log-file", action="store_true", help="write a debug log under logs/")
    parser.add_argument("--fast", action="store_true", help="skip enemy-phase pacing")
    args = parser.parse_args()

    if args.log_file:
        enable_file_logging()
    if args.telemetry:
        telemetry.init(args.telemetry, session=f"level{args.level}" if args.tutorial is None else f"tutorial{args.tutorial}")
    config = load_config(args.config) if args.config else get_config()

    scenario = tutorial_scenario(args.tutorial) if args.tutorial is not None else load_level(args.level)
    if scenario is None:
        print("No such level or tutorial page.", file=sys.stderr)
        sys.exit(2)

    pygame.init()
    engine = TurnEngine(build_battle(scenario, config))
    director = EnemyPhaseDirector(engine, config)

    print(f"{scenario.name}: {scenario.width}x{scenario.height}")
    outcome = run_battle(engine, director, paced=not args.fast)
    result = engine.score_result()
    print(f"{outcome.value.upper()} after {result.turns} turns, "
          f"{result.total_ap_spent} AP spent, lost {result.units_lost or 'nothing'}; score {result.score}")

    telemetry.close()
    pygame.quit()
    sys.exit(0 if outcome is Phase.VICTORY else 1)


if __name__ == "__main__":
    main()
