"""
Engine configuration: shared AP pools and enemy-phase pacing.
"""

import json
from pathlib import Path
from typing import Any, Dict, Union

from settings import (
    PLAYER_ACTION_POINTS,
    ENEMY_ACTION_POINTS,
    BOSS_ENEMY_ACTION_POINTS,
    ENEMY_PHASE_START_MS,
    ENEMY_PREVIEW_MS,
    ENEMY_AFTER_ACTION_MS,
)
from engine.error_handler import get_logger

log = get_logger("config")


class EngineConfig:
    """Tunable engine values, loadable from a JSON file."""

    def __init__(self) -> None:
        self.player_ap_max: int = PLAYER_ACTION_POINTS
        self.enemy_ap_max: int = ENEMY_ACTION_POINTS
        self.boss_enemy_ap_max: int = BOSS_ENEMY_ACTION_POINTS
        self.enemy_phase_start_ms: int = ENEMY_PHASE_START_MS
        self.enemy_preview_ms: int = ENEMY_PREVIEW_MS
        self.enemy_after_action_ms: int = ENEMY_AFTER_ACTION_MS

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for saving."""
        return {
            "player_ap_max": self.player_ap_max,
            "enemy_ap_max": self.enemy_ap_max,
            "boss_enemy_ap_max": self.boss_enemy_ap_max,
            "enemy_phase_start_ms": self.enemy_phase_start_ms,
            "enemy_preview_ms": self.enemy_preview_ms,
            "enemy_after_action_ms": self.enemy_after_action_ms,
        }

    def from_dict(self, data: Dict[str, Any]) -> None:
        """Load config from dictionary. Missing keys keep their defaults."""
        self.player_ap_max = int(data.get("player_ap_max", PLAYER_ACTION_POINTS))
        self.enemy_ap_max = int(data.get("enemy_ap_max", ENEMY_ACTION_POINTS))
        self.boss_enemy_ap_max = int(data.get("boss_enemy_ap_max", BOSS_ENEMY_ACTION_POINTS))
        self.enemy_phase_start_ms = int(data.get("enemy_phase_start_ms", ENEMY_PHASE_START_MS))
        self.enemy_preview_ms = int(data.get("enemy_preview_ms", ENEMY_PREVIEW_MS))
        self.enemy_after_action_ms = int(data.get("enemy_after_action_ms", ENEMY_AFTER_ACTION_MS))

    def enemy_ap_for(self, is_boss_level: bool) -> int:
        return self.boss_enemy_ap_max if is_boss_level else self.enemy_ap_max

    def save(self, path: Union[str, Path]) -> bool:
        """Save config to file."""
        try:
            with Path(path).open("w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2)
            return True
        except OSError as e:
            log.warning(f"Error saving config to {path}: {e}")
            return False

    def load(self, path: Union[str, Path]) -> bool:
        """Load config from file. Returns False and keeps defaults if unreadable."""
        config_file = Path(path)
        if not config_file.exists():
            return False

        try:
            with config_file.open("r", encoding="utf-8") as f:
                data = json.load(f)
            self.from_dict(data)
            return True
        except (OSError, ValueError, TypeError) as e:
            log.warning(f"Error loading config from {path}: {e}")
            return False


# Global config instance
_config = EngineConfig()


def get_config() -> EngineConfig:
    """Get the global config instance."""
    return _config


def load_config(path: Union[str, Path]) -> EngineConfig:
    """Load and return the global config."""
    _config.load(path)
    return _config
