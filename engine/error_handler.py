"""
Logging and error types shared by the engine, scenarios and CLI.

Provides:
- The "chess_tactics" logger hierarchy (console output for warnings/errors)
- Opt-in file logging for detailed battle traces
- Custom exception types for different error categories
"""
import logging
import os
import traceback
from pathlib import Path
from typing import Optional
from datetime import datetime

LOG_DIR = Path(__file__).resolve().parent.parent / "logs"

logger = logging.getLogger("chess_tactics")
logger.setLevel(logging.DEBUG)

# Warnings and errors go to stderr; re-imports must not stack handlers
if not logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(
        logging.Formatter('%(levelname)s: %(message)s')
    )
    logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """Return a child of the project logger, e.g. get_logger("battle.ai")."""
    return logger.getChild(name)


def enable_file_logging(log_dir: Optional[Path] = None) -> Path:
    """
    Attach a DEBUG file handler to the project logger.

    Nothing is written to disk until this is called. Calling it twice with
    the same directory does not add a second handler.

    Returns:
        Path of the log file in use
    """
    directory = Path(log_dir) if log_dir is not None else LOG_DIR
    directory.mkdir(parents=True, exist_ok=True)
    log_file = directory / f"battle_{datetime.now().strftime('%Y%m%d')}.log"

    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == os.path.abspath(log_file):
            return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )
    logger.addHandler(file_handler)
    return log_file


class GameError(Exception):
    """Base exception for game-specific errors."""
    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or message


class BattleError(GameError):
    """Internal battle invariant was broken."""
    pass


class ValidationError(GameError):
    """Construction input cannot be turned into a playable battle."""
    pass


def log_error(error: Exception, context: str = "") -> None:
    """
    Log an error with context information.

    Args:
        error: The exception that occurred
        context: Where the error occurred (e.g., "enemy_phase", "load_config")
    """
    error_type = type(error).__name__
    trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    logger.error(f"Error in {context}: {error_type}: {error}\n{trace}")
