from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union


def _now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime())


@dataclass
class TelemetryLogger:
    """
    Append-only JSONL event stream for battles.

    Off until init() is given a path. One line per event:
    {"t", "ts", "elapsed", "seq", "session", "event", ...fields}.
    """
    path: Optional[Path] = None
    enabled: bool = True
    flush_each_write: bool = False
    session: str = ""
    events_written: int = 0
    _started_at: float = field(default_factory=time.time)

    @property
    def active(self) -> bool:
        return self.enabled and self.path is not None

    def init(self, path: Union[str, Path], session: str = "") -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(exist_ok=True)
        self.session = session
        self.events_written = 0
        self._started_at = time.time()
        self.log("telemetry_init", file=str(self.path))

    def close(self) -> None:
        self.path = None

    def _row(self, event: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        now = time.time()
        return {
            "t": now,
            "ts": _now_iso(),
            "elapsed": round(now - self._started_at, 3),
            "seq": self.events_written,
            "session": self.session,
            "event": event,
            **fields,
        }

    def log(self, event: str, **fields: Any) -> None:
        if not self.active:
            return
        try:
            line = json.dumps(self._row(event, fields), ensure_ascii=False, default=str)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
                if self.flush_each_write:
                    f.flush()
            self.events_written += 1
        except Exception:
            # Telemetry must never break the battle.
            return


def read_events(path: Union[str, Path], event: Optional[str] = None) -> List[Dict[str, Any]]:
    """Load a telemetry file, optionally keeping only one event type."""
    return list(_iter_events(Path(path), event))


def _iter_events(path: Path, event: Optional[str]) -> Iterator[Dict[str, Any]]:
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            row = json.loads(line)
            if event is None or row.get("event") == event:
                yield row


# global instance used by the engine
telemetry = TelemetryLogger()
