from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional


OPS_ENV_VAR = "LEADCARDS_OPS_JSON"


def ops_enabled_by_env() -> bool:
    return os.environ.get(OPS_ENV_VAR, "0") == "1"


class OpsLogger:
    """Append-only JSONL logger for per-request operational records.

    - One JSON object per line (UTF-8, newline-delimited)
    - Thread-safe (coarse lock)
    - Best-effort: never raises to caller
    """

    def __init__(self, file_path: Optional[Path] = None, also_stdout: bool = False) -> None:
        self.file_path = Path(file_path) if file_path else None
        self.also_stdout = bool(also_stdout)
        self.emitted = 0
        self._lock = threading.Lock()
        if self.file_path is not None:
            try:
                self.file_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError:
                pass

    @classmethod
    def from_env(cls, file_path: Optional[Path] = None) -> Optional["OpsLogger"]:
        """Stdout-mirroring logger when LEADCARDS_OPS_JSON=1, else None."""
        if not ops_enabled_by_env():
            return None
        return cls(file_path, also_stdout=True)

    def emit(self, record: Dict[str, Any]) -> None:
        record = {"leadcards_ops": 1, **record}
        try:
            line = json.dumps(record, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            # Last resort: stringify
            line = json.dumps({"leadcards_ops": 1, "_serialization_error": True, "record_str": str(record)})
        if self.file_path is not None:
            try:
                with self._lock:
                    with self.file_path.open("a", encoding="utf-8") as f:
                        f.write(line)
                        f.write("\n")
            except OSError:
                # Never propagate logging errors
                return
        with self._lock:
            self.emitted += 1
        if self.also_stdout:
            try:
                print(line)
            except (OSError, ValueError):
                pass
