import json
from datetime import datetime
from pathlib import Path

from leadcards.ops_logger import OPS_ENV_VAR, OpsLogger


def test_emit_appends_jsonl(tmp_path):
    path = tmp_path / "logs" / "ops.jsonl"
    logger = OpsLogger(path)
    logger.emit({"action": "scrapePage", "success": True})
    logger.emit({"action": "getTotalPages", "success": False, "error": "boom"})

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first, second = (json.loads(line) for line in lines)
    assert first == {"leadcards_ops": 1, "action": "scrapePage", "success": True}
    assert second["error"] == "boom"
    assert logger.emitted == 2


def test_non_json_values_are_stringified(tmp_path):
    path = tmp_path / "ops.jsonl"
    OpsLogger(path).emit({"at": datetime(2024, 1, 2, 3, 4, 5), "path": Path("out")})
    rec = json.loads(path.read_text(encoding="utf-8"))
    assert rec["at"] == "2024-01-02 03:04:05"
    assert rec["path"] == "out"


def test_write_failure_never_raises(tmp_path):
    # A directory in place of the log file makes open() fail
    target = tmp_path / "ops.jsonl"
    target.mkdir()
    logger = OpsLogger(target)
    logger.emit({"action": "scrapePage"})
    assert logger.emitted == 0


def test_stdout_mirror(capsys):
    OpsLogger(also_stdout=True).emit({"action": "navigateToPage"})
    out = capsys.readouterr().out.strip()
    assert json.loads(out) == {"leadcards_ops": 1, "action": "navigateToPage"}


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.delenv(OPS_ENV_VAR, raising=False)
    assert OpsLogger.from_env() is None

    monkeypatch.setenv(OPS_ENV_VAR, "1")
    logger = OpsLogger.from_env(tmp_path / "ops.jsonl")
    assert logger is not None
    assert logger.also_stdout is True
    assert logger.file_path == tmp_path / "ops.jsonl"
