from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
SCRIPT = REPO_ROOT / "scripts" / "allocate_line.py"


def _run(*args: str) -> subprocess.CompletedProcess:
    env = dict(os.environ, PYTHONIOENCODING="utf-8")
    return subprocess.run(
        [sys.executable, str(SCRIPT), *args],
        capture_output=True,
        text=True,
        encoding="utf-8",
        env=env,
    )


def test_allocate_line_cli_prints_summary_and_writes_json(tmp_path: Path):
    output = tmp_path / "out" / "line.json"
    proc = _run("--start", "0", "0", "--end", "3600", "0", "--output", str(output))
    assert proc.returncode == 0, proc.stderr
    assert "Spans: 1800 × 2" in proc.stdout
    assert "Checksum: line-1:3600:1800-1800" in proc.stdout

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["success"] is True
    assert len(payload["spans"]) == 2
    assert payload["geometry"]["offset_vector"] == [0.0, -600.0]


def test_allocate_line_cli_orientation_and_width():
    proc = _run(
        "--start", "0", "1200", "--end", "0", "0",
        "--width", "355", "--orientation", "left",
    )
    assert proc.returncode == 0, proc.stderr
    assert "side=left" in proc.stdout
    assert "polarity=-1" in proc.stdout


def test_allocate_line_cli_reports_short_line():
    proc = _run("--start", "0", "0", "--end", "100", "0")
    assert proc.returncode == 1
    assert "INSUFFICIENT_LENGTH" in proc.stdout
