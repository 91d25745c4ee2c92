"""Diagnostics and run logs for faultline."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Literal

from rich.console import Console

from faultline.state import ensure_faultline_dir

# Should we do fault debugging?
FAULT_DEBUG = True

# Oldest entries are dropped past this many
MAX_LOG_ENTRIES = 10_000

LogLevel = Literal["debug", "info", "warning", "error"]

_LEVEL_STYLES = {
    "debug": "dim",
    "info": "blue",
    "warning": "yellow",
    "error": "red",
}


@dataclass
class LogEntry:
    """One diagnostic line."""

    level: LogLevel
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    def format(self) -> str:
        return f"{self.timestamp.isoformat()} [{self.level}] {self.message}"


@dataclass
class DiagnosticsLog:
    """Collects leveled diagnostics for a run.

    Debug entries are only kept when `debug` is on. With `echo` set, every
    kept entry is also printed to the console. Only the newest
    `max_entries` entries are retained.
    """

    debug_enabled: bool = FAULT_DEBUG
    echo: bool = False
    entries: deque[LogEntry] = field(default_factory=deque)
    console: Console | None = None
    max_entries: int = MAX_LOG_ENTRIES

    def __post_init__(self) -> None:
        self.entries = deque(self.entries, maxlen=self.max_entries)

    def log(self, level: LogLevel, message: str) -> None:
        if level == "debug" and not self.debug_enabled:
            return
        entry = LogEntry(level=level, message=message)
        self.entries.append(entry)
        if self.echo:
            style = _LEVEL_STYLES[level]
            (self.console or Console()).print(f"[{style}]{level}[/{style}] {message}", highlight=False)

    def debug(self, message: str) -> None:
        self.log("debug", message)

    def info(self, message: str) -> None:
        self.log("info", message)

    def warning(self, message: str) -> None:
        self.log("warning", message)

    def error(self, message: str) -> None:
        self.log("error", message)

    def messages(self, level: LogLevel | None = None) -> list[str]:
        """Logged messages, optionally filtered to one level."""
        return [e.message for e in self.entries if level is None or e.level == level]

    def clear(self) -> None:
        self.entries.clear()


def get_log_dir(run_name: str, project_root: Path | None = None) -> Path:
    """Get the log directory for a run."""
    faultline_dir = ensure_faultline_dir(project_root)
    log_dir = faultline_dir / "logs" / run_name
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def get_next_log_number(run_name: str, project_root: Path | None = None) -> int:
    """Get the next log file number for a run."""
    log_dir = get_log_dir(run_name, project_root)
    existing = list(log_dir.glob("*.log"))
    if not existing:
        return 1
    # Extract numbers from filenames like "001-run.log", "002-shell.log"
    numbers = []
    for f in existing:
        try:
            num = int(f.stem.split("-")[0])
            numbers.append(num)
        except (ValueError, IndexError):
            pass
    return max(numbers, default=0) + 1


def write_log(
    run_name: str,
    log_type: str,
    summary: str,
    diagnostics: DiagnosticsLog,
    seed: int | None = None,
    project_root: Path | None = None,
) -> Path:
    """Write a run log.

    Args:
        run_name: Name of the run (directory under .faultline/logs)
        log_type: Type of log (e.g., "run", "shell")
        summary: One-line outcome of the run
        diagnostics: Entries collected during the run
        seed: Random seed the run used, if any
        project_root: Optional project root path

    Returns:
        Path to the log file
    """
    log_dir = get_log_dir(run_name, project_root)
    log_num = get_next_log_number(run_name, project_root)
    log_file = log_dir / f"{log_num:03d}-{log_type}.log"

    timestamp = datetime.now().isoformat()
    body = "\n".join(entry.format() for entry in diagnostics.entries)

    content = f"""=== FAULTLINE LOG ===
Run: {run_name}
Time: {timestamp}
Seed: {seed if seed is not None else "-"}
Summary: {summary}
---
{body}
=== END ===
"""

    log_file.write_text(content)
    return log_file


def read_latest_log(run_name: str, project_root: Path | None = None) -> str | None:
    """Read the latest log file for a run."""
    log_dir = get_log_dir(run_name, project_root)
    logs = sorted(log_dir.glob("*.log"))
    if not logs:
        return None
    return logs[-1].read_text()


def read_log_tail(run_name: str, lines: int = 30, project_root: Path | None = None) -> str | None:
    """Read the last N diagnostic lines of the latest log for a run."""
    content = read_latest_log(run_name, project_root)
    if not content:
        return None

    # Extract the entries section (between --- and === END ===)
    parts = content.split("---\n", 1)
    if len(parts) < 2:
        return content

    output = parts[1].rsplit("=== END ===", 1)[0]
    log_lines = output.strip().split("\n")
    return "\n".join(log_lines[-lines:])


def list_runs(project_root: Path | None = None) -> list[str]:
    """Names of runs that have a log directory."""
    logs_dir = ensure_faultline_dir(project_root) / "logs"
    return sorted(p.name for p in logs_dir.iterdir() if p.is_dir())
