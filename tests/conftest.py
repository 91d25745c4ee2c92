"""Shared pytest fixtures for faultline tests."""

from __future__ import annotations

import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from faultline.cluster import LocalCluster
from faultline.commands import BeginSendOmission, Crash
from faultline.fault_logging import DiagnosticsLog
from faultline.model import FaultModel
from faultline.registry import NodeRegistry
from faultline.state import FaultModelState, ensure_faultline_dir


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test isolation."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def project_root(temp_dir: Path) -> Path:
    """Create a mock project root with .faultline directory."""
    ensure_faultline_dir(temp_dir)
    return temp_dir


@pytest.fixture
def diagnostics() -> DiagnosticsLog:
    """Diagnostics log with debug entries kept and no console output."""
    return DiagnosticsLog(debug_enabled=True, echo=False)


@pytest.fixture
def model(diagnostics: DiagnosticsLog) -> FaultModel:
    """Fault model for a three node cluster (tolerance 2)."""
    return FaultModel(3, log=diagnostics)


@pytest.fixture
def cluster() -> LocalCluster:
    """Simulated cluster of node_1, node_2, node_3."""
    return LocalCluster(["node_1", "node_2", "node_3"])


@pytest.fixture
def registry(cluster: LocalCluster) -> NodeRegistry:
    """Name table for the simulated cluster."""
    return cluster.registry()


@pytest.fixture
def empty_state() -> FaultModelState:
    """Fresh fault model state."""
    return FaultModelState()


@pytest.fixture
def one_crash_state(model: FaultModel, empty_state: FaultModelState) -> FaultModelState:
    """State after crashing node_1."""
    return model.next_state(empty_state, Crash("node_1"))


@pytest.fixture
def at_tolerance_state(model: FaultModel, one_crash_state: FaultModelState) -> FaultModelState:
    """State with active_faults == tolerance: node_1 crashed, node_2 -> node_3 omitted."""
    return model.next_state(one_crash_state, BeginSendOmission("node_2", "node_3"))


@pytest.fixture
def mock_lifecycle():
    """Provide a configurable MockLifecycle for testing."""
    from tests.fixtures.mock_lifecycle import MockLifecycle

    return MockLifecycle()


@pytest.fixture
def no_sleep():
    """Sleep replacement that records requested delays instead of waiting."""
    delays: list[float] = []

    def _sleep(seconds: float) -> None:
        delays.append(seconds)

    _sleep.delays = delays
    return _sleep


SLEEPER = (
    "import signal, sys, time\n"
    "if sys.argv[1:] == ['--ignore-term']: signal.signal(signal.SIGTERM, signal.SIG_IGN)\n"
    "print('ready', flush=True)\n"
    "time.sleep(60)\n"
)


@pytest.fixture
def spawn_node():
    """Start child processes that stand in for cluster members.

    Each call returns a started Popen once the child has printed "ready".
    With `ignore_sigterm` the child survives SIGTERM. Anything still alive
    is killed at teardown.
    """
    procs: list[subprocess.Popen] = []

    def _spawn(ignore_sigterm: bool = False) -> subprocess.Popen:
        extra = ["--ignore-term"] if ignore_sigterm else []
        proc = subprocess.Popen(
            [sys.executable, "-c", SLEEPER, *extra],
            stdout=subprocess.PIPE,
            text=True,
        )
        procs.append(proc)
        assert proc.stdout.readline().strip() == "ready"
        return proc

    yield _spawn

    for proc in procs:
        if proc.poll() is None:
            proc.kill()
        proc.wait()
        proc.stdout.close()
