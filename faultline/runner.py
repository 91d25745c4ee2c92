"""Fault run driver - generate, admit, inject, validate, and fold faults into state."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from faultline.commands import Command, command_to_dict
from faultline.injector import execute
from faultline.retry import RetryPolicy
from faultline.state import FaultModelState

if TYPE_CHECKING:
    from faultline.cluster import Cluster
    from faultline.fault_logging import DiagnosticsLog
    from faultline.model import FaultModel
    from faultline.registry import NodeRegistry


@dataclass
class StepRecord:
    """One command considered by the driver."""

    command: Command
    admitted: bool
    result: object = None
    passed: bool | None = None

    def to_dict(self) -> dict:
        return {
            "command": command_to_dict(self.command),
            "admitted": self.admitted,
            "result": None if self.result is None else str(self.result),
            "passed": self.passed,
        }

    def __str__(self) -> str:
        if not self.admitted:
            return f"{self.command} SKIPPED: precondition"
        status = "ok" if self.passed else "FALSIFIED"
        return f"{self.command} -> {self.result} [{status}]"


@dataclass
class RunResult:
    """Outcome of a fault run."""

    state: FaultModelState
    history: list[StepRecord] = field(default_factory=list)
    falsified: bool = False

    @property
    def admitted(self) -> list[StepRecord]:
        return [r for r in self.history if r.admitted]

    @property
    def summary(self) -> str:
        verdict = "FALSIFIED" if self.falsified else "passed"
        return (
            f"{verdict}: {len(self.admitted)}/{len(self.history)} commands admitted, "
            f"{self.state.active_faults} active faults, "
            f"crashed {list(self.state.crashed_nodes) or '-'}"
        )


class FaultRunner:
    """Drives a fault model against a cluster, one command at a time."""

    def __init__(
        self,
        model: "FaultModel",
        cluster: "Cluster",
        registry: "NodeRegistry",
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.model = model
        self.cluster = cluster
        self.registry = registry
        self.policy = policy or RetryPolicy()
        self.sleep = sleep
        self.state = model.initial_state()
        self.history: list[StepRecord] = []
        self.falsified = False

    @property
    def log(self) -> "DiagnosticsLog":
        return self.model.log

    def step(self, command: Command) -> StepRecord:
        """Consider one command: admit it, inject it, validate it, update state.

        Fatal injector errors propagate and leave the state unchanged.
        """
        if not self.model.precondition(self.state, command):
            record = StepRecord(command=command, admitted=False)
            self.history.append(record)
            return record

        result = execute(
            command,
            self.registry,
            self.cluster,
            policy=self.policy,
            log=self.log,
            sleep=self.sleep,
        )

        passed = self.model.postcondition(self.state, command, result)
        record = StepRecord(command=command, admitted=True, result=result, passed=passed)
        self.history.append(record)

        if passed:
            self.state = self.model.next_state(self.state, command)
        else:
            self.falsified = True
        return record

    def run(self, steps: int, rng: random.Random | None = None) -> RunResult:
        """Generate and run up to `steps` commands.

        Stops early when a postcondition fails.
        """
        rng = rng or random.Random()
        for _ in range(steps):
            if self.falsified:
                break
            self.step(self.model.command(rng))
        return self.result()

    def result(self) -> RunResult:
        return RunResult(state=self.state, history=list(self.history), falsified=self.falsified)


def run_faults(
    model: "FaultModel",
    cluster: "Cluster",
    registry: "NodeRegistry",
    steps: int,
    seed: int | None = None,
    policy: RetryPolicy | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RunResult:
    """Run a seeded random fault sequence and return its result."""
    runner = FaultRunner(model, cluster, registry, policy=policy, sleep=sleep)
    return runner.run(steps, random.Random(seed))
