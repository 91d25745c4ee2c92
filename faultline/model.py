"""The fault model: which faults may run, and what they do to model state."""

from __future__ import annotations

import random

from faultline.budget import fault_allowed, tolerance
from faultline.cluster import OK
from faultline.commands import (
    DEFAULT_NUM_NODES,
    BeginSendOmission,
    Command,
    Crash,
    generate_command,
    node_names,
)
from faultline.fault_logging import DiagnosticsLog
from faultline.state import FaultModelState


class FaultModel:
    """Crash and send-omission faults over a fixed membership of `num_nodes`.

    The model never heals: fault count and crashed nodes only grow.
    """

    def __init__(self, num_nodes: int = DEFAULT_NUM_NODES, log: DiagnosticsLog | None = None):
        self.num_nodes = num_nodes
        self.names = node_names(num_nodes)
        self.log = log or DiagnosticsLog()

    @property
    def tolerance(self) -> int:
        return tolerance(self.num_nodes)

    def initial_state(self) -> FaultModelState:
        return FaultModelState()

    def command(self, rng: random.Random | None = None) -> Command:
        """Generate a candidate fault command."""
        return generate_command(self.names, rng)

    def precondition(self, state: FaultModelState, command: Command) -> bool:
        """May `command` run in `state`?"""
        if isinstance(command, BeginSendOmission):
            return (
                fault_allowed(command, state, self.num_nodes)
                and command.source != command.destination
                and not state.is_crashed(command.source)
                and not state.is_crashed(command.destination)
            )

        if isinstance(command, Crash):
            # Node to crash must be online at the time.
            return fault_allowed(command, state, self.num_nodes) and not state.is_crashed(command.node)

        self.log.warning(f"fault precondition fired for {command!r}")
        return False

    def next_state(self, state: FaultModelState, command: Command) -> FaultModelState:
        """State after `command` has run. Does not modify `state`."""
        if isinstance(command, BeginSendOmission):
            return state.with_send_omission(command.source, command.destination)
        if isinstance(command, Crash):
            return state.with_crash(command.node)
        return state

    def postcondition(self, state: FaultModelState, command: Command, result: object) -> bool:
        """Did the injected fault report a clean result?"""
        if isinstance(command, (Crash, BeginSendOmission)) and result == OK:
            return True

        self.log.warning(f"fault postcondition fired for {command!r} with response {result!r}")
        return False
