"""Fault budget: how many concurrent faults a cluster is assumed to survive."""

from __future__ import annotations

from typing import TYPE_CHECKING

from faultline.commands import BeginSendOmission, Crash

if TYPE_CHECKING:
    from faultline.commands import Command
    from faultline.state import FaultModelState


def tolerance(num_nodes: int) -> int:
    """Faults an N-node cluster tolerates (N - 1)."""
    return num_nodes - 1


def fault_allowed(command: "Command", state: "FaultModelState", num_nodes: int) -> bool:
    """Is this fault allowed under the budget right now?

    Args:
        command: The candidate fault command
        state: Current fault model state
        num_nodes: Cluster size

    Returns:
        True if the budget admits another fault of this kind
    """
    limit = tolerance(num_nodes)

    if isinstance(command, BeginSendOmission):
        return state.active_faults <= limit

    if isinstance(command, Crash):
        # An omission can be turned into a crash. The first clause already
        # covers active_faults == limit, so the second never changes the result.
        return state.active_faults <= limit or (
            state.active_faults == limit and state.is_crashed(command.node)
        )

    return False
