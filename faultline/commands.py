"""Fault commands and the command generator."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import ClassVar, Literal, Union

CommandName = Literal["crash", "begin_send_omission"]

DEFAULT_NUM_NODES = 3


@dataclass(frozen=True)
class Crash:
    """Stop a node's process. Irreversible within a run."""

    node: str

    name: ClassVar[CommandName] = "crash"

    @property
    def args(self) -> tuple[str, ...]:
        return (self.node,)

    def __str__(self) -> str:
        return f"crash({self.node})"


@dataclass(frozen=True)
class BeginSendOmission:
    """Drop every message `source` forwards to `destination`."""

    source: str
    destination: str

    name: ClassVar[CommandName] = "begin_send_omission"

    @property
    def args(self) -> tuple[str, ...]:
        return (self.source, self.destination)

    def __str__(self) -> str:
        return f"begin_send_omission({self.source}, {self.destination})"


Command = Union[Crash, BeginSendOmission]

# Names of the fault commands, so callers know which calls dispatch to the
# fault model.
FAULT_FUNCTIONS: tuple[str, ...] = ("crash", "begin_send_omission")


def node_names(num_nodes: int = DEFAULT_NUM_NODES) -> list[str]:
    """Symbolic names for a cluster of `num_nodes` members: node_1 .. node_N."""
    if num_nodes < 1:
        raise ValueError(f"Cluster needs at least one node, got {num_nodes}")
    return [f"node_{n}" for n in range(1, num_nodes + 1)]


def command_to_dict(command: Command) -> dict:
    """Serialize a command for run logs."""
    return {"name": command.name, "args": list(command.args)}


def generate_command(names: list[str], rng: random.Random | None = None) -> Command:
    """Draw one candidate fault command over a fixed membership.

    Each family is picked with equal probability and every node argument is
    drawn uniformly and independently. A send omission may name the same
    node twice; the precondition filters that out.

    Args:
        names: Symbolic names of the cluster members
        rng: Random source (seed it for reproducible runs)

    Returns:
        A Crash or BeginSendOmission command
    """
    if not names:
        raise ValueError("Cannot generate commands for an empty membership")
    rng = rng or random.Random()

    if rng.random() < 0.5:
        return Crash(rng.choice(names))
    return BeginSendOmission(rng.choice(names), rng.choice(names))
