"""Fault model state for faultline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

FAULTLINE_DIR = ".faultline"


@dataclass(frozen=True)
class FaultModelState:
    """Faults admitted so far in a run.

    Created once per run and discarded at the end. Only the transition
    function produces new states; nothing is ever removed from one. The
    omission map is a read-only view over a private copy.
    """

    active_faults: int = 0
    crashed_nodes: tuple[str, ...] = ()
    send_omissions: Mapping[tuple[str, str], bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "send_omissions", MappingProxyType(dict(self.send_omissions)))
        object.__setattr__(self, "crashed_nodes", tuple(self.crashed_nodes))

    def __hash__(self) -> int:
        return hash((self.active_faults, self.crashed_nodes, frozenset(self.send_omissions.items())))

    def to_dict(self) -> dict:
        """Snapshot for display and run logs."""
        return {
            "active_faults": self.active_faults,
            "crashed_nodes": list(self.crashed_nodes),
            "send_omissions": [
                [source, destination]
                for (source, destination), omitted in self.send_omissions.items()
                if omitted
            ],
        }

    @property
    def omission_count(self) -> int:
        """Number of (source, destination) pairs with an active send omission."""
        return sum(1 for omitted in self.send_omissions.values() if omitted)

    def is_crashed(self, name: str) -> bool:
        """True if the node has been crashed in this run."""
        return name in self.crashed_nodes

    def has_send_omission(self, source: str, destination: str) -> bool:
        """True if messages from source to destination are being dropped."""
        return self.send_omissions.get((source, destination), False)

    def with_crash(self, node: str) -> "FaultModelState":
        """Return a new state with one more fault and `node` crashed."""
        return replace(
            self,
            active_faults=self.active_faults + 1,
            crashed_nodes=self.crashed_nodes + (node,),
        )

    def with_send_omission(self, source: str, destination: str) -> "FaultModelState":
        """Return a new state with one more fault and the pair omitted."""
        send_omissions = dict(self.send_omissions)
        send_omissions[(source, destination)] = True
        return replace(
            self,
            active_faults=self.active_faults + 1,
            send_omissions=send_omissions,
        )


def get_faultline_dir(project_root: Path | None = None) -> Path:
    """Get the .faultline directory path."""
    root = project_root or Path.cwd()
    return root / FAULTLINE_DIR


def ensure_faultline_dir(project_root: Path | None = None) -> Path:
    """Ensure .faultline directory exists, return path."""
    faultline_dir = get_faultline_dir(project_root)
    faultline_dir.mkdir(parents=True, exist_ok=True)
    (faultline_dir / "logs").mkdir(exist_ok=True)
    return faultline_dir
