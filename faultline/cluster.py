"""Interfaces to the cluster under test, plus an in-process simulated cluster.

The fault injector only talks to a cluster through two facilities:

- lifecycle control: ``stop(identity) -> StopResult``
- a per-node fault-injection registry: ``add_interposition(key, rule) -> outcome``

`LocalCluster` implements both in memory so fault sequences can be driven
without starting real node processes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Literal, Protocol

from faultline.interposition import SUPPRESSED, InterpositionRule
from faultline.registry import NodeRegistry

StopStatus = Literal["ok", "stop_timeout", "not_started", "error"]

OK = "ok"
NODEDOWN = "nodedown"


@dataclass(frozen=True)
class StopResult:
    """Outcome of asking the lifecycle facility to stop a node."""

    status: StopStatus
    detail: str = ""


class LifecycleControl(Protocol):
    def stop(self, identity: Hashable) -> StopResult:
        ...


class FaultInjectionRegistry(Protocol):
    def add_interposition(self, key: Hashable, rule: InterpositionRule) -> str:
        ...


class Cluster(LifecycleControl, Protocol):
    def fault_registry(self, identity: Hashable) -> FaultInjectionRegistry:
        ...


class CompositeCluster:
    """A cluster assembled from separate facilities.

    Stops go to `lifecycle`; `fault_registries` maps a node identity to the
    registry that installs rules on that node.
    """

    def __init__(
        self,
        lifecycle: LifecycleControl,
        fault_registries: Callable[[Hashable], FaultInjectionRegistry],
    ):
        self.lifecycle = lifecycle
        self.fault_registries = fault_registries

    def stop(self, identity: Hashable) -> StopResult:
        return self.lifecycle.stop(identity)

    def fault_registry(self, identity: Hashable) -> FaultInjectionRegistry:
        return self.fault_registries(identity)


@dataclass
class LocalNode:
    """A simulated cluster member."""

    name: str
    identity: str
    running: bool = True
    interpositions: dict[Hashable, InterpositionRule] = field(default_factory=dict)
    inbox: list[tuple[str, Any]] = field(default_factory=list)

    def add_interposition(self, key: Hashable, rule: InterpositionRule) -> str:
        """Install a rule; re-using a key replaces the previous rule."""
        if not self.running:
            return NODEDOWN
        self.interpositions[key] = rule
        return OK

    def _apply(self, event_kind: str, peer: str, message: Any) -> Any:
        for rule in list(self.interpositions.values()):
            message = rule.decide(event_kind, peer, message)
            if message is SUPPRESSED:
                return SUPPRESSED
        return message

    def forward_message(self, peer: str, message: Any) -> Any:
        """Run an outbound message through the installed rules."""
        return self._apply("forward_message", peer, message)

    def receive_message(self, peer: str, message: Any) -> Any:
        """Run an inbound message through the installed rules."""
        return self._apply("receive_message", peer, message)


class LocalCluster:
    """In-memory cluster used by the shell and the tests."""

    def __init__(self, names: list[str], host: str = "127.0.0.1"):
        self.nodes: dict[str, LocalNode] = {}
        for name in names:
            identity = f"{name}@{host}"
            self.nodes[identity] = LocalNode(name=name, identity=identity)

    def registry(self) -> NodeRegistry[str]:
        """Build a fresh name table for this cluster."""
        return NodeRegistry({node.name: identity for identity, node in self.nodes.items()})

    def node(self, identity: Hashable) -> LocalNode:
        try:
            return self.nodes[identity]
        except KeyError:
            raise KeyError(f"No such node: {identity}") from None

    def stop(self, identity: Hashable) -> StopResult:
        node = self.nodes.get(identity)
        if node is None:
            return StopResult("error", f"no such node {identity}")
        if not node.running:
            return StopResult("not_started", identity)
        node.running = False
        return StopResult("ok", identity)

    def fault_registry(self, identity: Hashable) -> FaultInjectionRegistry:
        return self.node(identity)

    def send(self, source: Hashable, destination: Hashable, message: Any) -> bool:
        """Deliver a message between two nodes.

        Returns:
            True if the message reached the destination's inbox
        """
        sender = self.node(source)
        receiver = self.node(destination)
        if not sender.running or not receiver.running:
            return False

        outbound = sender.forward_message(receiver.identity, message)
        if outbound is SUPPRESSED:
            return False
        inbound = receiver.receive_message(sender.identity, outbound)
        if inbound is SUPPRESSED:
            return False

        receiver.inbox.append((sender.identity, inbound))
        return True
