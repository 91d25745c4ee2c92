"""Fault injection actions: crash a node, begin a send omission."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable

from faultline.cluster import OK, StopResult
from faultline.commands import BeginSendOmission, Crash
from faultline.errors import CrashFailedError, RetryExhaustedError, UnsupportedCommandError
from faultline.fault_logging import DiagnosticsLog
from faultline.interposition import SendOmissionRule
from faultline.retry import RetryPolicy, RetryTracker

if TYPE_CHECKING:
    from faultline.cluster import Cluster, LifecycleControl
    from faultline.commands import Command
    from faultline.registry import NodeRegistry


def crash(
    name: str,
    registry: "NodeRegistry",
    lifecycle: "LifecycleControl",
    policy: RetryPolicy | None = None,
    log: DiagnosticsLog | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """Crash the node.

    A crash is a stop that doesn't wait for all members to know about it.
    A node that was never started (or already stopped) counts as crashed.

    Args:
        name: Symbolic name of the node
        registry: Name table for the run
        lifecycle: Facility that stops nodes
        policy: Retry policy for stop timeouts
        log: Diagnostics for the run
        sleep: Sleep function used for backoff

    Returns:
        "ok"

    Raises:
        RetryExhaustedError: Every attempt timed out
        CrashFailedError: Stop failed with any other outcome
    """
    log = log or DiagnosticsLog()
    log.debug(f"crashing node: {name}")

    identity = registry.resolve(name)
    tracker = RetryTracker(policy=policy or RetryPolicy(), sleep=sleep)

    while True:
        tracker.record_attempt()
        result: StopResult = lifecycle.stop(identity)

        if result.status == "ok":
            return OK
        if result.status == "not_started":
            log.debug(f"node {name} was not running, treating as crashed")
            return OK
        if result.status != "stop_timeout":
            log.error(f"Failed to stop node {name}: {result.status} {result.detail}".rstrip())
            raise CrashFailedError(name, result.status, result.detail)

        log.warning(f"Failed to stop node {name}: stop_timeout! (attempt {tracker.attempts})")
        if tracker.exhausted:
            raise RetryExhaustedError(name, tracker.attempts)
        tracker.wait()


def begin_send_omission(
    source: str,
    destination: str,
    registry: "NodeRegistry",
    cluster: "Cluster",
    log: DiagnosticsLog | None = None,
) -> str:
    """Create a send omission failure.

    Installs a rule on the source node that drops everything it forwards to
    the destination. The effect lasts for the rest of the run.

    Returns:
        The result of installing the rule ("ok" on success)
    """
    log = log or DiagnosticsLog()
    log.debug(f"begin_send_omission: source_node {source} destination_node {destination}")

    # Rules match on live identities, not symbolic names.
    destination_identity = registry.resolve(destination)
    source_identity = registry.resolve(source)

    rule = SendOmissionRule(source=source_identity, destination=destination_identity, log=log)
    return cluster.fault_registry(source_identity).add_interposition(rule.key, rule)


def execute(
    command: "Command",
    registry: "NodeRegistry",
    cluster: "Cluster",
    policy: RetryPolicy | None = None,
    log: DiagnosticsLog | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """Run a fault command against the cluster."""
    if isinstance(command, Crash):
        return crash(command.node, registry, cluster, policy=policy, log=log, sleep=sleep)
    if isinstance(command, BeginSendOmission):
        return begin_send_omission(command.source, command.destination, registry, cluster, log=log)
    raise UnsupportedCommandError(command)
