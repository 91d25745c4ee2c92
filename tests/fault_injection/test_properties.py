"""Property-based tests for the fault model.

Tests that invariants hold after any sequence of fault commands, including
random sequences, hypothesis-generated sequences, and chaos runs where the
lifecycle facility misbehaves.
"""

from __future__ import annotations

import itertools
import random

import pytest
from hypothesis import given, settings, strategies as st

from faultline.cluster import CompositeCluster, LocalCluster, StopResult
from faultline.commands import BeginSendOmission, Crash, node_names
from faultline.fault_logging import DiagnosticsLog
from faultline.model import FaultModel
from faultline.runner import FaultRunner
from tests.fault_injection.invariants import assert_invariants, check_all_invariants, check_step
from tests.fixtures.mock_lifecycle import MockLifecycle


def _no_sleep(seconds: float) -> None:
    pass


def _runner(num_nodes: int) -> FaultRunner:
    model = FaultModel(num_nodes, log=DiagnosticsLog(debug_enabled=False))
    cluster = LocalCluster(model.names)
    return FaultRunner(model, cluster, cluster.registry(), sleep=_no_sleep)


def _step_checked(runner: FaultRunner, command) -> None:
    """Run one command and fail on any invariant violation."""
    before = runner.state
    record = runner.step(command)
    violations = check_step(before, record, runner.state, runner.model.num_nodes)
    violations += check_all_invariants(runner.state, runner.history)
    if violations:
        pytest.fail(
            f"Invariant violations after {command}:\n"
            f"History: {[str(r) for r in runner.history]}\n"
            f"Violations: {[str(v) for v in violations]}"
        )


def commands(num_nodes: int):
    """Hypothesis strategy for fault commands over node_1 .. node_N."""
    names = st.sampled_from(node_names(num_nodes))
    return st.one_of(
        st.builds(Crash, names),
        st.builds(BeginSendOmission, names, names),
    )


class TestRandomCommandSequences:
    """Tests with seeded random command sequences."""

    @pytest.mark.parametrize("num_nodes", [1, 2, 3, 5])
    @pytest.mark.parametrize("seed", range(5))
    def test_random_commands_maintain_invariants(self, num_nodes: int, seed: int):
        runner = _runner(num_nodes)
        rng = random.Random(seed)

        for _ in range(60):
            _step_checked(runner, runner.model.command(rng))

        assert not runner.falsified

    def test_budget_saturates(self):
        """Long runs end with exactly N faults admitted: the last one at active == N-1."""
        runner = _runner(3)
        rng = random.Random(99)

        for _ in range(200):
            _step_checked(runner, runner.model.command(rng))

        assert runner.state.active_faults == 3


class TestChaosLifecycle:
    """Runs where stopping nodes is flaky but recoverable."""

    def test_flaky_stops_keep_invariants(self, registry):
        rng = random.Random(7)
        # Never more than two timeouts in a row
        outcomes = itertools.cycle(["stop_timeout", "ok", "stop_timeout", "stop_timeout", "not_started"])

        def flaky_stop(identity):
            return StopResult(next(outcomes))

        lifecycle = MockLifecycle().configure("custom", custom_fn=flaky_stop)
        model = FaultModel(3, log=DiagnosticsLog(debug_enabled=False))
        cluster = LocalCluster(model.names)

        # Crashes go through the flaky mock; omissions through the cluster
        target = CompositeCluster(lifecycle, cluster.fault_registry)

        runner = FaultRunner(model, target, registry, sleep=_no_sleep)
        for _ in range(50):
            _step_checked(runner, model.command(rng))

        assert not runner.falsified
        crashes = [r for r in runner.history if r.admitted and isinstance(r.command, Crash)]
        assert lifecycle.call_count >= len(crashes)


class TestHypothesisPropertyBased:
    """Property-based tests using Hypothesis."""

    @given(st.lists(commands(3), min_size=1, max_size=40))
    @settings(max_examples=200, deadline=None)
    def test_any_command_sequence(self, sequence):
        """Any sequence of commands maintains invariants."""
        runner = _runner(3)
        for command in sequence:
            _step_checked(runner, command)
        assert_invariants(runner.state, runner.history)

    @given(st.integers(min_value=1, max_value=6).flatmap(
        lambda n: st.tuples(st.just(n), st.lists(commands(n), max_size=30))
    ))
    @settings(max_examples=100, deadline=None)
    def test_any_cluster_size(self, case):
        num_nodes, sequence = case
        runner = _runner(num_nodes)
        for command in sequence:
            _step_checked(runner, command)
        assert runner.state.active_faults <= num_nodes

    @given(st.lists(commands(3), max_size=40))
    @settings(max_examples=100, deadline=None)
    def test_admitted_omissions_drop_messages(self, sequence):
        """Every recorded omission drops traffic on that edge in the cluster."""
        runner = _runner(3)
        for command in sequence:
            runner.step(command)

        cluster = runner.cluster
        registry = runner.registry
        for (source, destination), omitted in runner.state.send_omissions.items():
            assert omitted
            src, dst = registry.resolve(source), registry.resolve(destination)
            if cluster.node(src).running and cluster.node(dst).running:
                assert cluster.send(src, dst, "ping") is False
