"""Tests for faultline.interposition - send omission rules."""

from __future__ import annotations

import pytest

from faultline.fault_logging import DiagnosticsLog
from faultline.interposition import SEND_OMISSION, SUPPRESSED, SendOmissionRule


@pytest.fixture
def rule(diagnostics: DiagnosticsLog) -> SendOmissionRule:
    """Rule installed on node_2 dropping everything sent to node_3."""
    return SendOmissionRule(source="node_2", destination="node_3", log=diagnostics)


class TestSendOmissionRule:
    """Test the decision function of a send omission rule."""

    def test_key(self, rule: SendOmissionRule):
        assert rule.key == (SEND_OMISSION, "node_3")

    def test_drops_forward_to_destination(self, rule: SendOmissionRule):
        assert rule.decide("forward_message", "node_3", {"id": 1}) is SUPPRESSED

    def test_passes_forward_to_other_peer(self, rule: SendOmissionRule):
        message = {"id": 2}
        assert rule.decide("forward_message", "node_4", message) is message

    @pytest.mark.parametrize("peer", ["node_1", "node_3", "node_4"])
    def test_receive_always_passes(self, rule: SendOmissionRule, peer: str):
        message = ("hello", peer)
        assert rule.decide("receive_message", peer, message) is message

    def test_unknown_event_kind(self, rule: SendOmissionRule):
        with pytest.raises(ValueError, match="Unknown event kind"):
            rule.decide("broadcast", "node_3", "m")

    def test_logs_decisions(self, rule: SendOmissionRule, diagnostics: DiagnosticsLog):
        rule.decide("forward_message", "node_3", "m")
        rule.decide("forward_message", "node_1", "m")

        messages = diagnostics.messages("debug")
        assert any("dropping packet from node_2 to node_3" in m for m in messages)
        assert any("allowing message" in m and "node_1" in m for m in messages)

    def test_works_without_log(self):
        rule = SendOmissionRule(source="a", destination="b")
        assert rule.decide("forward_message", "b", "m") is SUPPRESSED
        assert rule.decide("forward_message", "c", "m") == "m"
