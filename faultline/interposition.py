"""Message interception rules installed on live nodes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Hashable, Literal, Protocol

from faultline.fault_logging import DiagnosticsLog

EventKind = Literal["forward_message", "receive_message"]

# What a rule returns to drop a message.
SUPPRESSED = None

SEND_OMISSION = "send_omission"


class InterpositionRule(Protocol):
    """Decides what happens to one in-flight message event."""

    def decide(self, event_kind: EventKind, peer: Hashable, message: Any) -> Any:
        """Return the message to deliver, or SUPPRESSED to drop it."""
        ...


@dataclass
class SendOmissionRule:
    """Drops outbound messages addressed to one destination.

    Inbound traffic and messages to every other peer pass through unchanged.
    """

    source: Hashable
    destination: Hashable
    log: DiagnosticsLog | None = None

    @property
    def key(self) -> tuple[str, Hashable]:
        """Key this rule is installed under on the source node."""
        return (SEND_OMISSION, self.destination)

    def decide(self, event_kind: EventKind, peer: Hashable, message: Any) -> Any:
        if event_kind == "forward_message":
            if peer == self.destination:
                if self.log:
                    self.log.debug(
                        f"{self.source}: dropping packet from {self.source} to {self.destination} "
                        "due to interposition."
                    )
                return SUPPRESSED
            if self.log:
                self.log.debug(
                    f"{self.source}: allowing message, doesn't match interposition as destination "
                    f"is {peer} and not {self.destination}"
                )
            return message
        if event_kind == "receive_message":
            return message
        raise ValueError(f"Unknown event kind: {event_kind}")
