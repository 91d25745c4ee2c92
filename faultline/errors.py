"""Exceptions raised by the fault injection engine."""

from __future__ import annotations


class FaultInjectionError(Exception):
    """Base class for all faultline errors."""


class UnknownNodeError(FaultInjectionError, KeyError):
    """A symbolic node name has no live identity in the registry."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown node: {self.name}"


class UnsupportedCommandError(FaultInjectionError):
    """A command outside the fault command set reached the injector."""

    def __init__(self, command: object):
        super().__init__(f"Unsupported fault command: {command!r}")
        self.command = command


class CrashFailedError(FaultInjectionError):
    """Stopping a node failed with a non-retryable outcome.

    This aborts the run; it is not a falsified postcondition.
    """

    def __init__(self, node: str, status: str, detail: str = ""):
        message = f"Failed to stop node {node}: {status}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)
        self.node = node
        self.status = status
        self.detail = detail


class RetryExhaustedError(FaultInjectionError):
    """Stopping a node kept timing out until the retry policy gave up."""

    def __init__(self, node: str, attempts: int):
        super().__init__(f"Failed to stop node {node}: stop_timeout after {attempts} attempts")
        self.node = node
        self.attempts = attempts
