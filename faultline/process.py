"""Lifecycle control for cluster members running as local OS processes."""

from __future__ import annotations

import os
import signal
import time
from typing import Callable

from faultline.cluster import StopResult


def is_process_running(pid: int) -> bool:
    """Check if a process with the given PID is running.

    Returns True if the process exists, False otherwise.
    """
    try:
        # Send signal 0 to check if process exists (doesn't actually send a signal)
        os.kill(pid, 0)
        return True
    except ProcessLookupError:
        return False
    except PermissionError:
        # Process exists but we don't have permission to signal it
        return True


def has_exited(pid: int) -> bool:
    """Check if a stopped process is gone.

    Our own children are reaped, since an unreaped child still answers
    signal 0. Any other PID falls back to is_process_running.
    """
    try:
        reaped, _ = os.waitpid(pid, os.WNOHANG)
    except ChildProcessError:
        return not is_process_running(pid)
    return reaped == pid


class ProcessLifecycle:
    """Stops node processes by PID.

    Node identities are PIDs. A stop sends SIGTERM and waits up to
    `stop_timeout` seconds for the process to go away.
    """

    def __init__(
        self,
        stop_timeout: float = 5.0,
        poll_interval: float = 0.1,
        sig: int = signal.SIGTERM,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.stop_timeout = stop_timeout
        self.poll_interval = poll_interval
        self.sig = sig
        self._clock = clock
        self._sleep = sleep

    def stop(self, identity: int) -> StopResult:
        try:
            os.kill(identity, self.sig)
        except ProcessLookupError:
            return StopResult("not_started", f"pid {identity}")
        except PermissionError as e:
            return StopResult("error", f"pid {identity}: {e}")

        deadline = self._clock() + self.stop_timeout
        while not has_exited(identity):
            if self._clock() >= deadline:
                return StopResult("stop_timeout", f"pid {identity}")
            self._sleep(self.poll_interval)

        return StopResult("ok", f"pid {identity}")
