"""
Kill-by-port.

Terminates the processes that own a local port. Failures are reported per
process and never raised; a port with no resolved owner is not an error,
there is simply nothing to kill.
"""

import logging
import os
import signal
from dataclasses import dataclass
from typing import Iterable, List

import psutil

from sockmap.models import ProcessIdentity, SocketRow

log = logging.getLogger("sockmap.killer")

# /proc/<pid>/comm holds at most TASK_COMM_LEN - 1 characters
COMM_LEN = 15


@dataclass
class KillResult:
    """
    Outcome of one termination attempt.
    """
    pid: int
    program_name: str
    ok: bool
    message: str          # human readable outcome, e.g. "terminated" or "access denied"
    forced: bool = False  # escalated to SIGKILL after the timeout


def parse_signal(name) -> signal.Signals:
    """
    Accept 'TERM', 'SIGTERM', 'term' or '15'.
    """
    if isinstance(name, signal.Signals):
        return name
    text = str(name).strip().upper()
    if text.isdigit():
        return signal.Signals(int(text))
    if not text.startswith("SIG"):
        text = "SIG" + text
    try:
        return signal.Signals[text]
    except KeyError:
        raise ValueError(f"unknown signal: {name}") from None


def same_program(current: str, resolved: str) -> bool:
    """
    Compare a psutil name with one read from comm.

    psutil expands names the kernel cut to 15 characters, so both sides are
    compared at comm length.
    """
    return current[:COMM_LEN] == resolved[:COMM_LEN]


def owners_of_port(rows: Iterable[SocketRow], port: int) -> List[ProcessIdentity]:
    """Distinct resolved owners of a local port, in discovery order."""
    owners = []
    seen = set()
    for row in rows:
        if row.record.local_port != port or not row.identity.resolved:
            continue
        if row.identity.pid in seen:
            continue
        seen.add(row.identity.pid)
        owners.append(row.identity)
    return owners


def kill_process(identity: ProcessIdentity, sig=signal.SIGTERM, timeout: float = 3.0, force: bool = False) -> KillResult:
    """
    Signal one process and wait up to `timeout` seconds for it to exit.

    Args:
        identity (ProcessIdentity): A resolved owner.
        sig: Signal to send first.
        timeout (float): Seconds to wait; 0 sends the signal without waiting.
        force (bool): Send SIGKILL if the process is still alive after the wait.

    Returns:
        KillResult
    """
    pid, name = identity.pid, identity.program_name or "?"

    if pid == os.getpid():
        return KillResult(pid, name, False, "refusing to signal ourselves")

    try:
        proc = psutil.Process(pid)
        # pid reuse guard: the owner we resolved must still be the same program
        current = proc.name()
        if identity.program_name and not same_program(current, identity.program_name):
            return KillResult(pid, name, False, f"pid now belongs to {current}")
        proc.send_signal(sig)
        log.info("Sent %s to %s (pid %s)", sig.name, name, pid)

        if timeout <= 0:
            return KillResult(pid, name, True, f"sent {sig.name}")

        _, alive = psutil.wait_procs([proc], timeout=timeout)
        if not alive:
            return KillResult(pid, name, True, "terminated")
        if not force:
            return KillResult(pid, name, False, f"still running after {timeout:g}s")

        proc.kill()
        _, alive = psutil.wait_procs([proc], timeout=timeout)
        if alive:
            return KillResult(pid, name, False, "still running after SIGKILL", forced=True)
        return KillResult(pid, name, True, "killed", forced=True)

    except psutil.NoSuchProcess:
        return KillResult(pid, name, True, "already exited")
    except psutil.AccessDenied:
        log.warning("Access denied signalling %s (pid %s)", name, pid)
        return KillResult(pid, name, False, "access denied")


def kill_owners(owners: Iterable[ProcessIdentity], sig=signal.SIGTERM, timeout: float = 3.0, force: bool = False) -> List[KillResult]:
    return [kill_process(o, sig=sig, timeout=timeout, force=force) for o in owners]
