"""
Socket inode to process resolution.

This module maps socket inodes from the /proc/net tables to the processes
holding them. The only way to do that from procfs is to readlink every
/proc/<pid>/fd/* entry and look for `socket:[<inode>]`, which is by far the
most expensive step of a run. So all the inodes of interest are resolved in
one sweep, and the sweep stops as soon as none are left.

Processes exiting mid-sweep and fd tables we are not allowed to read (other
users' processes without root) are normal and skipped.
"""

import logging
import os
import re
from pathlib import Path
from typing import Dict, Iterable, Iterator

from sockmap.errors import ProcessGone
from sockmap.models import UNRESOLVED, ProcessIdentity

log = logging.getLogger("sockmap.inode_resolver")

PROC = Path("/proc")

SOCKET_RE = re.compile(r"socket:\[(\d+)\]")


def socket_inode(link_target: str) -> int | None:
    """Return the inode encoded in an fd link target, or None if it is not a socket."""
    m = SOCKET_RE.fullmatch(link_target)
    if not m:
        return None
    return int(m.group(1))


class ProcfsTree:
    """
    Read-only view of the process tree under a procfs root.
    """

    def __init__(self, root=PROC):
        self.root = Path(root)

    def pids(self) -> Iterator[int]:
        """Yield numeric process directory names, lazily."""
        with os.scandir(self.root) as it:
            for entry in it:
                if entry.name.isdigit():
                    yield int(entry.name)

    def program_name(self, pid: int) -> str:
        try:
            with open(self.root / str(pid) / "comm", "r", encoding="utf-8", errors="replace") as f:
                return f.readline().rstrip("\n")
        except OSError as e:
            raise ProcessGone(pid, e.strerror or str(e)) from e

    def fd_targets(self, pid: int) -> Iterator[str]:
        """
        Yield the link target of each open descriptor of `pid`.

        Descriptors closed between listing and readlink are skipped. Losing
        the whole fd directory raises ProcessGone.
        """
        fd_dir = self.root / str(pid) / "fd"
        try:
            names = os.listdir(fd_dir)
        except OSError as e:
            raise ProcessGone(pid, e.strerror or str(e)) from e
        for name in names:
            try:
                yield os.readlink(fd_dir / name)
            except OSError:
                continue


def resolve_inodes(targets: Iterable[int], tree=None) -> Dict[int, ProcessIdentity]:
    """
    Resolve socket inodes to the processes that hold them, in a single sweep.

    Args:
        targets (Iterable[int]): Inodes to look for. Inode 0 is ignored, no
            descriptor ever points at it.
        tree: Process tree source; defaults to ProcfsTree() on /proc.

    Returns:
        Dict[int, ProcessIdentity]: one entry per resolved inode. Inodes that
        were never found are absent; see `identity_for`.
    """
    tree = tree if tree is not None else ProcfsTree()
    remaining = {inode for inode in targets if inode}
    mapping: Dict[int, ProcessIdentity] = {}
    if not remaining:
        return mapping

    visited = 0
    for pid in tree.pids():
        visited += 1
        identity = None
        try:
            for target in tree.fd_targets(pid):
                inode = socket_inode(target)
                if inode is None or inode not in remaining:
                    continue
                if identity is None:
                    identity = ProcessIdentity(pid=pid, program_name=tree.program_name(pid))
                mapping[inode] = identity
                remaining.discard(inode)
                if not remaining:
                    break
        except ProcessGone as e:
            log.debug("Skipping pid %s: %s", pid, e)
            continue
        if not remaining:
            break

    log.debug(
        "Resolved %d inodes after visiting %d processes, %d unresolved",
        len(mapping), visited, len(remaining),
    )
    return mapping


def identity_for(mapping: Dict[int, ProcessIdentity], inode: int) -> ProcessIdentity:
    return mapping.get(inode, UNRESOLVED)
