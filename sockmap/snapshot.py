"""
Snapshot assembly.

Reads the socket tables, resolves owners in one process sweep, attaches
usernames and returns the ordered, deduplicated rows. This is the only entry
point the CLI and the kill action need.
"""

import logging
from typing import List

from sockmap.accounts import PASSWD, load_accounts, username_for
from sockmap.dedup import order
from sockmap.inode_resolver import PROC, ProcfsTree, identity_for, resolve_inodes
from sockmap.models import SocketRow
from sockmap.proc_net_parser import PROTOCOLS, read_socket_tables

log = logging.getLogger("sockmap.snapshot")


def take_snapshot(
    protocols=PROTOCOLS,
    proc_root=PROC,
    passwd_path=PASSWD,
    strict: bool = True,
    port: int | None = None,
    listening_only: bool = False,
    tree=None,
) -> List[SocketRow]:
    """
    Build the socket view for this host.

    Args:
        protocols: Tables to read, in order.
        proc_root: procfs mount point.
        passwd_path: Account database.
        strict (bool): Abort on the first malformed table line.
        port (int): Keep only sockets bound to this local port.
        listening_only (bool): Keep only TCP listeners and UDP sockets.
        tree: Process tree source, defaults to ProcfsTree(proc_root).

    Returns:
        List[SocketRow]: sorted by local port, duplicates removed.

    Raises:
        SocketTableError: in strict mode, for any unreadable table or bad line.
    """
    records = read_socket_tables(protocols, proc_root=proc_root, strict=strict)
    if port is not None:
        records = [r for r in records if r.local_port == port]
    if listening_only:
        records = [r for r in records if r.is_listening]

    tree = tree if tree is not None else ProcfsTree(proc_root)
    mapping = resolve_inodes({r.inode for r in records}, tree=tree)
    accounts = load_accounts(passwd_path)
    warned_uids = set()

    rows = [
        SocketRow(
            record=record,
            identity=identity,
            username=username_for(accounts, record.uid, warned_uids),
            port_label=label,
        )
        for record, identity, label in order((r, identity_for(mapping, r.inode)) for r in records)
    ]
    log.info("Snapshot: %d sockets, %d rows after deduplication", len(records), len(rows))
    return rows
