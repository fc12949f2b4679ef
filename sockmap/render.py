"""
Console rendering of socket rows.
"""

from typing import List, Sequence

from rich.table import Table

from sockmap.models import SocketRow

COLUMNS = ("#", "Port", "Proto", "Local Address", "Foreign Address", "State", "UID/Username", "PID/Programname")


def build_table(rows: Sequence[SocketRow], title: str | None = None) -> Table:
    table = Table(title=title, box=None, header_style="bold", pad_edge=False)
    for name in COLUMNS:
        table.add_column(name, justify="right" if name in ("#", "Port") else "left", no_wrap=True)
    for i, row in enumerate(rows, start=1):
        table.add_row(
            str(i),
            row.port_label,
            row.record.protocol,
            row.record.local,
            row.record.remote,
            row.record.state,
            row.owner,
            str(row.identity),
        )
    return table


def rows_as_dicts(rows: Sequence[SocketRow]) -> List[dict]:
    """JSON friendly view; unresolved values are null."""
    return [
        {
            "protocol": row.record.protocol,
            "local_address": row.record.local_address,
            "local_port": row.record.local_port,
            "remote_address": row.record.remote_address,
            "remote_port": row.record.remote_port,
            "state": row.record.state,
            "uid": row.record.uid,
            "username": row.username,
            "inode": row.record.inode,
            "pid": row.identity.pid,
            "program_name": row.identity.program_name,
        }
        for row in rows
    ]
