"""
Reader for /proc/net/tcp, tcp6, udp and udp6.

Each table has one header line followed by one whitespace separated line per
socket. Columns are positional and must match the kernel's layout exactly:

  sl  local_address rem_address   st tx_queue rx_queue tr tm->when retrnsmt   uid  timeout inode
  0: 0100007F:0CEA 00000000:0000 0A 00000000:00000000 00:00000000 00000000  1000        0 28990 1 ...

A line that does not fit is an error, not something to skip quietly. Parsing
returns a `ParseResult` so the caller chooses between aborting (strict) and
skipping the line with a warning (lenient).
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List

from sockmap.errors import DecodeError, SchemaError, SocketTableError, TableUnavailableError
from sockmap.fields import decode_endpoint, decode_state
from sockmap.models import SocketRecord

log = logging.getLogger("sockmap.proc_net_parser")

PROC = Path("/proc")
PROTOCOLS = ("tcp", "tcp6", "udp", "udp6")

# 0-based column positions
LOCAL_COL = 1
REMOTE_COL = 2
STATE_COL = 3
UID_COL = 7
INODE_COL = 9
MIN_COLUMNS = INODE_COL + 1


@dataclass(frozen=True)
class ParseResult:
    """Either a decoded record or the error explaining why there is none."""
    record: SocketRecord | None = None
    error: SocketTableError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> SocketRecord:
        if self.error is not None:
            raise self.error
        return self.record


def table_path(protocol: str, proc_root=PROC) -> Path:
    if protocol not in PROTOCOLS:
        raise ValueError(f"unknown protocol {protocol!r}, expected one of {', '.join(PROTOCOLS)}")
    return Path(proc_root) / "net" / protocol


def parse_socket_line(line: str, protocol: str) -> ParseResult:
    """
    Parse a single data line of a socket table.

    Args:
        line (str): Raw line, trailing newline allowed.
        protocol (str): Table the line came from; selects v4/v6 and TCP/UDP decoding.

    Returns:
        ParseResult: the record, or a SchemaError / DecodeError.
    """
    parts = line.split()
    if len(parts) < MIN_COLUMNS:
        return ParseResult(error=SchemaError(
            f"expected at least {MIN_COLUMNS} columns, got {len(parts)}",
            protocol=protocol,
        ))

    uid = parts[UID_COL]
    if not uid.isdigit():
        return ParseResult(error=SchemaError(f"uid column is not numeric: {uid!r}", protocol=protocol))
    inode_str = parts[INODE_COL]
    if not inode_str.isdigit():
        return ParseResult(error=SchemaError(f"inode column is not numeric: {inode_str!r}", protocol=protocol))

    try:
        local_address, local_port = decode_endpoint(parts[LOCAL_COL], protocol)
        remote_address, remote_port = decode_endpoint(parts[REMOTE_COL], protocol)
        state = decode_state(parts[STATE_COL], protocol)
    except DecodeError as e:
        return ParseResult(error=e.with_context(protocol=protocol))

    return ParseResult(record=SocketRecord(
        protocol=protocol,
        local_address=local_address,
        local_port=local_port,
        remote_address=remote_address,
        remote_port=remote_port,
        state=state,
        uid=uid,
        inode=int(inode_str),
    ))


def iter_socket_table(protocol: str, proc_root=PROC) -> Iterator[ParseResult]:
    """
    Yield one ParseResult per data line of /proc/net/<protocol>.

    Raises:
        TableUnavailableError: if the table cannot be opened or read.
    """
    path = table_path(protocol, proc_root)
    try:
        with open(path, "r", encoding="ascii", errors="replace") as f:
            header = f.readline()
            if not header:
                return
            for line_number, line in enumerate(f, start=2):
                if not line.strip():
                    continue
                result = parse_socket_line(line, protocol)
                if result.error is not None:
                    result.error.with_context(protocol=protocol, line_number=line_number)
                yield result
    except OSError as e:
        raise TableUnavailableError(f"cannot read {path}: {e.strerror or e}", protocol=protocol) from e


def read_socket_table(protocol: str, proc_root=PROC, strict: bool = True) -> List[SocketRecord]:
    """
    Read every socket of one protocol table.

    Args:
        protocol (str): tcp, tcp6, udp or udp6.
        proc_root: procfs mount point, normally /proc.
        strict (bool): raise on the first bad line instead of skipping it.

    Returns:
        List[SocketRecord]: records in table order.
    """
    records = []
    for result in iter_socket_table(protocol, proc_root):
        if result.ok:
            records.append(result.record)
        elif strict:
            raise result.error
        else:
            log.warning("Skipping unparsable socket line: %s", result.error)
    log.debug("Read %d sockets from %s", len(records), table_path(protocol, proc_root))
    return records


def read_socket_tables(protocols=PROTOCOLS, proc_root=PROC, strict: bool = True) -> List[SocketRecord]:
    """
    Read several tables in the given order.

    In lenient mode a missing table (e.g. tcp6 on a host with IPv6 disabled)
    is logged and skipped; in strict mode it is fatal like any other error.
    """
    records: List[SocketRecord] = []
    for protocol in protocols:
        try:
            records.extend(read_socket_table(protocol, proc_root, strict=strict))
        except TableUnavailableError as e:
            if strict:
                raise
            log.warning("Skipping unavailable socket table: %s", e)
    return records
