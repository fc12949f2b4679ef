"""
Deduplication and ordering of resolved sockets.

A listener usually binds the same port more than once (0.0.0.0 and [::],
or several workers sharing the socket), which shows up as several rows for
one "process owns port" fact. Rows are grouped by (pid, local port,
protocol) and the first one seen is kept. The protocol is compared as
recorded, so tcp and tcp6 stay separate rows.
"""

from typing import Iterable, List, Sequence, Tuple

from sockmap.models import ProcessIdentity, SocketRecord

# port column markers for repeated ports
MORE_FOLLOW = "├─"
LAST_AT_PORT = "└─"

Pair = Tuple[SocketRecord, ProcessIdentity]


def dedup_key(record: SocketRecord, identity: ProcessIdentity):
    """Grouping key, or None for unresolved sockets which are never merged."""
    if not identity.resolved:
        return None
    return (identity.pid, record.local_port, record.protocol)


def deduplicate(pairs: Iterable[Pair]) -> List[Pair]:
    seen = set()
    kept = []
    for record, identity in pairs:
        key = dedup_key(record, identity)
        if key is not None:
            if key in seen:
                continue
            seen.add(key)
        kept.append((record, identity))
    return kept


def sort_by_port(pairs: Iterable[Pair]) -> List[Pair]:
    # sorted() is stable, equal ports keep discovery order
    return sorted(pairs, key=lambda pair: pair[0].local_port)


def port_labels(ports: Sequence[int]) -> List[str]:
    """
    Port column labels for an already sorted port sequence.

    The first row of a run of equal ports shows the number; the rest show
    MORE_FOLLOW, or LAST_AT_PORT on the final row of the run.

    >>> port_labels([22, 80, 80, 80, 443])
    ['22', '80', '├─', '└─', '443']
    """
    labels = []
    for i, port in enumerate(ports):
        if i > 0 and ports[i - 1] == port:
            last = i + 1 == len(ports) or ports[i + 1] != port
            labels.append(LAST_AT_PORT if last else MORE_FOLLOW)
        else:
            labels.append(str(port))
    return labels


def order(pairs: Iterable[Pair]) -> List[Tuple[SocketRecord, ProcessIdentity, str]]:
    """Deduplicate, sort by local port and attach port labels."""
    ordered = sort_by_port(deduplicate(pairs))
    labels = port_labels([record.local_port for record, _ in ordered])
    return [(record, identity, label) for (record, identity), label in zip(ordered, labels)]
