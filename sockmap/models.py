"""
Data model for one socket snapshot.

Nothing here is persisted. Records are built per run from the kernel tables
and thrown away when the run ends, so these are plain frozen dataclasses
rather than ORM models.
"""

from dataclasses import dataclass

from sockmap.fields import is_udp


@dataclass(frozen=True)
class SocketRecord:
    """
    One line of a /proc/net socket table, decoded.
    """
    protocol: str        # tcp, tcp6, udp or udp6
    local_address: str
    local_port: int
    remote_address: str
    remote_port: int
    state: str           # TCP state name, or "n/a" for UDP
    uid: str             # kept as text, that is how /etc/passwd is keyed
    inode: int           # 0 means no descriptor owns it (e.g. TIME_WAIT)

    @property
    def local(self) -> str:
        return f"{self.local_address}:{self.local_port}"

    @property
    def remote(self) -> str:
        return f"{self.remote_address}:{self.remote_port}"

    @property
    def is_listening(self) -> bool:
        # UDP sockets have no LISTEN state; a bound UDP socket is what people mean
        return is_udp(self.protocol) or self.state == "LISTEN"


@dataclass(frozen=True)
class ProcessIdentity:
    pid: int | None
    program_name: str | None

    @property
    def resolved(self) -> bool:
        return self.pid is not None

    def __str__(self):
        if not self.resolved:
            return "-"
        return f"{self.pid}/{self.program_name}"


UNRESOLVED = ProcessIdentity(pid=None, program_name=None)


@dataclass(frozen=True)
class SocketRow:
    """
    A fully resolved, ordered output row.

    `port_label` is the local port as text for the first row at a port and a
    tree marker for the following rows at the same port.
    """
    record: SocketRecord
    identity: ProcessIdentity
    username: str | None
    port_label: str

    @property
    def owner(self) -> str:
        return f"{self.record.uid}/{self.username or '-'}"

    def summary(self):
        """(port, protocol, username, pid, program name)"""
        return (
            self.record.local_port,
            self.record.protocol,
            self.username,
            self.identity.pid,
            self.identity.program_name,
        )
