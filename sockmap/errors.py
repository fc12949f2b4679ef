"""
Error types for socket table decoding and process resolution.

Decoders never terminate the process. They raise a categorised
`SocketTableError` and the caller decides whether to abort the run or skip
the offending line.
"""

from enum import Enum


class ErrorCategory(str, Enum):
    TABLE_UNAVAILABLE = "table_unavailable"
    SCHEMA = "schema"
    DECODE = "decode"


class PortwhoError(Exception):
    """Base class for all errors raised by sockmap."""


class SocketTableError(PortwhoError):
    """
    A socket table could not be read or one of its lines could not be parsed.

    Args:
        message (str): Human readable description.
        protocol (str): Table the error came from (tcp, tcp6, udp, udp6).
        line_number (int): 1-based line number inside the table, header included.
    """

    category = ErrorCategory.DECODE

    def __init__(self, message, protocol=None, line_number=None):
        super().__init__(message)
        self.message = message
        self.protocol = protocol
        self.line_number = line_number

    def with_context(self, protocol=None, line_number=None):
        """Fill in location details that were unknown where the error was raised."""
        if self.protocol is None:
            self.protocol = protocol
        if self.line_number is None:
            self.line_number = line_number
        return self

    def __str__(self):
        where = []
        if self.protocol:
            where.append(f"/proc/net/{self.protocol}")
        if self.line_number is not None:
            where.append(f"line {self.line_number}")
        prefix = f"[{self.category.value}] "
        if where:
            return prefix + " ".join(where) + ": " + self.message
        return prefix + self.message


class TableUnavailableError(SocketTableError):
    category = ErrorCategory.TABLE_UNAVAILABLE


class SchemaError(SocketTableError):
    category = ErrorCategory.SCHEMA


class DecodeError(SocketTableError):
    category = ErrorCategory.DECODE


class ProcessGone(PortwhoError):
    """A process directory vanished or became unreadable while it was being scanned."""

    def __init__(self, pid, reason=""):
        super().__init__(f"process {pid} gone: {reason}" if reason else f"process {pid} gone")
        self.pid = pid
