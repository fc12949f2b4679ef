"""
Field decoders for /proc/net/{tcp,tcp6,udp,udp6}.

The kernel prints addresses as the raw in-memory words of the address in
hex, so on the little-endian hosts we care about every 32-bit word comes out
byte-reversed. Ports and states are plain big-endian hex.
"""

import ipaddress
import re
import socket
import struct

from sockmap.errors import DecodeError

TCP_STATES = (
    "ESTABLISHED",
    "SYN_SENT",
    "SYN_RECV",
    "FIN_WAIT1",
    "FIN_WAIT2",
    "TIME_WAIT",
    "CLOSE",
    "CLOSE_WAIT",
    "LAST_ACK",
    "LISTEN",
    "CLOSING",
)

# UDP is stateless, every UDP row gets this instead of a TCP state name
STATE_NOT_APPLICABLE = "n/a"

_HEX = re.compile(r"[0-9A-Fa-f]+")


def _check_hex(hex_str, length=None, what="field"):
    if not isinstance(hex_str, str) or not _HEX.fullmatch(hex_str):
        raise DecodeError(f"{what} is not hexadecimal: {hex_str!r}")
    if length is not None and len(hex_str) != length:
        raise DecodeError(f"{what} must be {length} hex digits, got {len(hex_str)}: {hex_str!r}")


def is_udp(protocol: str) -> bool:
    return protocol.startswith("udp")


def is_ipv6(protocol: str) -> bool:
    return protocol.endswith("6")


def decode_ipv4(hex_str: str) -> str:
    """
    Convert a little-endian hex IPv4 address to dotted decimal.
    Format: '0100007F' = 127.0.0.1
    """
    _check_hex(hex_str, 8, "IPv4 address")
    ip_int = int(hex_str, 16)
    return socket.inet_ntoa(struct.pack("<I", ip_int))


def decode_ipv6(hex_str: str) -> str:
    """
    Convert a /proc/net/*6 address to its bracketed canonical form.

    The 32 hex digits are four little-endian 32-bit words. Each word is
    byte-reversed, then the 16 bytes are compressed the usual way, so the
    loopback address '00000000000000000000000001000000' becomes '[::1]'.
    IPv4-mapped addresses (v4 traffic on a dual-stack socket) print as the
    plain IPv4 address, e.g. '[127.0.0.1]'.
    """
    _check_hex(hex_str, 32, "IPv6 address")
    raw = bytes.fromhex(hex_str)
    packed = b"".join(raw[i:i + 4][::-1] for i in range(0, 16, 4))
    addr = ipaddress.IPv6Address(packed)
    if addr.ipv4_mapped is not None:
        return f"[{addr.ipv4_mapped}]"
    return f"[{addr.compressed}]"


def decode_port(hex_str: str) -> int:
    """
    Convert hex port to integer.
    Format: Big-endian hex, e.g., '1F90' = 8080
    """
    _check_hex(hex_str, what="port")
    port = int(hex_str, 16)
    if port > 0xFFFF:
        raise DecodeError(f"port out of range: {hex_str!r} ({port})")
    return port


def decode_state(hex_str: str, protocol: str = "tcp") -> str:
    """
    Map the state column to a TCP state name.

    The value is a 1-based index into TCP_STATES. UDP rows always decode to
    STATE_NOT_APPLICABLE whatever byte the kernel printed.

    Raises:
        DecodeError: if a TCP state is not hex or falls outside 1..11.
    """
    if is_udp(protocol):
        return STATE_NOT_APPLICABLE
    _check_hex(hex_str, what="state")
    index = int(hex_str, 16)
    if not 1 <= index <= len(TCP_STATES):
        raise DecodeError(f"unknown state: {index}")
    return TCP_STATES[index - 1]


def decode_address(hex_str: str, protocol: str) -> str:
    if is_ipv6(protocol):
        return decode_ipv6(hex_str)
    return decode_ipv4(hex_str)


def decode_endpoint(field: str, protocol: str):
    """
    Split and decode an 'ADDR:PORT' column.

    Returns:
        tuple: (address, port)
    """
    addr_hex, sep, port_hex = field.partition(":")
    if not sep or ":" in port_hex:
        raise DecodeError(f"expected ADDR:PORT, got {field!r}")
    return decode_address(addr_hex, protocol), decode_port(port_hex)
