"""
Helpers shared by the sockets and killport commands.
"""

import logging
import os

from django.conf import settings
from django.core.management.base import CommandError

from sockmap import settings_api
from sockmap.proc_net_parser import PROTOCOLS


def is_root():
    return hasattr(os, "geteuid") and os.geteuid() == 0


def parse_port(text) -> int:
    try:
        port = int(str(text).strip(), 10)
    except (TypeError, ValueError):
        raise CommandError(f"Invalid port {text!r}: expected a number between 0 and 65535")
    if not 0 <= port <= 0xFFFF:
        raise CommandError(f"Invalid port {port}: expected a number between 0 and 65535")
    return port


def add_source_arguments(parser):
    parser.add_argument(
        "--protocol",
        action="append",
        choices=PROTOCOLS,
        dest="protocols",
        help="Socket table to read; repeat for several. Default from scan.protocols.",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Skip malformed table lines and missing tables instead of aborting.",
    )
    parser.add_argument("--proc-root", default=None, help="procfs mount point (default: /proc)")
    parser.add_argument("--passwd", default=None, help="Account database (default: /etc/passwd)")


def source_options(options) -> dict:
    """Keyword arguments for take_snapshot() from command options and settings."""
    protocols = options.get("protocols") or settings_api.get_list("scan.protocols", list(PROTOCOLS))
    unknown = [p for p in protocols if p not in PROTOCOLS]
    if unknown:
        raise CommandError(f"Unknown protocol(s) in scan.protocols: {', '.join(unknown)}")
    strict = settings_api.get_bool("scan.strict", True) and not options.get("lenient")
    return {
        "protocols": tuple(protocols),
        "proc_root": options.get("proc_root") or settings.PORTWHO_PROC_ROOT,
        "passwd_path": options.get("passwd") or settings.PORTWHO_PASSWD_FILE,
        "strict": strict,
    }


def attach_console_logging(verbosity: int):
    """-v 2 and up echo sockmap logs to stderr."""
    if verbosity < 2:
        return
    logger = logging.getLogger("sockmap")
    if any(getattr(h, "_portwho_console", False) for h in logger.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    handler._portwho_console = True
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbosity >= 3 else logging.INFO)
