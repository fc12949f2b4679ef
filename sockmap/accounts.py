"""
uid -> account name lookup from /etc/passwd.
"""

import logging
from pathlib import Path
from typing import Dict, Set

log = logging.getLogger("sockmap.accounts")

PASSWD = Path("/etc/passwd")


def parse_passwd(lines) -> Dict[str, str]:
    """
    Build a uid -> name mapping from passwd formatted lines.

    Field 1 is the account name and field 3 the uid. Later lines win when a
    uid appears twice. Blank lines, comments and lines with fewer than three
    fields are skipped.
    """
    accounts: Dict[str, str] = {}
    for line in lines:
        line = line.rstrip("\n")
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        fields = line.split(":")
        if len(fields) < 3:
            log.debug("Ignoring short passwd line: %r", line)
            continue
        accounts[fields[2]] = fields[0]
    return accounts


def load_accounts(path=PASSWD) -> Dict[str, str]:
    """
    Read the account database once.

    A missing or unreadable file yields an empty mapping; every owner then
    shows up as an unknown uid instead of failing the run.
    """
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return parse_passwd(f)
    except OSError as e:
        log.warning("Cannot read account database %s: %s", path, e)
        return {}


def username_for(accounts: Dict[str, str], uid: str, warned: Set[str] | None = None) -> str | None:
    """
    Account name for `uid`, or None if it has none.

    `warned` collects uids already reported so a snapshot warns once per
    unknown uid; without it every miss is logged.
    """
    name = accounts.get(uid)
    if name is None and (warned is None or uid not in warned):
        if warned is not None:
            warned.add(uid)
        log.warning("Unknown uid %s, no matching account", uid)
    return name
