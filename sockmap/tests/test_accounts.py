"""
Unit tests for uid -> username lookup.
"""
import unittest
from unittest.mock import mock_open, patch

from sockmap.accounts import load_accounts, parse_passwd, username_for

PASSWD = """\
root:x:0:0:root:/root:/bin/bash
daemon:x:1:1:daemon:/usr/sbin:/usr/sbin/nologin
# a comment
systemd-resolve:x:101:103::/run/systemd:/usr/sbin/nologin

broken
alice:x:1000:1000:Alice,,,:/home/alice:/bin/bash
toor:x:0:0:second root:/root:/bin/sh
"""


class TestAccounts(unittest.TestCase):

    def test_parse_passwd(self):
        accounts = parse_passwd(PASSWD.splitlines(True))
        self.assertEqual(accounts["1"], "daemon")
        self.assertEqual(accounts["101"], "systemd-resolve")
        self.assertEqual(accounts["1000"], "alice")
        self.assertNotIn("broken", accounts.values())

    def test_last_seen_wins_on_duplicate_uid(self):
        accounts = parse_passwd(PASSWD.splitlines(True))
        self.assertEqual(accounts["0"], "toor")

    @patch("builtins.open", new_callable=mock_open, read_data="root:x:0:0:root:/root:/bin/bash\n")
    def test_load_accounts_reads_file(self, mock_file):
        self.assertEqual(load_accounts("/etc/passwd"), {"0": "root"})
        mock_file.assert_called_once()

    def test_missing_database_is_empty(self):
        self.assertEqual(load_accounts("/nonexistent/passwd"), {})

    def test_unknown_uid_is_none(self):
        """Unknown uids are recoverable, like an unresolved pid."""
        self.assertIsNone(username_for({"0": "root"}, "4242"))
        self.assertEqual(username_for({"0": "root"}, "0"), "root")

    def test_unknown_uid_warned_once_per_set(self):
        """Warnings are deduplicated only within the set passed in."""
        first, second = set(), set()
        with self.assertLogs("sockmap.accounts", level="WARNING") as logs:
            username_for({}, "4242", first)
            username_for({}, "4242", first)
            username_for({}, "4242", second)
        self.assertEqual(len(logs.output), 2)
        self.assertEqual(first, {"4242"})
        self.assertEqual(second, {"4242"})
