"""
Unit tests for the kill-by-port action.
"""
import os
import signal
import unittest
from unittest.mock import MagicMock, patch

import psutil

from sockmap.killer import kill_owners, kill_process, owners_of_port, parse_signal, same_program
from sockmap.models import UNRESOLVED, ProcessIdentity, SocketRecord, SocketRow


def row(port, identity, protocol="tcp"):
    record = SocketRecord(protocol, "0.0.0.0", port, "0.0.0.0", 0, "LISTEN", "0", 1)
    return SocketRow(record=record, identity=identity, username="root", port_label=str(port))


NGINX = ProcessIdentity(1234, "nginx")


class TestOwnersOfPort(unittest.TestCase):

    def test_distinct_resolved_owners(self):
        rows = [
            row(80, NGINX),
            row(80, NGINX, "tcp6"),
            row(80, UNRESOLVED),
            row(80, ProcessIdentity(1235, "nginx")),
            row(443, ProcessIdentity(99, "haproxy")),
        ]
        self.assertEqual(
            [o.pid for o in owners_of_port(rows, 80)],
            [1234, 1235],
        )

    def test_nothing_resolved(self):
        self.assertEqual(owners_of_port([row(53, UNRESOLVED)], 53), [])
        self.assertEqual(owners_of_port([], 53), [])


class TestParseSignal(unittest.TestCase):

    def test_names_and_numbers(self):
        self.assertEqual(parse_signal("TERM"), signal.SIGTERM)
        self.assertEqual(parse_signal("sigkill"), signal.SIGKILL)
        self.assertEqual(parse_signal("9"), signal.SIGKILL)
        self.assertEqual(parse_signal(signal.SIGINT), signal.SIGINT)

    def test_unknown(self):
        with self.assertRaises(ValueError):
            parse_signal("SIGBOGUS")


class TestKillProcess(unittest.TestCase):

    def _proc(self, name="nginx"):
        proc = MagicMock()
        proc.name.return_value = name
        return proc

    @patch("sockmap.killer.psutil.wait_procs")
    @patch("sockmap.killer.psutil.Process")
    def test_terminated(self, mock_process, mock_wait):
        proc = self._proc()
        mock_process.return_value = proc
        mock_wait.return_value = ([proc], [])

        result = kill_process(NGINX, timeout=1)

        self.assertTrue(result.ok)
        self.assertEqual(result.message, "terminated")
        mock_process.assert_called_once_with(1234)
        proc.send_signal.assert_called_once_with(signal.SIGTERM)
        proc.kill.assert_not_called()

    @patch("sockmap.killer.psutil.wait_procs")
    @patch("sockmap.killer.psutil.Process")
    def test_survivor_without_force(self, mock_process, mock_wait):
        proc = self._proc()
        mock_process.return_value = proc
        mock_wait.return_value = ([], [proc])

        result = kill_process(NGINX, timeout=1)

        self.assertFalse(result.ok)
        self.assertIn("still running", result.message)
        proc.kill.assert_not_called()

    @patch("sockmap.killer.psutil.wait_procs")
    @patch("sockmap.killer.psutil.Process")
    def test_survivor_with_force(self, mock_process, mock_wait):
        proc = self._proc()
        mock_process.return_value = proc
        mock_wait.side_effect = [([], [proc]), ([proc], [])]

        result = kill_process(NGINX, timeout=1, force=True)

        self.assertTrue(result.ok)
        self.assertTrue(result.forced)
        proc.kill.assert_called_once()

    @patch("sockmap.killer.psutil.wait_procs")
    @patch("sockmap.killer.psutil.Process")
    def test_zero_timeout_does_not_wait(self, mock_process, mock_wait):
        mock_process.return_value = self._proc()

        result = kill_process(NGINX, sig=signal.SIGHUP, timeout=0)

        self.assertTrue(result.ok)
        self.assertEqual(result.message, "sent SIGHUP")
        mock_wait.assert_not_called()

    @patch("sockmap.killer.psutil.Process")
    def test_already_exited(self, mock_process):
        mock_process.side_effect = psutil.NoSuchProcess(1234)

        result = kill_process(NGINX)

        self.assertTrue(result.ok)
        self.assertEqual(result.message, "already exited")

    @patch("sockmap.killer.psutil.Process")
    def test_access_denied(self, mock_process):
        proc = self._proc()
        proc.send_signal.side_effect = psutil.AccessDenied(1234)
        mock_process.return_value = proc

        result = kill_process(NGINX)

        self.assertFalse(result.ok)
        self.assertEqual(result.message, "access denied")

    @patch("sockmap.killer.psutil.Process")
    def test_pid_reused_by_other_program(self, mock_process):
        proc = self._proc(name="bash")
        mock_process.return_value = proc

        result = kill_process(NGINX)

        self.assertFalse(result.ok)
        proc.send_signal.assert_not_called()

    @patch("sockmap.killer.psutil.wait_procs")
    @patch("sockmap.killer.psutil.Process")
    def test_long_name_truncated_by_comm(self, mock_process, mock_wait):
        """comm keeps 15 characters, psutil reports the full program name."""
        proc = self._proc(name="systemd-resolved")
        mock_process.return_value = proc
        mock_wait.return_value = ([proc], [])

        result = kill_process(ProcessIdentity(101, "systemd-resolve"), timeout=1)

        self.assertTrue(result.ok)
        proc.send_signal.assert_called_once_with(signal.SIGTERM)

    def test_same_program(self):
        self.assertTrue(same_program("containerd-shim-runc-v2", "containerd-shim"))
        self.assertTrue(same_program("nginx", "nginx"))
        self.assertFalse(same_program("containerd", "containerd-shim"))
        self.assertFalse(same_program("bash", "nginx"))

    @patch("sockmap.killer.psutil.Process")
    def test_refuses_own_pid(self, mock_process):
        result = kill_process(ProcessIdentity(os.getpid(), "python"))
        self.assertFalse(result.ok)
        mock_process.assert_not_called()

    @patch("sockmap.killer.kill_process")
    def test_kill_owners_reports_each(self, mock_kill):
        mock_kill.side_effect = lambda o, **kw: o.pid
        owners = [NGINX, ProcessIdentity(1235, "nginx")]
        self.assertEqual(kill_owners(owners, timeout=0), [1234, 1235])
        self.assertEqual(kill_owners([]), [])
