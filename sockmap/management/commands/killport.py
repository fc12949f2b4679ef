from django.core.management.base import BaseCommand, CommandError

from sockmap import settings_api
from sockmap.errors import SocketTableError
from sockmap.killer import kill_owners, owners_of_port, parse_signal
from sockmap.management.commands._options import (
    add_source_arguments,
    attach_console_logging,
    parse_port,
    source_options,
)
from sockmap.snapshot import take_snapshot


class Command(BaseCommand):
    help = "Terminate the process(es) owning a local port"

    def add_arguments(self, parser):
        parser.add_argument("port", help="Local port whose owners should be terminated")
        parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
        parser.add_argument("--signal", default=None, help="Signal to send (default from kill.signal, SIGTERM)")
        parser.add_argument("--timeout", type=float, default=None, help="Seconds to wait for each process to exit")
        parser.add_argument(
            "--force",
            action="store_true",
            help="Send SIGKILL to processes still running after the timeout",
        )
        add_source_arguments(parser)

    def handle(self, *args, **options):
        attach_console_logging(options["verbosity"])
        port = parse_port(options["port"])

        try:
            sig = parse_signal(options["signal"] or settings_api.get("kill.signal", "SIGTERM"))
        except ValueError as e:
            raise CommandError(str(e))
        timeout = options["timeout"]
        if timeout is None:
            timeout = settings_api.get_float("kill.timeout", 3.0)
        force = options["force"] or settings_api.get_bool("kill.force")

        try:
            rows = take_snapshot(port=port, **source_options(options))
        except SocketTableError as e:
            raise CommandError(str(e))

        owners = owners_of_port(rows, port)
        if not owners:
            if rows:
                self.stdout.write(f"Nothing to kill: port {port} is in use but its owner could not be resolved.")
            else:
                self.stdout.write(f"Nothing to kill: no process owns port {port}.")
            return

        self.stdout.write(f"Port {port} is owned by:")
        for owner in owners:
            self.stdout.write(f"  {owner.pid}/{owner.program_name}")

        if not options["yes"]:
            confirm = input(f"Send {sig.name} to {len(owners)} process(es)? (y/N): ")
            if confirm.strip().lower() not in ("y", "yes"):
                self.stdout.write("Operation cancelled.")
                return

        results = kill_owners(owners, sig=sig, timeout=timeout, force=force)
        failed = 0
        for r in results:
            line = f"{r.pid}/{r.program_name}: {r.message}"
            if r.ok:
                self.stdout.write(self.style.SUCCESS(line))
            else:
                failed += 1
                self.stdout.write(self.style.ERROR(line))

        if failed:
            raise CommandError(f"{failed} of {len(results)} process(es) could not be terminated")


