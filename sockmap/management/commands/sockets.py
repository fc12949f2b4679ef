import io
import json

from django.core.management.base import BaseCommand, CommandError
from rich.console import Console

from sockmap.errors import SocketTableError
from sockmap.management.commands._options import (
    add_source_arguments,
    attach_console_logging,
    is_root,
    parse_port,
    source_options,
)
from sockmap.render import build_table, rows_as_dicts
from sockmap.snapshot import take_snapshot


class Command(BaseCommand):
    help = "List sockets with their owning user and process, sorted by local port"

    def add_arguments(self, parser):
        parser.add_argument("--port", default=None, help="Only show sockets bound to this local port")
        parser.add_argument(
            "--listening",
            action="store_true",
            help="Only show TCP listeners and UDP sockets",
        )
        parser.add_argument("--json", action="store_true", help="Print rows as JSON")
        add_source_arguments(parser)

    def handle(self, *args, **options):
        attach_console_logging(options["verbosity"])
        port = parse_port(options["port"]) if options["port"] is not None else None

        try:
            rows = take_snapshot(
                port=port,
                listening_only=options["listening"],
                **source_options(options),
            )
        except SocketTableError as e:
            raise CommandError(str(e))

        if options["json"]:
            self.stdout.write(json.dumps(rows_as_dicts(rows), indent=2))
            return

        if not rows:
            self.stdout.write("No matching sockets." if port is None else f"Nothing bound to port {port}.")
            return

        buf = io.StringIO()
        console = Console(file=buf, width=200, color_system=None, highlight=False)
        console.print(build_table(rows))
        self.stdout.write(buf.getvalue().rstrip("\n"))

        if not is_root() and any(not row.identity.resolved for row in rows):
            self.stderr.write("Some owners could not be resolved; run as root to see every process.")
