"""
`portwho` console entry point.

Sets up logging and Django, then hands the arguments to the management
command runner. With no subcommand it runs `sockets`.
"""

import logging
import os
import sys
from pathlib import Path

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "portwho.settings")


def setup_django():
    import django

    django.setup()


def setup_logging():
    from django.conf import settings
    from sockmap import settings_api

    level_name = (settings_api.get("log.level", "INFO") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    log_dir = Path(settings.PORTWHO_LOG_DIR).expanduser()
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        # read-only home, keep logging to stderr only for warnings
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
        return

    logging.basicConfig(
        filename=str(log_dir / "portwho.log"),
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logging.getLogger("portwho").debug("Logging initialized")


def main(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0].startswith("-") and argv[0] not in ("-h", "--help", "--version"):
        argv.insert(0, "sockets")
    elif argv[0] in ("-h", "--help"):
        argv = ["help"]

    from django.core.management import execute_from_command_line

    setup_django()
    setup_logging()
    execute_from_command_line(["portwho"] + argv)


if __name__ == "__main__":
    main()
