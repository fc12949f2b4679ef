import logging
import os

from django.apps import AppConfig
from django.conf import settings

log = logging.getLogger("sockmap.apps")


class SockmapConfig(AppConfig):
    name = "sockmap"
    verbose_name = "Socket owner map"

    def ready(self):
        # Only warn here, the commands report a missing table as a proper error
        proc_root = getattr(settings, "PORTWHO_PROC_ROOT", "/proc")
        if not os.path.isdir(os.path.join(proc_root, "net")):
            log.warning("%s/net not found, socket tables will be unavailable", proc_root)
