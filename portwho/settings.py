"""
Django settings for the portwho project.

portwho only uses Django for its management command runner, so there is no
database, no middleware and no URL configuration.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("PORTWHO_SECRET_KEY", "portwho-local-cli-no-secrets-here")

DEBUG = False

ALLOWED_HOSTS = []

INSTALLED_APPS = [
    "sockmap",
]

DATABASES = {}

USE_TZ = True

# Sources of the socket snapshot. Overridable for tests and chroots.
PORTWHO_PROC_ROOT = os.environ.get("PORTWHO_PROC_ROOT", "/proc")
PORTWHO_PASSWD_FILE = os.environ.get("PORTWHO_PASSWD_FILE", "/etc/passwd")

# User settings file, see sockmap.settings_api
PORTWHO_CONFIG_PATH = str(Path.home() / ".portwho" / "settings.json")

PORTWHO_LOG_DIR = os.environ.get("PORTWHO_LOG_DIR", str(Path.home() / ".portwho_logs"))
