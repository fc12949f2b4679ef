"""
Tests for the JSON backed user settings.
"""
import json
import os

from sockmap import settings_api


def test_defaults_without_file():
    assert settings_api.get("kill.signal") == "SIGTERM"
    assert settings_api.get_bool("scan.strict") is True
    assert settings_api.get_list("scan.protocols") == ["tcp", "tcp6", "udp", "udp6"]
    assert settings_api.get("missing.key", "fallback") == "fallback"


def test_file_overrides_defaults():
    path = settings_api.config_path()
    path.write_text(json.dumps({"kill.timeout": 10, "kill.force": "yes"}))
    settings_api.reload()
    assert settings_api.get_float("kill.timeout") == 10.0
    assert settings_api.get_bool("kill.force") is True


def test_set_value_persists():
    settings_api.set_value("scan.protocols", "tcp, udp")
    assert json.loads(settings_api.config_path().read_text()) == {"scan.protocols": "tcp, udp"}
    settings_api._cache = None
    assert settings_api.get_list("scan.protocols") == ["tcp", "udp"]


def test_broken_file_is_ignored():
    settings_api.config_path().write_text("{not json")
    settings_api.reload()
    assert settings_api.get("kill.signal") == "SIGTERM"


def test_bad_number_falls_back():
    settings_api.set_value("kill.timeout", "soon")
    assert settings_api.get_float("kill.timeout", 3.0) == 3.0
    assert settings_api.get_int("kill.timeout", 7) == 7


def test_env_var_selects_file(tmp_path, monkeypatch):
    other = tmp_path / "other.json"
    monkeypatch.setenv("PORTWHO_CONFIG", str(other))
    assert settings_api.config_path() == other
    assert not os.path.exists(other)
