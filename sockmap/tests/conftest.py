import pytest

from sockmap import settings_api


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.portwho/settings.json."""
    monkeypatch.setenv("PORTWHO_CONFIG", str(tmp_path / "portwho-settings.json"))
    settings_api._cache = None
    yield
    settings_api._cache = None
