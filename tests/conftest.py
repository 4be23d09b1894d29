import pytest

from api_playground.config import reset_settings


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep preferences and descriptors of every test inside tmp_path."""
    monkeypatch.setenv("API_PLAYGROUND_PREFERENCES_PATH", str(tmp_path / "prefs.json"))
    monkeypatch.setenv("API_PLAYGROUND_STORE_DIR", str(tmp_path / "endpoints"))
    reset_settings()
    yield
    reset_settings()
