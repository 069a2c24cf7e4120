import pytest

from deferio.config.environment import Environment

_DEFERIO_ENV_KEYS = (
    "DEFERIO_MAX_DEPTH",
    "DEFERIO_DEFAULT_ENCODING",
    "DEFERIO_TEMP_DIR",
    "DEFERIO_STREAM_CHUNK_SIZE",
    "DEFERIO_LOG_LEVEL",
    "LOG_LEVEL",
    "DEBUG",
)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch):
    """Keep tests independent of the developer's shell and .env files."""
    for key in _DEFERIO_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(Environment, "_dotenv_loaded", True)
    yield


@pytest.fixture
def temp_root(tmp_path, monkeypatch):
    """A private default temp directory for temp file tests."""
    root = tmp_path / "tmp-root"
    root.mkdir()
    monkeypatch.setenv("DEFERIO_TEMP_DIR", str(root))
    return root
