"""
Environment Configuration Module

Centralized access to the settings deferio reads at runtime. Values come from
process environment variables, optionally seeded from ``.env`` files, and fall
back to the defaults in ``DEFAULT_ENV``.
"""

import os
import tempfile
from pathlib import Path
from typing import Any

DEFAULT_MAX_DEPTH = 63
DEFAULT_ENCODING = "utf-8"
DEFAULT_STREAM_CHUNK_SIZE = 64 * 1024

DEFAULT_ENV = {
    "ENV": "development",
    "LOG_LEVEL": None,
    "DEBUG": None,
    "DEFERIO_MAX_DEPTH": DEFAULT_MAX_DEPTH,
    "DEFERIO_DEFAULT_ENCODING": DEFAULT_ENCODING,
    "DEFERIO_TEMP_DIR": None,
    "DEFERIO_STREAM_CHUNK_SIZE": DEFAULT_STREAM_CHUNK_SIZE,
}


def load_dotenv_files(project_root: Path | None = None) -> None:
    """Load environment variables from .env files based on current environment."""
    from dotenv import load_dotenv

    if project_root is None:
        project_root = Path.cwd()

    env_name = os.environ.get("ENV", "development")

    # Later files do not override earlier ones or the real environment
    env_files = [
        project_root / f".env.{env_name}.local",
        project_root / f".env.{env_name}",
        project_root / ".env",
    ]

    for env_file in env_files:
        if env_file.exists():
            load_dotenv(env_file, override=False)


class Environment(object):
    """
    Class-level accessors for deferio configuration.

    Every getter reads the live process environment, so tests can use
    ``monkeypatch.setenv`` without resetting any cache. ``.env`` files are
    loaded once, on first access.
    """

    _dotenv_loaded: bool = False

    @classmethod
    def _ensure_loaded(cls) -> None:
        if not cls._dotenv_loaded:
            cls._dotenv_loaded = True
            load_dotenv_files()

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        cls._ensure_loaded()
        value = os.environ.get(key)
        if value is not None:
            return value
        if default is not None:
            return default
        return DEFAULT_ENV.get(key)

    @classmethod
    def _get_int_setting(cls, key: str, default: int) -> int:
        value = cls.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    @classmethod
    def get_env(cls) -> str:
        """
        The environment name, e.g. "development", "test" or "production".
        """
        return cls.get("ENV")

    @classmethod
    def is_test(cls) -> bool:
        return os.environ.get("PYTEST_CURRENT_TEST") is not None

    @classmethod
    def get_log_level(cls) -> str:
        """Return desired log level string.

        Priority:
        1) Explicit LOG_LEVEL from the environment
        2) If DEBUG env is truthy, return "DEBUG"
        3) DEFERIO_LOG_LEVEL env (default "INFO")
        """
        level = os.getenv("LOG_LEVEL")
        if level:
            return str(level).upper()
        debug_env = os.getenv("DEBUG")
        if debug_env and debug_env.lower() not in ("0", "false", "no", "off", ""):
            return "DEBUG"
        return os.getenv("DEFERIO_LOG_LEVEL", "INFO").upper()

    @classmethod
    def get_max_depth(cls) -> int:
        """
        Default recursion budget used when resolving deferred values.
        """
        return cls._get_int_setting("DEFERIO_MAX_DEPTH", DEFAULT_MAX_DEPTH)

    @classmethod
    def get_default_encoding(cls) -> str:
        return cls.get("DEFERIO_DEFAULT_ENCODING") or DEFAULT_ENCODING

    @classmethod
    def get_stream_chunk_size(cls) -> int:
        size = cls._get_int_setting("DEFERIO_STREAM_CHUNK_SIZE", DEFAULT_STREAM_CHUNK_SIZE)
        return size if size > 0 else DEFAULT_STREAM_CHUNK_SIZE

    @classmethod
    def get_temp_dir(cls) -> str:
        """
        Parent directory for temp files when the caller gives none.
        """
        return cls.get("DEFERIO_TEMP_DIR") or tempfile.gettempdir()
