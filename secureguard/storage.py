# secureguard/storage.py
"""
File-backed key/value store for the API credential and the check history.

- Storage: diskcache.Cache (SQLite-backed, writes are atomic so readers never
  see half-written values).
- Location: a concrete directory, or "os-default" for the platform's per-user
  data directory via platformdirs.
- A missing key reads as None, which is distinct from an empty value.
"""
from __future__ import annotations

import dataclasses
import logging
import os
import sqlite3
from typing import Any, Optional

import diskcache
from platformdirs import user_data_dir as _user_data_dir

from secureguard.errors import PersistenceError

log = logging.getLogger(__name__)

API_KEY_KEY = "geminiApiKey"
HISTORY_KEY = "urlHistory"

_STORE_ERRORS = (OSError, sqlite3.Error, diskcache.Timeout)


@dataclasses.dataclass
class StoreConfig:
    # Either a concrete directory path, or "os-default".
    directory: str = "os-default"

    @classmethod
    def from_config(cls, config: dict[str, Any], directory: str | None = None) -> "StoreConfig":
        store_cfg = config.get("store", {})
        return cls(directory=directory or str(store_cfg.get("directory", cls.directory)))


class KeyValueStore:
    """
    Thin wrapper over diskcache with an explicit get/set/delete contract.
    Every diskcache or filesystem failure surfaces as PersistenceError.
    """

    def __init__(self, cfg: StoreConfig | None = None, app_name: str = "secureguard"):
        self.cfg = cfg or StoreConfig()
        self.app_name = app_name
        self._cache: diskcache.Cache | None = None

    def _resolve_directory(self) -> str:
        directory = self.cfg.directory
        if directory == "os-default":
            directory = _user_data_dir(self.app_name, appauthor=False)
        return directory

    def _open(self) -> diskcache.Cache:
        if self._cache is not None:
            return self._cache
        directory = self._resolve_directory()
        log.debug("Opening store at %s", directory)
        try:
            self._cache = diskcache.Cache(directory)
        except _STORE_ERRORS as e:
            raise PersistenceError(f"Could not open store at {directory}: {e}") from e
        return self._cache

    @property
    def directory(self) -> Optional[str]:
        """Absolute store directory once opened, else None."""
        if self._cache is None:
            return None
        return os.path.abspath(self._cache.directory)

    def close(self) -> None:
        if self._cache is not None:
            self._cache.close()
            self._cache = None

    def __enter__(self) -> "KeyValueStore":
        # Opened lazily on first access so a broken store only fails the
        # operations that touch it.
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ---- Public API ---------------------------------------------------------

    def get(self, key: str) -> Any:
        """Stored value, or None when the key was never set."""
        try:
            return self._open().get(key)
        except _STORE_ERRORS as e:
            raise PersistenceError(f"Could not read {key!r}: {e}") from e

    def contains(self, key: str) -> bool:
        try:
            return key in self._open()
        except _STORE_ERRORS as e:
            raise PersistenceError(f"Could not read {key!r}: {e}") from e

    def set(self, key: str, value: Any) -> None:
        try:
            self._open().set(key, value)
        except _STORE_ERRORS as e:
            raise PersistenceError(f"Could not write {key!r}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self._open().delete(key)
        except _STORE_ERRORS as e:
            raise PersistenceError(f"Could not delete {key!r}: {e}") from e


# ---- Credential helpers -----------------------------------------------------


def get_api_key(store: KeyValueStore) -> str | None:
    value = store.get(API_KEY_KEY)
    return value if isinstance(value, str) and value else None


def save_api_key(store: KeyValueStore, api_key: str) -> None:
    """Persist the credential. Blank input is refused; the format is not checked."""
    if not api_key or not api_key.strip():
        raise ValueError("API key cannot be empty")
    store.set(API_KEY_KEY, api_key.strip())
    log.info("API key saved.")


def remove_api_key(store: KeyValueStore) -> None:
    store.delete(API_KEY_KEY)
    log.info("API key removed.")
