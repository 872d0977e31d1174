"""Key-Value Storage - Persistence backends for app state.

This module handles all database I/O. Values are opaque strings; callers do
their own JSON encoding. Three interchangeable backends are provided and one
is chosen from configuration when the app starts.
"""

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from google.cloud import firestore


logger = logging.getLogger(__name__)

# ==================== Key Layout ====================

ONBOARDING_KEY = "aiqo_onboarding_v2"
STREAK_KEY = "aiqo_streak_v2"


def day_key(day_date: date) -> str:
    return f"aiqo_day_{day_date.isoformat()}"


def journal_key(day_date: date) -> str:
    return f"aiqo_journal_{day_date.isoformat()}"


# ==================== Interface ====================


class StorageError(Exception):
    """Raised when a storage backend cannot complete an operation."""


class KVStore(ABC):
    """Async string key-value store."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Fetch a value, or None if the key is absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete a key. Missing keys are ignored."""


# ==================== Configuration ====================

BACKEND_FIRESTORE = "firestore"
BACKEND_FILE = "file"
BACKEND_MEMORY = "memory"


@dataclass
class StorageConfig:
    """Configuration for the storage backend.

    Attributes:
        backend: One of "firestore", "file" or "memory"
        path: JSON file used by the file backend
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
        collection: Firestore collection holding one document per key
    """

    backend: str = BACKEND_FILE
    path: str = "~/.aiqo/store.json"
    project_id: str | None = None
    database: str | None = None
    collection: str = "aiqo_kv"

    @classmethod
    def from_env(cls) -> "StorageConfig":
        """Build configuration from AIQO_* and FIRESTORE_* variables."""
        return cls(
            backend=os.environ.get("AIQO_STORAGE", BACKEND_FILE).lower(),
            path=os.environ.get("AIQO_STORAGE_PATH", "~/.aiqo/store.json"),
            project_id=os.environ.get("FIRESTORE_PROJECT") or None,
            database=os.environ.get("FIRESTORE_DATABASE") or None,
            collection=os.environ.get("FIRESTORE_COLLECTION", "aiqo_kv"),
        )


# ==================== Backends ====================


class InMemoryKVStore(KVStore):
    """Process-local store; contents are lost on exit."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)


class FileKVStore(KVStore):
    """Store backed by a single local JSON file.

    The file holds one flat object of key to value. It is read once, then
    rewritten in full after every change.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()
        self._data: dict[str, str] | None = None
        self._lock = asyncio.Lock()

    def _load(self) -> dict[str, str]:
        if self._data is None:
            if not self.path.exists():
                self._data = {}
            else:
                try:
                    raw = json.loads(self.path.read_text(encoding="utf-8"))
                except (OSError, ValueError) as e:
                    raise StorageError(f"Cannot read {self.path}: {e}") from e
                if not isinstance(raw, dict):
                    raise StorageError(f"{self.path} does not hold a JSON object")
                self._data = {str(k): str(v) for k, v in raw.items()}
        return self._data

    def _flush(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e

    async def get(self, key: str) -> str | None:
        async with self._lock:
            return self._load().get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            data = dict(self._load())
            data[key] = value
            self._flush(data)
            self._data = data

    async def remove(self, key: str) -> None:
        async with self._lock:
            data = dict(self._load())
            if data.pop(key, None) is None:
                return
            self._flush(data)
            self._data = data


class FirestoreKVStore(KVStore):
    """Store backed by Firestore.

    Document structure:
        {collection}/{key}: { value: "<string>" }
    """

    def __init__(self, config: StorageConfig | None = None) -> None:
        """Initialize Firestore store.

        Args:
            config: Storage configuration
        """
        self.config = config or StorageConfig(backend=BACKEND_FIRESTORE)
        self._client: firestore.AsyncClient | None = None

    @property
    def client(self) -> firestore.AsyncClient:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs: dict[str, Any] = {}
            if self.config.project_id:
                kwargs["project"] = self.config.project_id
            if self.config.database:
                kwargs["database"] = self.config.database
            self._client = firestore.AsyncClient(**kwargs)
        return self._client

    def _doc_ref(self, key: str) -> firestore.AsyncDocumentReference:
        """Get reference to the document holding a key."""
        return self.client.collection(self.config.collection).document(key)

    async def get(self, key: str) -> str | None:
        logger.debug("Fetching key: %s", key)
        try:
            doc = await self._doc_ref(key).get()
        except Exception as e:
            raise StorageError(f"Failed to fetch {key}: {e}") from e
        if not doc.exists:
            return None
        value = (doc.to_dict() or {}).get("value")
        return value if isinstance(value, str) else None

    async def set(self, key: str, value: str) -> None:
        logger.debug("Saving key: %s", key)
        try:
            await self._doc_ref(key).set({"value": value})
        except Exception as e:
            raise StorageError(f"Failed to save {key}: {e}") from e

    async def remove(self, key: str) -> None:
        logger.debug("Deleting key: %s", key)
        try:
            await self._doc_ref(key).delete()
        except Exception as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e


def create_store(config: StorageConfig) -> KVStore:
    """Instantiate the backend named in the configuration.

    Raises:
        ValueError: If the backend name is unknown
    """
    if config.backend == BACKEND_FIRESTORE:
        logger.info("Using Firestore storage (collection %s)", config.collection)
        return FirestoreKVStore(config)
    if config.backend == BACKEND_FILE:
        logger.info("Using file storage at %s", config.path)
        return FileKVStore(config.path)
    if config.backend == BACKEND_MEMORY:
        logger.warning("Using in-memory storage; nothing will survive a restart")
        return InMemoryKVStore()
    raise ValueError(f"Unknown storage backend: {config.backend!r}")
