"""
Native session registry.

Maps handle ids to shared native sessions so that loading the same SavedModel
path with the same tag set twice reuses one session.

Invariants:
- At most one native session per distinct (path, tag set).
- Handle ids start at zero and strictly increase; they are never reused.
- A native session is released when its last handle is released.
- Load-or-reuse is serialized per (path, tag set).
- After shutdown() no handle is registered and no session stays open.
"""

from __future__ import annotations

import itertools
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, Optional, Tuple

from ..backends.base import ExecutionBackend
from ..core.errors import AlreadyDisposedError, RegistryClosedError
from ..core.types import SessionRecord

logger = logging.getLogger(__name__)

SessionKey = Tuple[str, FrozenSet[str]]


def normalize_path(path: str | Path) -> str:
    return str(Path(path).expanduser().resolve())


def serialize_tags(tags: Iterable[str]) -> str:
    """Deterministic comma-joined form of a tag set."""
    return ",".join(sorted(set(tags)))


@dataclass
class _KeyLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class SessionRegistry:
    """
    Registry of native sessions backed by one ExecutionBackend.

    Construct one per application (or use the process default from
    `smserve.model.saved_model`) and call `shutdown()` to release every
    session it still holds.
    """

    def __init__(self, backend: ExecutionBackend):
        self.backend = backend
        self._records: Dict[SessionKey, SessionRecord] = {}
        self._handles: Dict[int, SessionKey] = {}
        self._ids = itertools.count()
        self._lock = threading.Lock()
        self._key_locks: Dict[SessionKey, _KeyLock] = {}
        self._closed = False

    # ------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)

    @property
    def session_count(self) -> int:
        with self._lock:
            return len(self._records)

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, handle_id: int) -> Optional[SessionRecord]:
        with self._lock:
            key = self._handles.get(handle_id)
            return self._records.get(key) if key is not None else None

    def count_loaded_models(self) -> int:
        return self.backend.count_active_sessions()

    # ------------------------------------------------------------
    # Acquire / release
    # ------------------------------------------------------------

    @contextmanager
    def _locked(self, key: SessionKey) -> Iterator[None]:
        """
        Hold the lock for one (path, tag set). The lock entry is dropped once
        no caller waits on it and the key has no session.
        """
        with self._lock:
            entry = self._key_locks.get(key)
            if entry is None:
                entry = self._key_locks[key] = _KeyLock()
            entry.users += 1

        try:
            with entry.lock:
                yield
        finally:
            with self._lock:
                entry.users -= 1
                if (
                    entry.users == 0
                    and key not in self._records
                    and self._key_locks.get(key) is entry
                ):
                    del self._key_locks[key]

    def acquire(self, path: str | Path, tags: Iterable[str]) -> Tuple[int, SessionRecord]:
        """
        Reuse or create the native session for (path, tags) and register a
        new handle id for it.

        Raises:
            RegistryClosedError: The registry was shut down before the
                handle could be registered.
        """
        key: SessionKey = (normalize_path(path), frozenset(tags))

        with self._locked(key):
            if self._closed:
                raise RegistryClosedError()

            with self._lock:
                record = self._records.get(key)

            created = record is None
            if created:
                tags_csv = serialize_tags(key[1])
                native_handle = self.backend.load_graph(key[0], tags_csv)
                record = SessionRecord(path=key[0], tags=key[1], native_handle=native_handle)
                logger.info(
                    "Loaded native session %d for %s [%s]",
                    native_handle, key[0], tags_csv,
                )
            else:
                logger.info(
                    "Reusing native session %d for %s [%s]",
                    record.native_handle, key[0], serialize_tags(key[1]),
                )

            with self._lock:
                closed = self._closed
                if not closed:
                    self._records[key] = record
                    record.ref_count += 1
                    handle_id = next(self._ids)
                    self._handles[handle_id] = key

            if closed:
                # shutdown() ran during the load and never saw this session
                if created:
                    self.backend.release_session(record.native_handle)
                    logger.info(
                        "Released native session %d for %s",
                        record.native_handle, record.path,
                    )
                raise RegistryClosedError()

        return handle_id, record

    def release(self, handle_id: int) -> bool:
        """
        Drop a handle id. Returns True when this released the native session.
        After shutdown() this is a no-op returning False.

        Raises:
            AlreadyDisposedError: The handle id is not registered.
        """
        with self._lock:
            if self._closed:
                # shutdown() already released every native session
                return False
            key = self._handles.get(handle_id)
        if key is None:
            raise AlreadyDisposedError(f"Handle {handle_id} is not registered.")

        with self._locked(key):
            with self._lock:
                if self._closed:
                    return False
                if self._handles.pop(handle_id, None) is None:
                    raise AlreadyDisposedError(f"Handle {handle_id} is not registered.")
                record = self._records[key]
                record.ref_count -= 1
                if record.ref_count > 0:
                    logger.debug(
                        "Handle %d released; native session %d still used by %d handle(s)",
                        handle_id, record.native_handle, record.ref_count,
                    )
                    return False
                del self._records[key]

            self.backend.release_session(record.native_handle)

        logger.info("Released native session %d for %s", record.native_handle, record.path)
        return True

    def shutdown(self) -> None:
        """Release every native session and clear all handles. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            records = list(self._records.values())
            live_handles = len(self._handles)
            self._records.clear()
            self._handles.clear()
            # entries still in use are dropped by their holders
            self._key_locks = {k: e for k, e in self._key_locks.items() if e.users}

        if live_handles:
            logger.warning(
                "Shutting down session registry with %d live handle(s)", live_handles
            )

        for record in records:
            self.backend.release_session(record.native_handle)
            logger.info("Released native session %d for %s", record.native_handle, record.path)


__all__ = ["SessionRegistry", "normalize_path", "serialize_tags"]
