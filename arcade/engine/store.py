"""Session persistence.

``JsonSessionStore`` keeps one JSON document per session under
``local_db/collections/sessions/`` (override with ``ARCADE_STORE_DIR``).
Documents hold the serialized puzzle state, the derived telemetry and any
session metadata the controller passes along (move log, status, score).
"""

from __future__ import annotations

import json
import os
import uuid
from abc import ABC, abstractmethod
from copy import deepcopy
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..core.exceptions import SessionNotFoundError
from ..core.models import Telemetry
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_STORE_DIR = Path("local_db/collections/sessions")
STORE_DIR_ENV = "ARCADE_STORE_DIR"


def default_store_dir() -> Path:
    return Path(os.environ.get(STORE_DIR_ENV, DEFAULT_STORE_DIR))


@dataclass
class StoredSession:
    session_id: str
    state: Dict[str, Any]
    telemetry: Telemetry
    metadata: Dict[str, Any] = field(default_factory=dict)


class SessionStore(ABC):
    """Persistence interface consumed by the session controller."""

    @staticmethod
    def new_id() -> str:
        ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
        short_uuid = uuid.uuid4().hex[:8]
        return f"{ts}_{short_uuid}"

    @abstractmethod
    def save(
        self,
        session_id: str,
        state: Mapping[str, Any],
        telemetry: Telemetry,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> None:
        ...

    @abstractmethod
    def load(self, session_id: str) -> StoredSession:
        """Return the stored session or raise ``SessionNotFoundError``."""

    @abstractmethod
    def list_ids(self) -> List[str]:
        ...


class InMemorySessionStore(SessionStore):
    """Dict-backed store, mostly for tests."""

    def __init__(self) -> None:
        self._sessions: Dict[str, StoredSession] = {}

    def save(self, session_id, state, telemetry, metadata=None) -> None:
        self._sessions[session_id] = StoredSession(
            session_id=session_id,
            state=deepcopy(dict(state)),
            telemetry=telemetry,
            metadata=deepcopy(dict(metadata or {})),
        )

    def load(self, session_id: str) -> StoredSession:
        try:
            stored = self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(f"No session with id {session_id}") from None
        return deepcopy(stored)

    def list_ids(self) -> List[str]:
        return sorted(self._sessions)


class JsonSessionStore(SessionStore):
    """Save sessions as structured JSON documents."""

    def __init__(self, store_dir: Path | str | None = None) -> None:
        self.store_dir = Path(store_dir) if store_dir is not None else default_store_dir()
        self.store_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, session_id: str) -> Path:
        return self.store_dir / f"{session_id}.json"

    def save(self, session_id, state, telemetry, metadata=None) -> None:
        doc = {
            "id": session_id,
            "saved_at": datetime.now(timezone.utc).isoformat(),
            **dict(metadata or {}),
            "state": dict(state),
            "telemetry": asdict(telemetry),
        }
        path = self._path(session_id)
        # Write beside the target and swap in, so readers never see half a document.
        tmp_path = path.with_name(f"{path.name}.tmp")
        tmp_path.write_text(json.dumps(doc, ensure_ascii=False, indent=2), encoding="utf-8")
        try:
            os.replace(tmp_path, path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
        LOGGER.info("Session saved: %s", session_id)

    def load(self, session_id: str) -> StoredSession:
        path = self._path(session_id)
        if not path.exists():
            raise SessionNotFoundError(f"No session document at {path}")
        doc = json.loads(path.read_text(encoding="utf-8"))
        state = doc.pop("state")
        telemetry = Telemetry(**doc.pop("telemetry"))
        doc.pop("id", None)
        doc.pop("saved_at", None)
        return StoredSession(session_id=session_id, state=state, telemetry=telemetry, metadata=doc)

    def list_ids(self) -> List[str]:
        return sorted(path.stem for path in self.store_dir.glob("*.json"))
