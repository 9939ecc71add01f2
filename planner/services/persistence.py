"""Persistence adapters for the planner store

The store hands the full state to ``save`` after every mutation and reads it
back once through ``load`` at startup.
"""
import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union
from pydantic import ValidationError
from planner.config import settings
from planner.models.state import PersistedState
from planner.utils.monitoring import StructuredLogger


class BasePersistence(ABC):
    """Durable key-value storage for the planner state"""

    @abstractmethod
    def load(self) -> Optional[PersistedState]:
        """Return the stored state, or None when nothing usable is stored"""
        pass

    @abstractmethod
    def save(self, state: PersistedState) -> None:
        """Store the full state, replacing whatever was stored before"""
        pass


class InMemoryPersistence(BasePersistence):
    """Keeps the last saved state in memory; used by tests and ephemeral sessions"""

    def __init__(self, initial: Optional[PersistedState] = None):
        self.state: Optional[PersistedState] = initial
        self.save_count = 0

    def load(self) -> Optional[PersistedState]:
        if self.state is None:
            return None
        return self.state.model_copy(deep=True)

    def save(self, state: PersistedState) -> None:
        self.state = state.model_copy(deep=True)
        self.save_count += 1


class JsonFilePersistence(BasePersistence):
    """Stores the state as one versioned JSON document on disk.

    Layout: ``{"key": <storage key>, "version": <schema version>, "state":
    {"items": [...], "time_logs": [...]}}``. A document with another key or
    version is not migrated: it is discarded and the store starts empty.
    """

    def __init__(
        self,
        path: Union[str, Path, None] = None,
        storage_key: Optional[str] = None,
        schema_version: Optional[int] = None,
    ):
        self.path = Path(path or settings.STORAGE_PATH)
        self.storage_key = storage_key or settings.STORAGE_KEY
        self.schema_version = schema_version if schema_version is not None else settings.SCHEMA_VERSION

    def load(self) -> Optional[PersistedState]:
        if not self.path.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            StructuredLogger.log_error(e, context={"function": "load", "path": str(self.path)})
            return None

        if not isinstance(document, dict) or document.get("key") != self.storage_key:
            StructuredLogger.log_event(
                "state_reset",
                f"Stored document at {self.path} does not carry key {self.storage_key}; starting empty",
                metadata={"path": str(self.path)},
                level="WARNING",
            )
            return None

        stored_version = document.get("version")
        if stored_version != self.schema_version:
            # No migrations: a version change discards the stored data
            StructuredLogger.log_event(
                "state_reset",
                f"Schema version {stored_version} does not match {self.schema_version}; stored data discarded",
                metadata={"path": str(self.path), "stored_version": stored_version},
                level="WARNING",
            )
            return None

        stored_state = document.get("state", {})
        if not isinstance(stored_state, dict):
            StructuredLogger.log_event(
                "state_reset",
                f"Stored document at {self.path} has no state object; starting empty",
                metadata={"path": str(self.path), "state_type": type(stored_state).__name__},
                level="WARNING",
            )
            return None

        try:
            state = PersistedState.model_validate({**stored_state, "version": stored_version})
        except ValidationError as e:
            StructuredLogger.log_error(e, context={"function": "load", "path": str(self.path)})
            return None

        StructuredLogger.log_event(
            "state_loaded",
            f"Loaded {len(state.items)} items and {len(state.time_logs)} time logs",
            metadata={"path": str(self.path)},
            level="DEBUG",
        )
        return state

    def save(self, state: PersistedState) -> None:
        payload = state.model_dump(mode="json")
        document = {
            "key": self.storage_key,
            "version": self.schema_version,
            "state": {"items": payload["items"], "time_logs": payload["time_logs"]},
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=4)
        os.replace(tmp_path, self.path)
