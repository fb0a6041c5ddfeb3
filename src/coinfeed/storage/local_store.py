"""
Local JSON store for last-known-good market data and user preferences.

One file per value:
- ``cached_coins.json``: coin listing envelope
- ``cached_global.json``: global summary envelope
- ``preferences.json``: favorites and watchlist

Snapshot parts are wrapped in ``{"saved_at": ..., "data": ...}`` so a cache
hit can report how old it is; the coin listing also records its ``page``.
Writes are atomic (temp file, then ``os.replace``); reads never raise.
"""

import json
import logging
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from src.coinfeed.enums import DataKind
from src.coinfeed.errors import StoreWriteError
from src.coinfeed.model.coin import CoinRecord
from src.coinfeed.model.global_summary import GlobalSummary
from src.coinfeed.model.preferences import UserPreferences
from src.coinfeed.protocols.market import SnapshotPart

logger = logging.getLogger(__name__)

COINS_FILE = "cached_coins.json"
GLOBAL_FILE = "cached_global.json"
PREFERENCES_FILE = "preferences.json"

_FILES = {
    DataKind.COINS: COINS_FILE,
    DataKind.GLOBAL: GLOBAL_FILE,
}

_ADAPTERS: dict[DataKind, TypeAdapter[Any]] = {
    DataKind.COINS: TypeAdapter(list[CoinRecord]),
    DataKind.GLOBAL: TypeAdapter(GlobalSummary),
}


class SnapshotEnvelope(BaseModel):
    """On-disk wrapper around a cached snapshot part."""

    saved_at: datetime
    data: Any
    page: int | None = None

    model_config = ConfigDict(frozen=True)


class LocalStore:
    """
    File-backed SnapshotStore.

    The directory is created lazily on first write.
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def path_for(self, kind: DataKind) -> Path:
        return self.directory / _FILES[kind]

    @property
    def preferences_path(self) -> Path:
        return self.directory / PREFERENCES_FILE

    # ------------------------------------------------------------------
    # File IO
    # ------------------------------------------------------------------

    def _write_json(self, path: Path, payload: Any) -> None:
        """
        Atomically replace ``path`` with ``payload`` serialized as JSON.

        Raises:
            StoreWriteError: Directory, temp file or rename failed; any
                previous file at ``path`` is left untouched

        """
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False)
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as e:
            tmp.unlink(missing_ok=True)
            raise StoreWriteError(f"failed to write {path.name}: {e}") from e

    def _read_json(self, path: Path) -> Any | None:
        """Parsed contents of ``path``, or None when missing or unreadable."""
        if not path.exists():
            logger.debug(f"Cache miss: {path.name} does not exist")
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Cache miss: {path.name} is unreadable ({e})")
            return None

    def _read_envelope(self, kind: DataKind) -> SnapshotEnvelope | None:
        raw = self._read_json(self.path_for(kind))
        if raw is None:
            return None
        try:
            return SnapshotEnvelope.model_validate(raw)
        except ValidationError:
            logger.warning(f"Cache miss: {self.path_for(kind).name} has no envelope")
            return None

    # ------------------------------------------------------------------
    # Snapshot parts
    # ------------------------------------------------------------------

    def save_snapshot_part(
        self, kind: DataKind, value: SnapshotPart, *, page: int | None = None
    ) -> None:
        envelope: dict[str, Any] = {
            "saved_at": datetime.now(UTC).isoformat(),
            "data": _ADAPTERS[kind].dump_python(value, mode="json"),
        }
        if page is not None:
            envelope["page"] = page
        self._write_json(self.path_for(kind), envelope)
        logger.debug(f"Saved {kind.value} snapshot to {self.path_for(kind)}")

    def load_snapshot_part(self, kind: DataKind) -> SnapshotPart | None:
        envelope = self._read_envelope(kind)
        if envelope is None:
            return None
        try:
            return _ADAPTERS[kind].validate_python(envelope.data)
        except ValidationError as e:
            logger.warning(
                f"Cache miss: {self.path_for(kind).name} failed validation "
                f"({e.error_count()} error(s))"
            )
            return None

    def cached_at(self, kind: DataKind) -> datetime | None:
        envelope = self._read_envelope(kind)
        return envelope.saved_at if envelope else None

    def cached_page(self, kind: DataKind) -> int | None:
        """Listing page the cached value was fetched for, if recorded."""
        envelope = self._read_envelope(kind)
        return envelope.page if envelope else None

    # ------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------

    def save_preferences(self, preferences: UserPreferences) -> None:
        self._write_json(self.preferences_path, preferences.model_dump(mode="json"))

    def load_preferences(self) -> UserPreferences | None:
        raw = self._read_json(self.preferences_path)
        if raw is None:
            return None
        try:
            return UserPreferences.model_validate(raw)
        except ValidationError:
            logger.warning(f"Ignoring invalid {PREFERENCES_FILE}")
            return None
