# pylint: disable=line-too-long
"""
ManifestDb module for Destiny 2 manifest lookups.

Resolves content hashes to typed definition models from the local, read-only manifest SQLite database.
Typed lookups share a persistent SQLAlchemy engine; ad hoc table/hash queries open a short-lived
sqlite3 connection per call. Nothing here ever writes to the database.
"""
import logging
import os
import sqlite3
import threading
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Type, TypeVar

from sqlalchemy import Integer, String, column, create_engine, select, table
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool

from constants import MANIFEST_DB_PATH, SQL_BATCH_SIZE
from definitions import (DestinyClassDefinition, DestinyDefinition,
                         DestinyInventoryBucketDefinition,
                         DestinyInventoryItemDefinition,
                         DestinyItemCategoryDefinition,
                         DestinySocketCategoryDefinition,
                         DestinySocketTypeDefinition, DestinyStatDefinition,
                         table_for)
from helpers import chunks, convert_hash, convert_hashes

D = TypeVar("D", bound=DestinyDefinition)

logger = logging.getLogger(__name__)


class DefinitionNotFoundError(LookupError):
    """Raised when a typed lookup finds no row for the requested hash."""

    def __init__(self, table_name: str, item_hash: int):
        super().__init__(f"No row in {table_name} for hash {item_hash}")
        self.table_name = table_name
        self.item_hash = item_hash


@dataclass
class ManifestSettings:
    """Settings provider for the manifest database location."""
    db_path: str = MANIFEST_DB_PATH


def _definition_table(table_name: str):
    """Lightweight table construct for a manifest table with ID/JSON columns."""
    return table(table_name, column("ID", Integer), column("JSON", String))


class ManifestDb:
    """
    Read-only lookups against the Destiny 2 manifest SQLite database.

    The database is an immutable snapshot; it is refreshed only by replacing the
    file (see manifest_installer) and reopening.
    """

    def __init__(self, settings: Optional[ManifestSettings] = None):
        """
        Initialize ManifestDb with the settings that locate the database file.

        Args:
            settings (ManifestSettings): Provides the manifest database path.
        """
        self.settings = settings or ManifestSettings()
        self._lock = threading.RLock()
        self._engine: Optional[Engine] = None

    @property
    def db_path(self) -> str:
        return self.settings.db_path

    @property
    def db_uri(self) -> str:
        """Read-only SQLite URI for the database file."""
        return Path(self.db_path).resolve().as_uri() + "?mode=ro"

    def _require_db(self) -> None:
        if not os.path.exists(self.db_path):
            raise FileNotFoundError(f"Manifest DB not found at {self.db_path}")

    @property
    def engine(self) -> Engine:
        """Persistent read-only engine for typed lookups, created on first use."""
        with self._lock:
            if self._engine is None:
                self._require_db()
                # Percent-encoded URI; the path may contain ?, # or %
                self._engine = create_engine(
                    "sqlite://",
                    creator=lambda: sqlite3.connect(self.db_uri, uri=True, check_same_thread=False),
                    poolclass=QueuePool,
                )
            return self._engine

    # --- Typed lookups ---

    def load_class(self, item_hash: int) -> DestinyClassDefinition:
        return self._load_object(DestinyClassDefinition, item_hash)

    def load_inventory_item(self, item_hash: int) -> DestinyInventoryItemDefinition:
        return self._load_object(DestinyInventoryItemDefinition, item_hash)

    def load_plug(self, item_hash: int) -> DestinyInventoryItemDefinition:
        """Plugs are inventory items; look one up by its plug item hash."""
        return self._load_object(DestinyInventoryItemDefinition, item_hash)

    def load_bucket(self, item_hash: int) -> DestinyInventoryBucketDefinition:
        return self._load_object(DestinyInventoryBucketDefinition, item_hash)

    def load_socket_type(self, item_hash: int) -> DestinySocketTypeDefinition:
        return self._load_object(DestinySocketTypeDefinition, item_hash)

    def load_socket_category(self, item_hash: int) -> DestinySocketCategoryDefinition:
        return self._load_object(DestinySocketCategoryDefinition, item_hash)

    def load_stat(self, item_hash: int) -> DestinyStatDefinition:
        return self._load_object(DestinyStatDefinition, item_hash)

    def load_item_categories(self, hashes: Iterable[int]) -> List[DestinyItemCategoryDefinition]:
        """
        Load every item category among ``hashes``. Duplicates collapse; order is not preserved.
        """
        return self._load_objects(DestinyItemCategoryDefinition, hashes)

    def load_stats(self, hashes: Iterable[int]) -> List[DestinyStatDefinition]:
        """
        Load every stat among ``hashes``. Duplicates collapse; order is not preserved.
        """
        return self._load_objects(DestinyStatDefinition, hashes)

    def load_inventory_items_with_category(self, category_hash: int) -> List[DestinyInventoryItemDefinition]:
        """
        Load every inventory item whose itemCategoryHashes contains ``category_hash``.

        This scans and deserializes the whole inventory item table.
        """
        tbl = _definition_table(table_for(DestinyInventoryItemDefinition))
        items = []
        with self.engine.connect() as conn:
            for row in conn.execute(select(tbl.c.JSON)):
                item = DestinyInventoryItemDefinition.model_validate_json(row.JSON)
                if category_hash in item.itemCategoryHashes:
                    items.append(item)
        logger.debug("Found %d inventory items in category %s", len(items), category_hash)
        return items

    def has_definition(self, definition_type: Type[DestinyDefinition], item_hash: int) -> bool:
        """
        Check whether a definition exists, for callers that must validate a hash before a typed load.
        """
        tbl = _definition_table(table_for(definition_type))
        stmt = select(tbl.c.ID).where(tbl.c.ID == convert_hash(item_hash)).limit(1)
        with self.engine.connect() as conn:
            return conn.execute(stmt).first() is not None

    def _load_object(self, definition_type: Type[D], item_hash: int) -> D:
        """
        Resolve a single hash against the table registered for ``definition_type``.

        Raises:
            DefinitionNotFoundError: If no row has the hash's key.
            pydantic.ValidationError: If the row's JSON does not fit the model.
        """
        table_name = table_for(definition_type)
        tbl = _definition_table(table_name)
        stmt = select(tbl.c.JSON).where(tbl.c.ID == convert_hash(item_hash)).limit(1)
        with self.engine.connect() as conn:
            row = conn.execute(stmt).first()
        if row is None:
            raise DefinitionNotFoundError(table_name, item_hash)
        return definition_type.model_validate_json(row.JSON)

    def _load_objects(self, definition_type: Type[D], hashes: Iterable[int]) -> List[D]:
        keys = sorted(convert_hashes(hashes))
        if not keys:
            return []
        tbl = _definition_table(table_for(definition_type))
        out: List[D] = []
        with self.engine.connect() as conn:
            for batch in chunks(keys, SQL_BATCH_SIZE):
                for row in conn.execute(select(tbl.c.JSON).where(tbl.c.ID.in_(batch))):
                    out.append(definition_type.model_validate_json(row.JSON))
        return out

    # --- Ad hoc lookups ---

    def _connect(self) -> sqlite3.Connection:
        """Open a short-lived read-only sqlite3 connection."""
        self._require_db()
        return sqlite3.connect(self.db_uri, uri=True)

    @staticmethod
    def _find_table(conn: sqlite3.Connection, table_name: str) -> Optional[str]:
        """Return the stored name of ``table_name`` (case-insensitive), or None."""
        try:
            row = conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ? COLLATE NOCASE",
                (table_name,),
            ).fetchone()
        except UnicodeEncodeError:
            # Not representable in the database encoding, so no table can have this name
            return None
        return row[0] if row else None

    def table_exists(self, table_name: str) -> bool:
        """True if the manifest database has a table named ``table_name`` (case-insensitive)."""
        with closing(self._connect()) as conn:
            return self._find_table(conn, table_name) is not None

    def get_json(self, table_name: str, hashes: int | Iterable[int]) -> str | List[str]:
        """
        Fetch raw JSON for one hash or many hashes from an arbitrary manifest table.

        The manifest schema varies between versions, so a missing table is treated as
        "no data" rather than an error.

        Args:
            table_name (str): Manifest table name, matched case-insensitively.
            hashes (int | Iterable[int]): A single hash, or an iterable of hashes.

        Returns:
            str: For a single hash, the JSON text or "" when the table or row is missing.
            List[str]: For many hashes, the JSON of every matching row (duplicates collapse,
                order not preserved), or [] when the table is missing.
        """
        single = isinstance(hashes, (int, str))
        with closing(self._connect()) as conn:
            stored_name = self._find_table(conn, table_name)
            if stored_name is None:
                logger.info("Manifest table %s does not exist", table_name)
                return "" if single else []
            quoted = '"' + stored_name.replace('"', '""') + '"'
            if single:
                row = conn.execute(f"SELECT json FROM {quoted} WHERE id = ?", (convert_hash(hashes),)).fetchone()
                return row[0] if row else ""
            keys = sorted(convert_hashes(hashes))
            out: List[str] = []
            for batch in chunks(keys, SQL_BATCH_SIZE):
                placeholders = ",".join("?" for _ in batch)
                cursor = conn.execute(f"SELECT json FROM {quoted} WHERE id IN ({placeholders})", tuple(batch))
                out.extend(row[0] for row in cursor.fetchall())
            return out

    def close(self) -> None:
        """Dispose of the persistent engine. The database file is left untouched."""
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None
