"""
Persistence layer for the stage-flow graph.

The whole graph is stored as one JSON document under a single key of a
small SQLite key-value table. Loading is fail-closed: a document that does
not parse or does not match the graph schema is rejected as a whole and the
caller falls back to the default graph.
"""

import logging
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import ValidationError

from models.errors import create_store_error, sanitize_path, sanitize_stack_trace
from models.graph import Graph
from utils.pydantic_error_mapper import describe_document_error

logger = logging.getLogger(__name__)

# Default store path relative to repository root
DEFAULT_STORE_PATH = "data/trackmyapp.db"

DEFAULT_STORE_KEY = "trackmyapp-graph"

_CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS kv_store (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
"""


def resolve_store_path(store_path: Optional[str] = None) -> Path:
    """
    Resolve the store path with support for overrides and defaults.

    Resolution order:
    1. Provided store_path parameter
    2. TRACKMYAPP_STORE environment variable
    3. TRACKMYAPP_ROOT/data/trackmyapp.db
    4. Default path: data/trackmyapp.db

    Relative paths resolve from the repository root, not the working
    directory.

    Args:
        store_path: Optional store path override

    Returns:
        Resolved absolute Path to the store file
    """
    if store_path is not None:
        path_str = store_path
    else:
        store_env = os.getenv("TRACKMYAPP_STORE")
        if store_env:
            path_str = store_env
        else:
            root_env = os.getenv("TRACKMYAPP_ROOT")
            if root_env:
                return Path(root_env) / "data" / "trackmyapp.db"
            path_str = DEFAULT_STORE_PATH

    path = Path(path_str)

    if not path.is_absolute():
        repo_root = Path(__file__).resolve().parents[2]  # db/ -> mcp-server-python/ -> repo/
        path = repo_root / path

    return path


class LoadStatus(str, Enum):
    """Outcome of reading the graph document."""

    LOADED = "loaded"
    MISSING = "missing"
    INVALID = "invalid"


@dataclass
class LoadResult:
    """Graph read from the store, or why there is none."""

    status: LoadStatus
    graph: Optional[Graph] = None
    error: Optional[str] = None


def parse_graph_document(text: str) -> Graph:
    """
    Validate a persisted JSON document into a Graph.

    Raises:
        pydantic.ValidationError: If the text is not valid JSON or does not
            match the graph schema
    """
    return Graph.model_validate_json(text)


class GraphStore:
    """
    Context manager for reading and writing the graph document.

    Creates the store file and table on first use. Every block runs in one
    transaction that is rolled back if the block raises.

    Usage:
        with GraphStore(store_path) as store:
            result = store.load()
            ...
            store.save(graph)
            store.commit()
    """

    def __init__(self, store_path: Optional[str] = None, key: str = DEFAULT_STORE_KEY):
        """
        Initialize the store.

        Args:
            store_path: Optional store path override
            key: Key the graph document is stored under
        """
        self.store_path = store_path
        self.key = key
        self.resolved_path: Optional[Path] = None
        self.conn: Optional[sqlite3.Connection] = None
        self._in_transaction = False

    def __enter__(self):
        """
        Open the connection, ensure the table exists and begin a transaction.

        Raises:
            ToolError: If the store file cannot be created or opened
        """
        self.resolved_path = resolve_store_path(self.store_path)

        if self.resolved_path.exists() and not self.resolved_path.is_file():
            raise create_store_error(
                f"Store path is not a file: {sanitize_path(str(self.resolved_path))}"
            )

        try:
            self.resolved_path.parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(str(self.resolved_path))
            self.conn.row_factory = sqlite3.Row
            self.conn.execute(_CREATE_TABLE_SQL)
            self.conn.execute("BEGIN")
            self._in_transaction = True
            return self

        except OSError as e:
            raise create_store_error(str(e), retryable=False, original_error=e) from e

        except sqlite3.OperationalError as e:
            if self.conn is not None:
                self.conn.close()
                self.conn = None
            raise create_store_error(str(e), retryable=True, original_error=e) from e

        except sqlite3.Error as e:
            if self.conn is not None:
                self.conn.close()
                self.conn = None
            raise create_store_error(str(e), retryable=False, original_error=e) from e

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Rollback on exception, close connection always."""
        try:
            if exc_type is not None and self._in_transaction:
                self.rollback()
        finally:
            if self.conn is not None:
                self.conn.close()
                self.conn = None

        return False

    def _require_conn(self) -> sqlite3.Connection:
        if self.conn is None:
            raise create_store_error("Connection not established", retryable=False)
        return self.conn

    def load(self) -> LoadResult:
        """
        Read and validate the graph document.

        Returns:
            LoadResult with LOADED and the graph, MISSING when nothing is
            stored under the key, or INVALID with a short reason when the
            stored document is rejected

        Raises:
            ToolError: If the query itself fails
        """
        conn = self._require_conn()
        try:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (self.key,)).fetchone()
        except sqlite3.Error as e:
            raise create_store_error(str(e), retryable=False, original_error=e) from e

        if row is None:
            return LoadResult(status=LoadStatus.MISSING)

        try:
            graph = parse_graph_document(row["value"])
        except ValidationError as e:
            reason = sanitize_stack_trace(describe_document_error(e))
            logger.warning(f"Rejected stored graph under key {self.key!r}: {reason}")
            return LoadResult(status=LoadStatus.INVALID, error=reason)

        return LoadResult(status=LoadStatus.LOADED, graph=graph)

    def save(self, graph: Graph) -> None:
        """
        Write the full graph snapshot under the store key.

        Call ``commit`` to make it durable.

        Raises:
            ToolError: If the write fails
        """
        conn = self._require_conn()
        timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        try:
            conn.execute(
                "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
                (self.key, graph.to_json(), timestamp),
            )
        except sqlite3.Error as e:
            raise create_store_error(str(e), retryable=False, original_error=e) from e

    def clear(self) -> bool:
        """Delete the stored document. Returns True if one existed."""
        conn = self._require_conn()
        try:
            cursor = conn.execute("DELETE FROM kv_store WHERE key = ?", (self.key,))
        except sqlite3.Error as e:
            raise create_store_error(str(e), retryable=False, original_error=e) from e
        return cursor.rowcount > 0

    def commit(self) -> None:
        conn = self._require_conn()
        try:
            conn.commit()
            self._in_transaction = False
        except sqlite3.Error as e:
            raise create_store_error(str(e), retryable=True, original_error=e) from e

    def rollback(self) -> None:
        if self.conn is not None and self._in_transaction:
            try:
                self.conn.rollback()
            finally:
                self._in_transaction = False


def graph_from_load_result(result: LoadResult) -> Tuple[Graph, List[str]]:
    """
    Pick the graph to work on from a load result.

    A missing document means a fresh start; an invalid one is not merged
    in any way and the default graph is used with a warning.
    """
    if result.status == LoadStatus.LOADED and result.graph is not None:
        return result.graph, []
    if result.status == LoadStatus.INVALID:
        return Graph.default(), [
            f"Stored graph failed validation and was ignored ({result.error}); "
            "starting from the default graph"
        ]
    return Graph.default(), []
