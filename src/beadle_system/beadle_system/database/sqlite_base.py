from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, immediate: bool = False):
    """Yield (conn, cursor); commit on success, rollback on error.

    ``immediate=True`` takes the SQLite write lock up front so a
    multi-statement write is applied as one unit.
    """

    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        try:
            if immediate:
                cur.execute("BEGIN IMMEDIATE")
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return dict(row) if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return [dict(r) for r in rows or []]


def placeholders(values: Sequence[Any]) -> str:
    return ",".join("?" for _ in values)


def dump_names(names: Sequence[str]) -> str:
    return json.dumps(list(names))


def load_names(value: Any) -> tuple[str, ...]:
    """Decode a JSON list column written by ``dump_names``."""

    if value is None or value == "":
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    data = json.loads(value)
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON list, got: {value!r}")
    return tuple(str(v) for v in data)
