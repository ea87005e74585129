from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator[tuple]:
    """One connection, one transaction: commit when the block exits cleanly."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        logger.debug("transaction rolled back", exc_info=True)
        conn.rollback()
        raise
    finally:
        conn.close()


def query_rows(cur, sql: str, params: Sequence[Any] = ()) -> List[Row]:
    cur.execute(sql, tuple(params))
    return list(cur.fetchall() or [])


def query_first(cur, sql: str, params: Sequence[Any] = ()) -> Optional[Row]:
    rows = query_rows(cur, sql, params)
    return rows[0] if rows else None


def in_clause(values: Sequence[Any]) -> str:
    """`%s, %s, ...` for an IN filter; `values` must not be empty."""
    return ", ".join(["%s"] * len(values))


def to_clock_time(value: Any) -> Optional[time]:
    """Arrival times are stored as TIME; the connector may hand back a
    timedelta or a string instead of a `time`. Seconds are dropped."""
    if value is None:
        return None
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if isinstance(value, timedelta):
        minutes = (int(value.total_seconds()) // 60) % (24 * 60)
        return time(minutes // 60, minutes % 60)
    if isinstance(value, str):
        hh, _, rest = value.strip().partition(":")
        mm = rest.split(":", 1)[0]
        if not hh.isdigit() or not mm.isdigit():
            raise ValueError(f"Invalid TIME value from MySQL: {value!r}")
        return time(int(hh), int(mm))
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
