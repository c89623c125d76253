from __future__ import annotations

import os
import sqlite3
from pathlib import Path
from typing import Callable, TypeVar

DEFAULT_SQLITE_CONNECT_TIMEOUT_SECONDS = 30.0
DEFAULT_SQLITE_BUSY_TIMEOUT_MS = 30_000

_N = TypeVar("_N", int, float)


def _positive_env(name: str, default: _N, cast: Callable[[str], _N]) -> _N:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = cast(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _configure_connection(conn: sqlite3.Connection) -> None:
    busy_timeout_ms = _positive_env("SIARNI_SQLITE_BUSY_TIMEOUT_MS", DEFAULT_SQLITE_BUSY_TIMEOUT_MS, int)
    conn.execute("PRAGMA foreign_keys = ON;")
    conn.execute("PRAGMA journal_mode = WAL;")
    conn.execute("PRAGMA synchronous = NORMAL;")
    conn.execute(f"PRAGMA busy_timeout = {busy_timeout_ms};")


def get_connection(db_path: Path) -> sqlite3.Connection:
    timeout = _positive_env(
        "SIARNI_SQLITE_CONNECT_TIMEOUT_SECONDS",
        DEFAULT_SQLITE_CONNECT_TIMEOUT_SECONDS,
        float,
    )
    conn = sqlite3.connect(db_path, timeout=timeout)
    conn.row_factory = sqlite3.Row
    _configure_connection(conn)
    return conn


def read_runtime_pragmas(db_path: Path) -> dict[str, object]:
    """Report the pragmas a live connection actually runs with."""
    with get_connection(db_path) as conn:
        return {
            "journal_mode": str(conn.execute("PRAGMA journal_mode;").fetchone()[0]).lower(),
            "busy_timeout_ms": int(conn.execute("PRAGMA busy_timeout;").fetchone()[0]),
            "foreign_keys": bool(conn.execute("PRAGMA foreign_keys;").fetchone()[0]),
            "synchronous": int(conn.execute("PRAGMA synchronous;").fetchone()[0]),
        }


def default_schema_path() -> Path:
    return Path(__file__).resolve().parent / "schema.sql"


def initialize_schema(db_path: Path, schema_path: Path | None = None) -> None:
    schema = (schema_path or default_schema_path()).read_text(encoding="utf-8")
    with get_connection(db_path) as conn:
        conn.executescript(schema)
        conn.commit()
