from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import mysql.connector

from ..core.exceptions import UnknownRole
from ..roles.hierarchy import normalize_role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "employee_portal")),
    )


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # schema.sql only quotes plain DEFAULT literals, so tracking single quotes is enough.
    lines = [ln for ln in sql.splitlines() if not ln.lstrip().startswith("--")]
    buf: list[str] = []
    quoted = False
    for ch in "\n".join(lines):
        if ch == "'":
            quoted = not quoted
        if ch == ";" and not quoted:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = Path(schema_path).read_text(encoding="utf-8")

    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def normalize_stored_roles(db_config: dict) -> int:
    """Rewrite legacy role spellings ('SUPER_ADMIN', 'Administrator', ...) to canonical values.

    Rows with unrecognizable roles are left alone and logged. Returns the number of rows changed.
    """
    conn = _connect(_as_target(db_config))
    changed = 0
    try:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT DISTINCT role FROM employees")
        for row in cur.fetchall():
            stored = row["role"]
            try:
                canonical = normalize_role(stored).value
            except UnknownRole:
                logger.warning("Leaving unrecognized role %r untouched", stored)
                continue
            if canonical != stored:
                cur.execute("UPDATE employees SET role=%s WHERE role=%s", (canonical, stored))
                changed += cur.rowcount
        conn.commit()
    finally:
        conn.close()
    return changed


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
