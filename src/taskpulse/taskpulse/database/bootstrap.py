from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)


def _connect(db_config: dict, *, with_database: bool = True):
    return DatabaseConnection(DBConfig.from_mapping(db_config)).connect(with_database=with_database)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes and skips '--' comments).
    buf: list[str] = []
    in_single = False
    in_double = False

    for line in sql.splitlines():
        if not in_single and not in_double and line.lstrip().startswith("--"):
            continue
        for ch in line + "\n":
            if ch == "'" and not in_double:
                in_single = not in_single
            elif ch == '"' and not in_single:
                in_double = not in_double
            elif ch == ";" and not in_single and not in_double:
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
    database = DBConfig.from_mapping(db_config).database
    conn = _connect(db_config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)

    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Applied schema %s to %s", schema_path, DBConfig.from_mapping(db_config).database)


# (email, password, role)
DEMO_USERS = (
    ("admin@taskpulse.local", "admin123", "admin"),
    ("manager@taskpulse.local", "manager123", "manager"),
    ("employee@taskpulse.local", "employee123", "employee"),
)

_DEMO_PROFILES = {
    "admin": ("Admin Demo", "Management"),
    "manager": ("Manager Demo", "Engineering"),
    "employee": ("Employee Demo", "Engineering"),
}


def ensure_demo_users(db_config: dict) -> None:
    """Upsert one account per role so a fresh database can be used right away."""

    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        for email, password, role in DEMO_USERS:
            name, department = _DEMO_PROFILES[role]
            cur.execute(
                """
                INSERT INTO users (name, email, password_hash, role, department, is_active, is_email_verified)
                VALUES (%s, %s, %s, %s, %s, 1, 1)
                ON DUPLICATE KEY UPDATE
                    name=VALUES(name), password_hash=VALUES(password_hash), role=VALUES(role),
                    department=VALUES(department), is_active=1, is_email_verified=1
                """,
                (name, email, generate_password_hash(password), role, department),
            )
        conn.commit()
    finally:
        conn.close()
    logger.info("Demo users ready in %s", DBConfig.from_mapping(db_config).database)


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
