from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"
SEED_PATH = Path(__file__).resolve().parent / "seed.sql"


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

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


def _run_sql_file(db_config: dict, path: str | Path) -> None:
    target = DBConfig.from_mapping(db_config)
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))

    conn = DatabaseConnection(target).connect()
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_mapping(db_config)
    conn = DatabaseConnection(target).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    _run_sql_file(db_config, schema_path)
    logger.info("schema applied from %s", schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path = SEED_PATH) -> None:
    _run_sql_file(db_config, seed_path)
    logger.info("seed applied from %s", seed_path)


def ensure_demo_employees(db_config: dict) -> None:
    """Upsert demo accounts: one per dashboard, the employee reporting to the manager."""

    target = DBConfig.from_mapping(db_config)
    conn = DatabaseConnection(target).connect()
    try:
        cur = conn.cursor(dictionary=True)

        def upsert(full_name: str, email: str, password: str, role: str, department: str, manager_id=None) -> int:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT employee_id FROM employees WHERE email=%s", (email,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    """
                    UPDATE employees
                    SET full_name=%s, password_hash=%s, role=%s, department=%s, manager_id=%s, is_active=1
                    WHERE email=%s
                    """,
                    (full_name, password_hash, role, department, manager_id, email),
                )
                return int(existing["employee_id"])
            cur.execute(
                """
                INSERT INTO employees (full_name, email, password_hash, role, department, manager_id)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (full_name, email, password_hash, role, department, manager_id),
            )
            return int(cur.lastrowid)

        upsert("Admin Demo", "admin@example.com", "admin123", "admin", "Administration")
        upsert("HR Demo", "hr@example.com", "hr1234", "hr", "Human Resources")
        manager_id = upsert("Manager Demo", "manager@example.com", "manager123", "manager", "Engineering")
        upsert("Employee Demo", "employee@example.com", "employee123", "employee", "Engineering", manager_id)

        conn.commit()
    finally:
        conn.close()
    logger.info("demo employees ready")


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_mapping(db_config)
    conn = DatabaseConnection(target).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
