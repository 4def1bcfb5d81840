"""
Versioned schema migrations.

SQL files live in ./migrations and are named NNN_description.sql. Each file runs
in its own transaction and is recorded in schema_migrations, so init_db() can be
called on every start.
"""
import logging
import re
from pathlib import Path
from typing import List, Set, Tuple

import asyncpg

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"

_MIGRATION_NAME = re.compile(r"^(\d+)_(.+)\.sql$")


async def ensure_migrations_table(conn: asyncpg.Connection) -> None:
    await conn.execute("""
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version TEXT PRIMARY KEY,
            applied_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)


async def get_applied_migrations(conn: asyncpg.Connection) -> Set[str]:
    rows = await conn.fetch("SELECT version FROM schema_migrations")
    return {row["version"] for row in rows}


def get_migration_files(directory: Path = MIGRATIONS_DIR) -> List[Tuple[str, Path]]:
    """
    Список (version, path), отсортированный по числовой версии.

    Файлы с неподходящим именем пропускаются с предупреждением.
    """
    if not directory.exists():
        logger.warning("MIGRATIONS_DIR_MISSING path=%s", directory)
        return []

    migrations = []
    for file_path in directory.glob("*.sql"):
        match = _MIGRATION_NAME.match(file_path.name)
        if match:
            migrations.append((match.group(1), file_path))
        else:
            logger.warning("MIGRATION_NAME_INVALID file=%s", file_path.name)

    # числовая сортировка, не лексикографическая
    migrations.sort(key=lambda item: int(item[0]))
    return migrations


async def apply_migration(conn: asyncpg.Connection, version: str, migration_path: Path) -> None:
    sql_content = migration_path.read_text(encoding="utf-8")
    if not sql_content.strip():
        logger.warning("MIGRATION_EMPTY version=%s", version)
        return

    logger.info("MIGRATION_APPLY version=%s file=%s", version, migration_path.name)
    await conn.execute(sql_content)
    await conn.execute(
        "INSERT INTO schema_migrations (version) VALUES ($1) ON CONFLICT (version) DO NOTHING",
        version,
    )


async def run_migrations(conn: asyncpg.Connection) -> bool:
    """
    Применить все неприменённые миграции.

    Returns:
        True если всё применено, False если какая-то миграция упала
        (уже применённые остаются, упавшая откатывается).
    """
    try:
        await ensure_migrations_table(conn)
        applied = await get_applied_migrations(conn)

        for version, migration_path in get_migration_files():
            if version in applied:
                continue
            async with conn.transaction():
                await apply_migration(conn, version, migration_path)

        logger.info("MIGRATIONS_DONE applied_before=%s", sorted(applied))
        return True
    except Exception:
        logger.exception("MIGRATIONS_FAILED")
        return False


async def run_migrations_safe(pool: asyncpg.Pool) -> bool:
    async with pool.acquire() as conn:
        return await run_migrations(conn)
