"""
Versioned schema migrations for the ledger database.

Migrations are vNNN_name.sql files beside this module, applied in version
order and recorded in schema_migrations with a checksum of their text.
An existing database is copied aside first and put back if a migration
fails.
"""

import hashlib
import re
import shutil
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from scentledger.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

_FILENAME = re.compile(r"^v(\d{3,})_(\w+)\.sql$")

REQUIRED_TABLES = (
    "products",
    "customers",
    "shipments",
    "shipment_items",
    "inventory_adjustments",
    "sales",
    "sale_items",
    "sale_item_allocations",
    "payments",
    "schema_migrations",
)

# A lot's remaining count must equal what it received, plus adjustments,
# minus everything allocated from it
_LOT_BALANCE_SQL = """
    SELECT si.id
    FROM shipment_items si
    LEFT JOIN (
        SELECT shipment_item_id, SUM(quantity) AS allocated
        FROM sale_item_allocations GROUP BY shipment_item_id
    ) a ON a.shipment_item_id = si.id
    LEFT JOIN (
        SELECT shipment_item_id, SUM(adjustment_quantity) AS adjusted
        FROM inventory_adjustments GROUP BY shipment_item_id
    ) adj ON adj.shipment_item_id = si.id
    WHERE si.quantity + COALESCE(adj.adjusted, 0) - COALESCE(a.allocated, 0)
          != si.remaining_inventory
    ORDER BY si.id
"""


@dataclass(frozen=True)
class MigrationInfo:
    """One migration file."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME.match(path.name)
        if match is None:
            raise ValueError(f"not a migration file name: {path.name}")
        checksum = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=checksum)

    def read_sql(self) -> str:
        return self.path.read_text(encoding="utf-8")


@dataclass
class MigrationResult:
    """Outcome of applying one migration."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations() -> list[MigrationInfo]:
    """Migration files in version order; badly named files are skipped."""
    found = []
    for path in sorted(MIGRATIONS_DIR.glob("v*.sql")):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("migration_file_ignored", path=path.name, error=str(e))
    return found


async def _applied_checksums(conn: aiosqlite.Connection) -> dict[str, str]:
    cursor = await conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'schema_migrations'"
    )
    if await cursor.fetchone() is None:
        return {}
    cursor = await conn.execute("SELECT version, checksum FROM schema_migrations ORDER BY version")
    return {version: checksum for version, checksum in await cursor.fetchall()}


async def _foreign_key_violations(conn: aiosqlite.Connection) -> int:
    cursor = await conn.execute("PRAGMA foreign_key_check")
    return len(await cursor.fetchall())


async def _apply(conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
    started = time.perf_counter()
    try:
        await conn.executescript(migration.read_sql())
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        await conn.execute(
            """
            INSERT INTO schema_migrations (version, name, checksum, execution_time_ms)
            VALUES (?, ?, ?, ?)
            """,
            (migration.version, migration.name, migration.checksum, elapsed_ms),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=False,
            execution_time_ms=int((time.perf_counter() - started) * 1000),
            error=str(e),
        )

    logger.info(
        "migration_applied",
        version=migration.version,
        name=migration.name,
        execution_time_ms=elapsed_ms,
    )
    return MigrationResult(
        version=migration.version,
        name=migration.name,
        success=True,
        execution_time_ms=elapsed_ms,
    )


def _backup(db_path: Path) -> Path:
    stamp = datetime.now().strftime("%Y%m%d%H%M%S")
    backup_path = db_path.with_name(f"{db_path.stem}.{stamp}.bak")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backed_up", backup_path=str(backup_path))
    return backup_path


def _restore(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.warning("database_restored", backup_path=str(backup_path))


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Bring the database up to the newest migration.

    Args:
        db_path: Database file (default from settings)
        create_backup_before: Copy an existing database aside first; the
            copy is removed on success and restored on failure

    Returns:
        Results for the migrations that were attempted; empty when the
        database was already current
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    backup_path = _backup(db_path) if create_backup_before and db_path.exists() else None

    results: list[MigrationResult] = []
    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")

            applied = await _applied_checksums(conn)
            for migration in discover_migrations():
                if migration.version in applied:
                    if applied[migration.version] != migration.checksum:
                        logger.warning(
                            "migration_changed_after_apply",
                            version=migration.version,
                            recorded=applied[migration.version],
                            current=migration.checksum,
                        )
                    continue

                result = await _apply(conn, migration)
                results.append(result)
                if result.success:
                    violations = await _foreign_key_violations(conn)
                    if violations:
                        result.success = False
                        result.error = f"{violations} foreign key violations"
                if not result.success:
                    break
    except Exception as e:
        logger.error("database_initialization_failed", db_path=str(db_path), error=str(e))
        if backup_path is not None:
            _restore(db_path, backup_path)
        raise

    if backup_path is not None:
        if all(r.success for r in results):
            backup_path.unlink()
        else:
            _restore(db_path, backup_path)

    logger.info(
        "database_initialized",
        db_path=str(db_path),
        applied=[r.version for r in results if r.success],
    )
    return results


async def get_migration_status(db_path: Path | None = None) -> dict[str, Any]:
    """Applied and pending versions."""
    db_path = db_path or get_settings().storage.db_path
    discovered = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
            "total_migrations": len(discovered),
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await _applied_checksums(conn)

    return {
        "exists": True,
        "current_version": max(applied) if applied else None,
        "applied_migrations": sorted(applied),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
        "total_migrations": len(discovered),
    }


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict[str, Any]]:
    """Foreign keys, page integrity, required tables and lot balances."""
    db_path = db_path or get_settings().storage.db_path

    async with aiosqlite.connect(db_path) as conn:
        violations = await _foreign_key_violations(conn)

        cursor = await conn.execute("PRAGMA integrity_check")
        (integrity,) = await cursor.fetchone()

        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        tables = {row[0] for row in await cursor.fetchall()}
        missing = [t for t in REQUIRED_TABLES if t not in tables]

        leaking: list[int] = []
        if not missing:
            cursor = await conn.execute(_LOT_BALANCE_SQL)
            leaking = [row[0] for row in await cursor.fetchall()]

    def status(ok: bool) -> str:
        return "PASS" if ok else "FAIL"

    return [
        {"check": "foreign_keys", "status": status(violations == 0), "violations": violations},
        {"check": "integrity", "status": status(integrity == "ok"), "result": integrity},
        {"check": "required_tables", "status": status(not missing), "missing": missing},
        {"check": "lot_balances", "status": status(not leaking), "lots": leaking},
    ]
