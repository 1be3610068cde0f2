"""
Versioned schema migrations for the reminder database.

Migration files live next to this module as ``vNNN_<name>.sql``. Each applied
file is recorded in ``schema_migrations`` with a short content hash; editing
a file after it has shipped is refused rather than silently re-run.
"""

import hashlib
import re
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from src.config import get_logger, get_settings
from src.core.exceptions import DatabaseError

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent
_FILENAME = re.compile(r"^v(?P<version>\d+)_(?P<name>\w+)\.sql$")

REQUIRED_TABLES = (
    "api_tokens",
    "device_push_tokens",
    "locations",
    "notifications",
    "orders",
    "profiles",
    "recurring_reminder_rules",
    "reminder_events",
    "reminder_system_settings",
    "reminders",
    "schema_migrations",
    "users",
)
REQUIRED_INDEXES = ("idx_reminders_one_active_per_pair",)
REQUIRED_TRIGGERS = ("trg_orders_resolve_active_reminders",)


@dataclass(frozen=True)
class MigrationInfo:
    """One migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME.match(path.name)
        if match is None:
            raise ValueError(f"Invalid migration filename: {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()
        return cls(
            version=match["version"],
            name=match["name"],
            path=path,
            checksum=digest[:16],
        )


@dataclass
class MigrationResult:
    """Outcome of applying one migration."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[MigrationInfo]:
    """Migration files sorted by version; badly named files are skipped."""
    found = []
    for path in directory.glob("v*.sql"):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return sorted(found, key=lambda m: int(m.version))


async def _applied(conn: aiosqlite.Connection) -> dict[str, str | None]:
    cursor = await conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'schema_migrations'"
    )
    if await cursor.fetchone() is None:
        return {}
    cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    """Highest applied version, or None on an empty database."""
    applied = await _applied(conn)
    if not applied:
        return None
    return max(applied, key=int)


async def _copy_database(source: Path, target: Path) -> None:
    # Online backup API; safe while WAL readers are attached
    async with aiosqlite.connect(source) as src, aiosqlite.connect(target) as dst:
        await src.backup(dst)


class SchemaMigrator:
    """Applies pending migrations to one database file."""

    def __init__(self, db_path: Path, migrations: list[MigrationInfo] | None = None):
        self.db_path = db_path
        self.migrations = migrations if migrations is not None else discover_migrations()

    async def pending(self, conn: aiosqlite.Connection) -> list[MigrationInfo]:
        """
        Migrations not yet applied.

        Raises:
            DatabaseError: An applied migration's file has changed since.
        """
        applied = await _applied(conn)
        drifted = [
            m.version
            for m in self.migrations
            if m.version in applied and applied[m.version] not in (None, m.checksum)
        ]
        if drifted:
            raise DatabaseError(
                "migrate",
                f"applied migrations were modified on disk: {', '.join(drifted)}",
            )
        return [m for m in self.migrations if m.version not in applied]

    async def _apply(self, conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
        started = time.perf_counter()
        log = logger.bind(version=migration.version, migration=migration.name)
        log.info("applying_migration")
        try:
            await conn.executescript(migration.path.read_text(encoding="utf-8"))
            elapsed = int((time.perf_counter() - started) * 1000)
            await conn.execute(
                "INSERT INTO schema_migrations (version, name, checksum, execution_time_ms) "
                "VALUES (?, ?, ?, ?)",
                (migration.version, migration.name, migration.checksum, elapsed),
            )
            await conn.commit()
        except aiosqlite.Error as e:
            await conn.rollback()
            log.error("migration_failed", error=str(e))
            return MigrationResult(
                version=migration.version,
                name=migration.name,
                success=False,
                execution_time_ms=int((time.perf_counter() - started) * 1000),
                error=str(e),
            )

        cursor = await conn.execute("PRAGMA foreign_key_check")
        violations = await cursor.fetchall()
        if violations:
            log.error("migration_left_fk_violations", count=len(violations))
            return MigrationResult(
                version=migration.version,
                name=migration.name,
                success=False,
                execution_time_ms=elapsed,
                error=f"{len(violations)} foreign key violations",
            )

        log.info("migration_applied", execution_time_ms=elapsed)
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=True,
            execution_time_ms=elapsed,
        )

    async def run(self, backup: bool = True) -> list[MigrationResult]:
        """
        Apply every pending migration, stopping at the first failure.

        With ``backup`` an existing database is snapshotted first and
        restored if anything fails; the snapshot is removed on success.
        """
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        snapshot = None
        if backup and self.db_path.exists():
            stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
            snapshot = self.db_path.with_name(f"{self.db_path.stem}.backup_{stamp}.db")
            await _copy_database(self.db_path, snapshot)
            logger.info("database_backup_created", backup_path=str(snapshot))

        results: list[MigrationResult] = []
        try:
            async with aiosqlite.connect(self.db_path) as conn:
                await conn.execute("PRAGMA journal_mode=WAL")
                await conn.execute("PRAGMA foreign_keys=ON")
                for migration in await self.pending(conn):
                    result = await self._apply(conn, migration)
                    results.append(result)
                    if not result.success:
                        break
        except Exception:
            if snapshot is not None:
                await _copy_database(snapshot, self.db_path)
                logger.warning("database_restored_from_backup", backup_path=str(snapshot))
            raise

        failed = any(not r.success for r in results)
        if snapshot is not None:
            if failed:
                await _copy_database(snapshot, self.db_path)
                logger.warning("database_restored_from_backup", backup_path=str(snapshot))
            else:
                snapshot.unlink()

        logger.info(
            "migrations_complete",
            db_path=str(self.db_path),
            applied=len([r for r in results if r.success]),
            failed=failed,
        )
        return results


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """Migrate the configured database (or ``db_path``) to the latest version."""
    migrator = SchemaMigrator(db_path or get_settings().storage.db_path)
    return await migrator.run(backup=create_backup_before)


run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> dict:
    """Applied and pending versions for the status command."""
    db_path = db_path or get_settings().storage.db_path
    known = discover_migrations()
    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in known],
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await _applied(conn)
        current = await get_current_version(conn)

    return {
        "exists": True,
        "current_version": current,
        "applied_migrations": sorted(applied, key=int),
        "pending_migrations": [m.version for m in known if m.version not in applied],
    }


async def _missing(conn: aiosqlite.Connection, kind: str, names: tuple[str, ...]) -> list[str]:
    cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = ?", (kind,))
    present = {row[0] for row in await cursor.fetchall()}
    return [n for n in names if n not in present]


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """
    Structural checks for the reminder schema.

    Besides SQLite's own integrity and foreign key checks this confirms the
    one-active-thread index and the order trigger exist, since both carry
    correctness guarantees the application code relies on.
    """
    db_path = db_path or get_settings().storage.db_path
    checks = []

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA integrity_check")
        (integrity,) = await cursor.fetchone()
        checks.append({"check": "integrity", "status": "PASS" if integrity == "ok" else "FAIL"})

        cursor = await conn.execute("PRAGMA foreign_key_check")
        violations = len(await cursor.fetchall())
        checks.append({
            "check": "foreign_keys",
            "status": "PASS" if violations == 0 else "FAIL",
            "violations": violations,
        })

        for check, kind, names in (
            ("required_tables", "table", REQUIRED_TABLES),
            ("required_indexes", "index", REQUIRED_INDEXES),
            ("required_triggers", "trigger", REQUIRED_TRIGGERS),
        ):
            missing = await _missing(conn, kind, names)
            checks.append({
                "check": check,
                "status": "PASS" if not missing else "FAIL",
                "missing": missing,
            })

    return checks
