"""Versioned schema migrations and the engine that applies them."""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from tablewright.database.interfaces.store import RecordStore
from tablewright.database.operations import SchemaOperation
from tablewright.database.schema import SchemaCatalog, version_key
from tablewright.exceptions import (
    DuplicateVersion,
    NoInverseDefined,
    OutOfOrderApplication,
    SchemaError,
    StoreError,
    StoreRejected,
    StoreUnavailable,
    UnknownTable,
    UnknownVersion,
)
from tablewright.log import get_logger

logger = get_logger(__name__)

_VERSION_PATTERN = re.compile(r"^\d+$")


def next_version(now: datetime | None = None) -> str:
    """Generate a timestamp version such as ``20240101120000`` (UTC)."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y%m%d%H%M%S")


@dataclass(frozen=True)
class MigrationUnit:
    """One versioned schema change.

    ``operations`` run in order when the unit is applied. ``inverse`` runs in
    order when it is rolled back; a unit without one cannot be rolled back.
    """

    version: str
    operations: tuple[SchemaOperation, ...]
    inverse: tuple[SchemaOperation, ...] | None = None
    name: str = ""

    def __post_init__(self) -> None:
        if not _VERSION_PATTERN.match(self.version):
            raise SchemaError(
                f"Migration version must be numeric: {self.version!r}", self.version
            )
        object.__setattr__(self, "operations", tuple(self.operations))
        if not self.operations:
            raise SchemaError(f"Migration {self.version} has no operations", self.version)
        if self.inverse is not None:
            object.__setattr__(self, "inverse", tuple(self.inverse))

    @classmethod
    def reversible(
        cls, version: str, *operations: SchemaOperation, name: str = ""
    ) -> "MigrationUnit":
        """Create a unit whose inverse is derived from its operations.

        The inverse is the inverted operations in reverse order. If any
        operation can't be inverted, the unit has no inverse.
        """
        inverted = [operation.invert() for operation in reversed(operations)]
        inverse = None
        if all(op is not None for op in inverted):
            inverse = tuple(op for op in inverted if op is not None)
        return cls(version, tuple(operations), inverse, name)

    @property
    def label(self) -> str:
        return f"{self.version} {self.name}".strip()


@dataclass
class MigrationStatus:
    """Applied state of a known migration unit."""

    version: str
    name: str
    applied: bool


@dataclass
class MigrationEngine:
    """Apply and roll back migration units against a store and a catalog.

    The engine keeps the in-memory catalog and the store's ledger table in
    step. Each batch runs in one store transaction against a copy of the
    catalog; the copy replaces the live catalog only once the batch commits.
    """

    store: RecordStore
    catalog: SchemaCatalog = field(default_factory=SchemaCatalog)
    _known: dict[str, MigrationUnit] = field(default_factory=dict, init=False, repr=False)

    def register(self, units: Iterable[MigrationUnit]) -> list[MigrationUnit]:
        """Remember units for later rollback and return them sorted by version.

        Raises:
            DuplicateVersion: If two different units share a version
        """
        units = list(units)
        seen: dict[str, MigrationUnit] = {}
        for unit in units:
            previous = seen.get(unit.version) or self._known.get(unit.version)
            if unit.version in seen or (previous is not None and previous != unit):
                raise DuplicateVersion(
                    f"Duplicate migration version {unit.version}", unit.version
                )
            seen[unit.version] = unit
        self._known.update(seen)
        return sorted(units, key=lambda u: version_key(u.version))

    async def load(self, units: Iterable[MigrationUnit]) -> SchemaCatalog:
        """Rebuild the catalog from the store's ledger.

        Replays the forward operations of every applied unit in memory only;
        nothing is written to the store.

        Raises:
            UnknownVersion: If the ledger names a version not in ``units``
        """
        self.register(units)
        self._sync_catalog(await self._ledger())
        logger.info(f"Loaded schema catalog at version {self.catalog.current_version}")
        return self.catalog

    async def pending(self, units: Iterable[MigrationUnit]) -> list[MigrationUnit]:
        """Get units not yet applied, in version order."""
        ordered = self.register(units)
        applied = set(await self._ledger())
        return [unit for unit in ordered if unit.version not in applied]

    async def status(self, units: Iterable[MigrationUnit]) -> list[MigrationStatus]:
        """Get the applied status of every given unit, in version order."""
        ordered = self.register(units)
        applied = set(await self._ledger())
        return [
            MigrationStatus(unit.version, unit.name, unit.version in applied)
            for unit in ordered
        ]

    @property
    def current_version(self) -> str | None:
        return self.catalog.current_version

    async def apply(self, units: Sequence[MigrationUnit]) -> int:
        """Apply pending units in ascending version order.

        Units already in the ledger are skipped, so re-running a batch is a
        no-op. The whole batch is validated before anything is written.

        Returns:
            Number of units applied

        Raises:
            DuplicateVersion: If two units share a version
            OutOfOrderApplication: If a pending unit is older than the newest
                applied version
            StoreRejected: If the catalog or the store refuses a unit; no unit
                of the batch stays applied
        """
        ordered = self.register(units)
        applied_versions = await self._ledger()
        self._sync_catalog(applied_versions)
        applied = set(applied_versions)
        last_applied = applied_versions[-1] if applied_versions else None

        pending = [unit for unit in ordered if unit.version not in applied]
        if last_applied is not None:
            for unit in pending:
                if version_key(unit.version) < version_key(last_applied):
                    logger.error(
                        f"Refusing migration {unit.label}: older than applied "
                        f"version {last_applied}"
                    )
                    raise OutOfOrderApplication(
                        f"Migration {unit.version} is older than the last applied "
                        f"version {last_applied}",
                        unit.version,
                    )

        if not pending:
            logger.debug("No pending migrations")
            return 0

        working = self.catalog.copy()
        async with self.store.transaction():
            for unit in pending:
                logger.info(f"Applying migration {unit.label}")
                await self._run_operations(unit, unit.operations, working)
                working.record_applied(unit.version)
                await self.store.append_version(unit.version)

        self.catalog.adopt(working)
        logger.info(f"Applied {len(pending)} migration(s); now at {working.current_version}")
        return len(pending)

    async def rollback(self, count: int = 1) -> list[str]:
        """Undo the newest ``count`` applied units, newest first.

        Returns:
            Versions that were rolled back

        Raises:
            UnknownVersion: If a ledger version has no known unit
            NoInverseDefined: If any unit in range has no inverse; nothing is
                undone in that case
            StoreRejected: If the store refuses an inverse operation
        """
        if count < 0:
            raise ValueError("Rollback count must not be negative")

        applied_versions = await self._ledger()
        self._sync_catalog(applied_versions)
        targets = applied_versions[::-1][:count]

        units: list[MigrationUnit] = []
        for version in targets:
            unit = self._known.get(version)
            if unit is None:
                raise UnknownVersion(f"Unknown migration version {version}", version)
            if unit.inverse is None:
                logger.error(f"Cannot roll back {unit.label}: no inverse defined")
                raise NoInverseDefined(
                    f"Migration {version} has no inverse operation", version
                )
            units.append(unit)

        if not units:
            return []

        working = self.catalog.copy()
        async with self.store.transaction():
            for unit in units:
                logger.info(f"Rolling back migration {unit.label}")
                await self._run_operations(unit, unit.inverse or (), working)
                working.record_reverted(unit.version)
                await self.store.remove_version(unit.version)

        self.catalog.adopt(working)
        return [unit.version for unit in units]

    async def _ledger(self) -> list[str]:
        await self.store.ensure_ledger()
        return sorted(await self.store.applied_versions(), key=version_key)

    def _sync_catalog(self, applied_versions: list[str]) -> None:
        """Rebuild the catalog by replaying applied units when it lags the ledger."""
        if self.catalog.ledger == applied_versions:
            return

        catalog = SchemaCatalog()
        for version in applied_versions:
            unit = self._known.get(version)
            if unit is None:
                raise UnknownVersion(
                    f"Ledger contains unknown migration version {version}", version
                )
            self._apply_to_catalog(unit, catalog)
            catalog.record_applied(version)
        self.catalog.adopt(catalog)

    def _apply_to_catalog(self, unit: MigrationUnit, catalog: SchemaCatalog) -> None:
        for operation in unit.operations:
            try:
                operation.apply_to(catalog)
            except (SchemaError, UnknownTable) as e:
                raise StoreRejected(unit.version, str(e)) from e

    async def _run_operations(
        self,
        unit: MigrationUnit,
        operations: Sequence[SchemaOperation],
        catalog: SchemaCatalog,
    ) -> None:
        for operation in operations:
            try:
                operation.apply_to(catalog)
                await operation.run(self.store)
            except StoreUnavailable:
                raise
            except (SchemaError, UnknownTable, StoreError) as e:
                logger.error(f"Migration {unit.label} failed at {operation.describe()}: {e}")
                raise StoreRejected(unit.version, str(e)) from e
