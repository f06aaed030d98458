"""Resolve belongs_to / has_many associations between records."""

from collections.abc import Sequence
from typing import Any

from tablewright.constants import PRIMARY_KEY
from tablewright.database.interfaces.store import RecordStore
from tablewright.database.schema import SchemaCatalog
from tablewright.exceptions import DanglingReference, InvalidAssociation, SchemaError
from tablewright.log import get_logger
from tablewright.models.associations import AssociationDescriptor
from tablewright.models.record import Record
from tablewright.models.record_type import ModelRegistry, RecordType
from tablewright.services.record_mapper import RecordMapper
from tablewright.types import AssociationKind, ResolveMode

logger = get_logger(__name__)

AssociationValue = Record | None | list[Record]


class AssociationResolver:
    """Load related records on demand (lazy) or for a whole batch (eager).

    Resolved values are stored in the owner's own cache slot. A lazy lookup
    reuses that slot until the caller resets it or fetches the owner again.
    """

    def __init__(
        self, store: RecordStore, mapper: RecordMapper, registry: ModelRegistry
    ) -> None:
        self.store = store
        self.mapper = mapper
        self.registry = registry

    def descriptor_for(
        self, owner_type: RecordType, association: str | AssociationDescriptor
    ) -> AssociationDescriptor:
        if isinstance(association, AssociationDescriptor):
            return association
        return owner_type.association(association)

    def target_type(self, descriptor: AssociationDescriptor) -> RecordType:
        try:
            return self.registry.get(descriptor.target)
        except SchemaError as e:
            raise InvalidAssociation(
                f"Association {descriptor.name!r} targets unregistered type "
                f"{descriptor.target}"
            ) from e

    async def resolve(
        self,
        owner: Record,
        association: str | AssociationDescriptor,
        mode: ResolveMode = ResolveMode.LAZY,
    ) -> AssociationValue:
        """Resolve one association of a record.

        Returns:
            The related record (or None) for belongs_to; a list for has_many

        Raises:
            DanglingReference: If a belongs_to key points at a missing row
        """
        descriptor = self.descriptor_for(owner.record_type, association)

        if mode == ResolveMode.EAGER:
            await self.preload([owner], descriptor)

        hit, value = owner.cached_association(descriptor.name)
        if hit:
            return value

        value = await self._load(owner, descriptor)
        if self._cacheable(owner, descriptor):
            owner.cache_association(descriptor.name, value)
        return value

    async def preload(
        self, owners: Sequence[Record], association: str | AssociationDescriptor
    ) -> None:
        """Resolve an association for every owner with one store lookup.

        All owners must share a record type. Cache slots are filled only once
        every owner has resolved, so a dangling reference leaves all of them
        untouched.
        """
        if not owners:
            return
        owner_type = owners[0].record_type
        if any(owner.record_type is not owner_type for owner in owners):
            raise InvalidAssociation("Cannot preload across different record types")

        descriptor = self.descriptor_for(owner_type, association)
        if descriptor.kind == AssociationKind.BELONGS_TO:
            resolved = await self._preload_belongs_to(owners, descriptor)
        else:
            resolved = await self._preload_has_many(owners, descriptor)

        for owner, value in zip(owners, resolved):
            if self._cacheable(owner, descriptor):
                owner.cache_association(descriptor.name, value)

    @staticmethod
    def _cacheable(owner: Record, descriptor: AssociationDescriptor) -> bool:
        # has_many results of unsaved owners are never cached
        return descriptor.kind == AssociationKind.BELONGS_TO or owner.id is not None

    async def _load(self, owner: Record, descriptor: AssociationDescriptor) -> AssociationValue:
        target_type = self.target_type(descriptor)

        if descriptor.kind == AssociationKind.BELONGS_TO:
            key = owner.get(descriptor.foreign_key)
            if key is None:
                return None
            rows = await self.store.select_rows(
                target_type.table_name, {PRIMARY_KEY: key}, limit=1
            )
            if not rows:
                logger.warning(
                    f"{owner.record_type.name} id={owner.id} has dangling "
                    f"{descriptor.foreign_key}={key}"
                )
                raise DanglingReference(descriptor.name, target_type.table_name, key)
            return self.mapper.from_row(rows[0], target_type)

        if owner.id is None:
            return []
        rows = await self.store.select_rows(
            target_type.table_name,
            {descriptor.foreign_key: owner.id},
            order_by=target_type.default_order,
        )
        return [self.mapper.from_row(row, target_type) for row in rows]

    async def _preload_belongs_to(
        self, owners: Sequence[Record], descriptor: AssociationDescriptor
    ) -> list[AssociationValue]:
        target_type = self.target_type(descriptor)
        keys = sorted({k for o in owners if (k := o.get(descriptor.foreign_key)) is not None})

        rows_by_id: dict[Any, dict[str, Any]] = {}
        if keys:
            rows = await self.store.select_rows(target_type.table_name, {PRIMARY_KEY: keys})
            rows_by_id = {row[PRIMARY_KEY]: row for row in rows}

        resolved: list[AssociationValue] = []
        for owner in owners:
            key = owner.get(descriptor.foreign_key)
            if key is None:
                resolved.append(None)
                continue
            row = rows_by_id.get(key)
            if row is None:
                raise DanglingReference(descriptor.name, target_type.table_name, key)
            # Each owner gets its own instance so caches are never shared
            resolved.append(self.mapper.from_row(row, target_type))
        return resolved

    async def _preload_has_many(
        self, owners: Sequence[Record], descriptor: AssociationDescriptor
    ) -> list[AssociationValue]:
        target_type = self.target_type(descriptor)
        owner_ids = sorted({owner.id for owner in owners if owner.id is not None})

        grouped: dict[Any, list[dict[str, Any]]] = {owner_id: [] for owner_id in owner_ids}
        if owner_ids:
            rows = await self.store.select_rows(
                target_type.table_name,
                {descriptor.foreign_key: owner_ids},
                order_by=target_type.default_order,
            )
            for row in rows:
                grouped.setdefault(row[descriptor.foreign_key], []).append(row)

        return [
            [self.mapper.from_row(row, target_type) for row in grouped.get(owner.id, [])]
            if owner.id is not None
            else []
            for owner in owners
        ]

    def check(self, registry: ModelRegistry, catalog: SchemaCatalog) -> None:
        """Verify every declared association against the registry and catalog.

        Raises:
            InvalidAssociation: On the first inconsistent declaration
        """
        for owner_type in registry:
            owner_schema = catalog.get(owner_type.table_name)
            if owner_schema is None:
                raise InvalidAssociation(
                    f"{owner_type.name} maps to missing table {owner_type.table_name}"
                )
            for descriptor in owner_type.associations:
                target_type = self.target_type(descriptor)
                label = f"{owner_type.name}.{descriptor.name}"
                if descriptor.target_table != target_type.table_name:
                    raise InvalidAssociation(
                        f"{label} names table {descriptor.target_table}, but "
                        f"{target_type.name} maps to {target_type.table_name}"
                    )
                target_schema = catalog.get(target_type.table_name)
                if target_schema is None:
                    raise InvalidAssociation(
                        f"{label} targets missing table {target_type.table_name}"
                    )

                if descriptor.kind == AssociationKind.BELONGS_TO:
                    if not owner_schema.has_column(descriptor.foreign_key):
                        raise InvalidAssociation(
                            f"{label}: column {descriptor.foreign_key} missing from "
                            f"{owner_schema.name}"
                        )
                    self._check_inverse(owner_type, target_type, descriptor)
                elif not target_schema.has_column(descriptor.foreign_key):
                    raise InvalidAssociation(
                        f"{label}: column {descriptor.foreign_key} missing from "
                        f"{target_schema.name}"
                    )

    def _check_inverse(
        self,
        owner_type: RecordType,
        target_type: RecordType,
        descriptor: AssociationDescriptor,
    ) -> None:
        """A belongs_to needs a has_many on the target, declared or inferable.

        When the target declares has_many associations back to the owner, one
        of them must use the same foreign key. Otherwise the inverse is
        inferred from the key itself.
        """
        inverses = [
            d
            for d in target_type.associations
            if d.kind == AssociationKind.HAS_MANY and d.target == owner_type.name
        ]
        if inverses and all(d.foreign_key != descriptor.foreign_key for d in inverses):
            raise InvalidAssociation(
                f"{owner_type.name}.{descriptor.name} uses {descriptor.foreign_key}, "
                f"but {target_type.name} declares has_many "
                f"{', '.join(d.name for d in inverses)} with a different key"
            )
