"""Association descriptors between record types."""

from dataclasses import dataclass, replace

from tablewright.types import AssociationKind
from tablewright.utils import camelize, foreign_key, singularize, tableize


@dataclass(frozen=True)
class AssociationDescriptor:
    """A declared relationship from an owner record type to a target type.

    For ``belongs_to`` the foreign key lives on the owner's table; for
    ``has_many`` it lives on the target's table and points back at the owner.
    """

    name: str
    kind: AssociationKind
    target: str
    foreign_key: str = ""
    target_table: str = ""

    def __post_init__(self) -> None:
        if not self.target_table:
            object.__setattr__(self, "target_table", tableize(self.target))

    @property
    def is_collection(self) -> bool:
        return self.kind == AssociationKind.HAS_MANY

    def bind(self, owner: str) -> "AssociationDescriptor":
        """Fill in a foreign key inferred from the owner type name."""
        if self.foreign_key:
            return self
        return replace(self, foreign_key=foreign_key(owner))


def belongs_to(
    name: str, target: str | None = None, foreign_key_column: str | None = None
) -> AssociationDescriptor:
    """Declare a many-to-one association.

    Example:
        >>> belongs_to("article")
        AssociationDescriptor(name="article", kind=BELONGS_TO, target="Article",
                              foreign_key="article_id", target_table="articles")
    """
    return AssociationDescriptor(
        name=name,
        kind=AssociationKind.BELONGS_TO,
        target=target or camelize(name),
        foreign_key=foreign_key_column or foreign_key(name),
    )


def has_many(
    name: str, target: str | None = None, foreign_key_column: str | None = None
) -> AssociationDescriptor:
    """Declare a one-to-many association.

    The foreign key defaults to ``<owner>_id`` and is filled in when the
    descriptor is attached to its owner record type.
    """
    return AssociationDescriptor(
        name=name,
        kind=AssociationKind.HAS_MANY,
        target=target or camelize(singularize(name)),
        foreign_key=foreign_key_column or "",
    )
