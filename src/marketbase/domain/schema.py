"""Expected schema of the marketplace collections.

The schema is a small graph: each managed collection declares typed fields,
and relation fields point at other collections *by name*. Stored collection
definitions point at their targets *by identifier*, and identifiers change
whenever a collection is recreated, which is why the reconciler compares the
two.

Graph::

    users ──< shops ──< products ──< sales
      │         └───────────────────< │
      └──< affiliates ───────────────<┘

`users` and `_superusers` are system collections owned by the record store;
they may be relation targets but are never created or deleted here.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from .errors import DependencyCycleError, UnknownCollectionError

# --- System collections (owned by the record store) ---

USERS = "users"
USERS_COLLECTION_ID = "_pb_users_auth_"
SUPERUSERS = "_superusers"
SUPERUSERS_COLLECTION_ID = "_pb_superusers_"

SYSTEM_COLLECTIONS: Mapping[str, str] = {
    USERS: USERS_COLLECTION_ID,
    SUPERUSERS: SUPERUSERS_COLLECTION_ID,
}

# --- Managed collections ---

SHOPS = "shops"
PRODUCTS = "products"
AFFILIATES = "affiliates"
SALES = "sales"

MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5 MB
IMAGE_MIME_TYPES = (
    "image/jpeg",
    "image/png",
    "image/svg+xml",
    "image/gif",
    "image/webp",
)

AUTHENTICATED = '@request.auth.id != ""'


class FieldKind(str, Enum):
    """Field types understood by the record store."""

    TEXT = "text"
    NUMBER = "number"
    JSON = "json"
    FILE = "file"
    RELATION = "relation"


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Expected definition of a single collection field.

    Attributes:
        name: Field name, unique within its collection.
        kind: Field type.
        required: Whether a value must be present on create.
        target: For relations, the *name* of the referenced collection.
        max_select: For relations and files, the maximum cardinality.
        cascade_delete: For relations, delete the referencing record when the
            target record is deleted (enforced by the record store).
        max_size: For files, the maximum size in bytes.
        mime_types: For files, the accepted MIME types.
    """

    name: str
    kind: FieldKind
    required: bool = False
    target: str | None = None
    max_select: int | None = None
    cascade_delete: bool = False
    max_size: int | None = None
    mime_types: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.kind is FieldKind.RELATION and not self.target:
            raise ValueError(f"Relation field '{self.name}' needs a target collection")
        if self.kind is not FieldKind.RELATION and self.target is not None:
            raise ValueError(f"Only relation fields may have a target ('{self.name}')")

    @property
    def is_relation(self) -> bool:
        """True for relation fields."""
        return self.kind is FieldKind.RELATION


@dataclass(frozen=True, slots=True)
class AccessRules:
    """Record-level access rules, as opaque filter expressions.

    ``None`` restricts the action to administrators; an empty string makes it
    public.
    """

    list_rule: str | None = None
    view_rule: str | None = None
    create_rule: str | None = None
    update_rule: str | None = None
    delete_rule: str | None = None


@dataclass(frozen=True, slots=True)
class CollectionSpec:
    """Expected definition of a managed collection."""

    name: str
    fields: tuple[FieldSpec, ...]
    rules: AccessRules = field(default_factory=AccessRules)

    def __post_init__(self) -> None:
        names = [f.name for f in self.fields]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate field names in collection '{self.name}'")

    def get_field(self, name: str) -> FieldSpec | None:
        """Return the field called `name`, if declared."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def relation_fields(self) -> tuple[FieldSpec, ...]:
        """Relation fields in declaration order."""
        return tuple(f for f in self.fields if f.is_relation)

    @property
    def targets(self) -> frozenset[str]:
        """Names of the collections this collection points at."""
        return frozenset(f.target for f in self.relation_fields if f.target)


class SchemaGraph:
    """A set of managed collection specs plus their dependency structure.

    Relation targets that are not managed (e.g. ``users``) are treated as
    external: they must exist in the store but are never created or deleted.
    """

    def __init__(self, specs: Iterable[CollectionSpec]) -> None:
        self._specs: dict[str, CollectionSpec] = {}
        for spec in specs:
            if spec.name in self._specs:
                raise ValueError(f"Collection '{spec.name}' declared twice")
            self._specs[spec.name] = spec
        self._order = self._topological_order()

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __getitem__(self, name: str) -> CollectionSpec:
        try:
            return self._specs[name]
        except KeyError as e:
            raise UnknownCollectionError(name) from e

    @property
    def order(self) -> tuple[str, ...]:
        """Managed collection names, every target before its dependents."""
        return self._order

    def direct_dependents(self, name: str) -> tuple[str, ...]:
        """Managed collections with a relation field targeting `name`."""
        return tuple(n for n in self._order if name in self._specs[n].targets)

    def dependents(self, name: str) -> tuple[str, ...]:
        """All managed collections that depend on `name`, transitively.

        Returned deepest first, i.e. in the order they must be deleted.
        """
        found: set[str] = set()
        pending = [name]
        while pending:
            for dependent in self.direct_dependents(pending.pop()):
                if dependent not in found:
                    found.add(dependent)
                    pending.append(dependent)
        return self.deletion_order(found)

    def deletion_order(self, names: Iterable[str]) -> tuple[str, ...]:
        """Sort managed collection names so dependents come before targets."""
        wanted = set(names)
        return tuple(n for n in reversed(self._order) if n in wanted)

    def external_targets(self) -> frozenset[str]:
        """Relation targets that the graph does not manage."""
        return frozenset(
            t for spec in self._specs.values() for t in spec.targets
        ) - frozenset(self._specs)

    def _topological_order(self) -> tuple[str, ...]:
        """Stable topological sort: declaration order wherever possible."""
        remaining = dict(self._specs)
        ordered: list[str] = []
        while remaining:
            ready = [
                name
                for name, spec in remaining.items()
                if not (spec.targets & remaining.keys()) - {name}
            ]
            if not ready:
                raise DependencyCycleError(list(remaining))
            ordered.append(ready[0])
            del remaining[ready[0]]
        return tuple(ordered)


# ============================================================================
#                       The marketplace collections
# ============================================================================

SHOP_SPEC = CollectionSpec(
    name=SHOPS,
    fields=(
        FieldSpec("name", FieldKind.TEXT, required=True),
        FieldSpec("commission_rate", FieldKind.NUMBER),
        FieldSpec("owner", FieldKind.RELATION, target=USERS, max_select=1),
    ),
    rules=AccessRules(
        list_rule="",
        view_rule="",
        create_rule=AUTHENTICATED,
        update_rule="owner = @request.auth.id",
        delete_rule="owner = @request.auth.id",
    ),
)

PRODUCT_SPEC = CollectionSpec(
    name=PRODUCTS,
    fields=(
        FieldSpec("name", FieldKind.TEXT, required=True),
        FieldSpec("price", FieldKind.NUMBER),
        FieldSpec("group_prices", FieldKind.JSON),
        FieldSpec(
            "image",
            FieldKind.FILE,
            max_select=1,
            max_size=MAX_IMAGE_SIZE,
            mime_types=IMAGE_MIME_TYPES,
        ),
        FieldSpec(
            "shop",
            FieldKind.RELATION,
            target=SHOPS,
            max_select=1,
            cascade_delete=True,
        ),
    ),
    rules=AccessRules(
        list_rule="",
        view_rule="",
        create_rule="shop.owner = @request.auth.id",
        update_rule="shop.owner = @request.auth.id",
        delete_rule="shop.owner = @request.auth.id",
    ),
)

AFFILIATE_SPEC = CollectionSpec(
    name=AFFILIATES,
    fields=(
        FieldSpec("code", FieldKind.TEXT, required=True),
        FieldSpec("commission_rate", FieldKind.NUMBER),
        FieldSpec("user", FieldKind.RELATION, target=USERS, max_select=1),
    ),
    rules=AccessRules(
        list_rule="user = @request.auth.id",
        view_rule="user = @request.auth.id",
        create_rule=AUTHENTICATED,
    ),
)

SALE_SPEC = CollectionSpec(
    name=SALES,
    fields=(
        FieldSpec("amount", FieldKind.NUMBER),
        FieldSpec("platform_fee", FieldKind.NUMBER),
        FieldSpec("affiliate_commission", FieldKind.NUMBER),
        FieldSpec("shop", FieldKind.RELATION, target=SHOPS, max_select=1),
        FieldSpec("product", FieldKind.RELATION, target=PRODUCTS, max_select=1),
        FieldSpec("affiliate", FieldKind.RELATION, target=AFFILIATES, max_select=1),
    ),
    rules=AccessRules(
        list_rule="shop.owner = @request.auth.id || affiliate.user = @request.auth.id",
        view_rule="shop.owner = @request.auth.id || affiliate.user = @request.auth.id",
        create_rule=AUTHENTICATED,
    ),
)

#: Derived sale fields; never accepted from clients.
DERIVED_SALE_FIELDS = ("platform_fee", "affiliate_commission")

MARKETPLACE = SchemaGraph([SHOP_SPEC, PRODUCT_SPEC, AFFILIATE_SPEC, SALE_SPEC])
