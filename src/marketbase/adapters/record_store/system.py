"""System collections seeded by every record store adapter.

Their identifiers are fixed so that relation fields pointing at `users` stay
valid across stores and restarts.
"""

from marketbase.domain.schema import (
    SUPERUSERS,
    SUPERUSERS_COLLECTION_ID,
    USERS,
    USERS_COLLECTION_ID,
    FieldKind,
)
from marketbase.interfaces.record_store import Collection, Field


def system_collections() -> tuple[Collection, ...]:
    """Return fresh definitions of `users` and `_superusers`."""
    return (
        Collection(
            id=USERS_COLLECTION_ID,
            name=USERS,
            fields=(
                Field("email", FieldKind.TEXT, required=True),
                Field("name", FieldKind.TEXT),
            ),
            system=True,
        ),
        Collection(
            id=SUPERUSERS_COLLECTION_ID,
            name=SUPERUSERS,
            fields=(
                Field("email", FieldKind.TEXT, required=True),
                Field("password", FieldKind.TEXT, required=True),
            ),
            system=True,
        ),
    )
