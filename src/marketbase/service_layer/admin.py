"""Administrator bootstrap."""

from __future__ import annotations

import logging

from marketbase.domain.schema import SUPERUSERS
from marketbase.interfaces.password_hasher import PasswordHasher
from marketbase.interfaces.record_store import RecordStore

logger = logging.getLogger(__name__)


def ensure_admin(
    store: RecordStore, email: str, password: str, hasher: PasswordHasher
) -> bool:
    """Create the first administrator if none exists.

    An existing administrator is never modified, even if its email differs
    from `email`.

    Args:
        store: Record store holding the ``_superusers`` collection.
        email: Login of the administrator to create.
        password: Clear-text password; only its hash is stored.
        hasher: Hashes `password` before it is persisted.

    Returns:
        True if an administrator was created, False if one already existed.
    """
    if existing := store.count_records(SUPERUSERS):
        logger.debug("%d administrator(s) present; bootstrap skipped", existing)
        return False

    record = store.create_record(
        SUPERUSERS, {"email": email, "password": hasher.hash(password)}
    )
    logger.info("Administrator %s created (%s)", email, record.id)
    return True
