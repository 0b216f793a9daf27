"""ID generators for record stores."""

import threading

from ulid import monotonic

from marketbase.interfaces.id_generator import IdGenerator

# pylint: disable=too-few-public-methods


class ULIDGenerator(IdGenerator):
    """Thread-safe monotonic ULID generator.

    ULIDs are unique, lexicographically sortable identifiers made of a
    timestamp and a random component, so records sort by creation time.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def new_id(self) -> str:
        """Generate a new ULID (serialized across threads)."""
        with self._lock:
            return str(monotonic.new())


class SimpleIdGenerator(IdGenerator):
    """Sequential, zero-padded IDs with an optional prefix.

    Note:
        Not suitable for production use; primarily for tests, where readable
        and predictable identifiers make assertions easier.
    """

    def __init__(self, length: int = 15, prefix: str = "") -> None:
        self._counter = 0
        self._length = length
        self._prefix = prefix
        self._lock = threading.Lock()

    def new_id(self) -> str:
        """Generate the next identifier."""
        with self._lock:
            self._counter += 1
            return f"{self._prefix}{self._counter:0{self._length - len(self._prefix)}d}"
