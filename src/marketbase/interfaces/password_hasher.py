"""Interface for password hashers."""

import abc


class PasswordHasher(abc.ABC):
    """Contract for turning clear-text passwords into storable hashes."""

    @abc.abstractmethod
    def hash(self, password: str) -> str:
        """Return a salted, self-describing hash of `password`."""

    @abc.abstractmethod
    def verify(self, password: str, encoded: str) -> bool:
        """Return True if `password` matches the stored hash `encoded`."""
