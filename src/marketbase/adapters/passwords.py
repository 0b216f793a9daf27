"""Password hashers for administrator principals."""

import base64
import hashlib
import hmac
import secrets

from marketbase.interfaces.password_hasher import PasswordHasher

ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 600_000


class Pbkdf2PasswordHasher(PasswordHasher):
    """PBKDF2-HMAC-SHA256 hasher.

    Hashes are encoded as ``pbkdf2_sha256$<iterations>$<salt>$<b64 digest>``
    so the iteration count can be raised later without invalidating old hashes.
    """

    def __init__(self, iterations: int = DEFAULT_ITERATIONS) -> None:
        if iterations < 1:
            raise ValueError("iterations must be >= 1")
        self.iterations = iterations

    def hash(self, password: str) -> str:
        salt = secrets.token_hex(16)
        digest = self._digest(password, salt, self.iterations)
        return f"{ALGORITHM}${self.iterations}${salt}${digest}"

    def verify(self, password: str, encoded: str) -> bool:
        try:
            algorithm, iterations, salt, digest = encoded.split("$", 3)
            rounds = int(iterations)
        except ValueError:
            return False
        if algorithm != ALGORITHM or rounds < 1:
            return False
        return hmac.compare_digest(self._digest(password, salt, rounds), digest)

    @staticmethod
    def _digest(password: str, salt: str, iterations: int) -> str:
        raw = hashlib.pbkdf2_hmac(
            "sha256", password.encode("utf-8"), salt.encode("ascii"), iterations
        )
        return base64.b64encode(raw).decode("ascii")
