"""
Message signing capability for gate credentials.

Call sites depend on the ``Signer`` protocol only, so the key source can
change (rotation, KMS-backed signing) without touching token code.
"""
from functools import lru_cache
import hashlib
import hmac
from typing import Iterable, Protocol, Sequence


class Signer(Protocol):
    """Produces and checks detached signatures over raw bytes"""

    def sign(self, message: bytes) -> bytes:
        ...

    def verify(self, message: bytes, signature: bytes) -> bool:
        ...


class HMACSigner:
    """
    HMAC-SHA256 signer.

    Signs with the current secret; verifies against the current secret and
    any ``previous_secrets`` still inside their rotation window. Every
    comparison is constant-time.
    """

    digest = hashlib.sha256

    def __init__(self, secret: str, previous_secrets: Iterable[str] = ()):
        if not secret:
            raise ValueError("HMACSigner requires a non-empty secret")
        self._keys: Sequence[bytes] = [secret.encode("utf-8")] + [
            s.encode("utf-8") for s in previous_secrets if s
        ]

    def sign(self, message: bytes) -> bytes:
        return hmac.new(self._keys[0], message, self.digest).digest()

    def verify(self, message: bytes, signature: bytes) -> bool:
        matched = False
        # Check every key so timing does not reveal which one matched
        for key in self._keys:
            expected = hmac.new(key, message, self.digest).digest()
            if hmac.compare_digest(expected, signature):
                matched = True
        return matched


@lru_cache()
def get_signer() -> Signer:
    """Signer for QR credentials, built from settings"""
    from app.core.config import settings

    return HMACSigner(settings.QR_SECRET, settings.QR_PREVIOUS_SECRETS)
