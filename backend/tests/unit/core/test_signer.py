"""
Unit Tests for the HMAC signer
"""
import hashlib
import hmac
import pytest

from app.core.signer import HMACSigner, get_signer
from app.core.config import settings


class TestHMACSigner:
    """Signing and verification with the current and rotated-out secrets"""

    def test_sign_matches_hmac_sha256(self):
        signer = HMACSigner("s3cret")
        message = b"OF-2026-A7F3:1767225600000"

        expected = hmac.new(b"s3cret", message, hashlib.sha256).digest()

        assert signer.sign(message) == expected

    def test_verify_own_signature(self):
        signer = HMACSigner("s3cret")
        signature = signer.sign(b"hello")

        assert signer.verify(b"hello", signature) is True

    def test_verify_rejects_other_message(self):
        signer = HMACSigner("s3cret")
        signature = signer.sign(b"hello")

        assert signer.verify(b"hellO", signature) is False

    def test_verify_rejects_truncated_signature(self):
        signer = HMACSigner("s3cret")
        signature = signer.sign(b"hello")

        assert signer.verify(b"hello", signature[:-1]) is False

    def test_previous_secret_still_verifies(self):
        """Tokens signed before a rotation stay valid"""
        old = HMACSigner("old-secret")
        rotated = HMACSigner("new-secret", previous_secrets=["old-secret"])

        signature = old.sign(b"payload")

        assert rotated.verify(b"payload", signature) is True

    def test_rotated_signer_signs_with_current_secret(self):
        rotated = HMACSigner("new-secret", previous_secrets=["old-secret"])

        assert rotated.sign(b"payload") == HMACSigner("new-secret").sign(b"payload")

    def test_unknown_secret_rejected(self):
        signature = HMACSigner("attacker").sign(b"payload")

        assert HMACSigner("s3cret", previous_secrets=["older"]).verify(b"payload", signature) is False

    def test_empty_secret_not_allowed(self):
        with pytest.raises(ValueError):
            HMACSigner("")

    def test_blank_previous_secrets_ignored(self):
        signer = HMACSigner("s3cret", previous_secrets=["", "older"])

        assert signer.verify(b"x", HMACSigner("older").sign(b"x")) is True

    def test_get_signer_uses_settings(self):
        signer = get_signer()

        assert signer.sign(b"abc") == HMACSigner(settings.QR_SECRET).sign(b"abc")
