# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""HMAC-SHA2 signatures (HS256, HS384, HS512)."""

import hashlib
import hmac
import logging

from .exceptions import KeyNotSet, KeyValidationError, UnsupportedAlgorithm, VerificationFailure
from .jwk import KEY_TYPE_OCT, Jwk
from .signer import JwaSigner

logger = logging.getLogger("copilot_jose.hmac_signer")

_DIGESTS = {
    "HS256": hashlib.sha256,
    "HS384": hashlib.sha384,
    "HS512": hashlib.sha512,
}


class HmacSigner(JwaSigner):
    """HMAC signer bound to a symmetric (``oct``) key.

    Verification recomputes the MAC and compares it in constant time.
    """

    def __init__(self, algorithm: str):
        if algorithm not in _DIGESTS:
            raise UnsupportedAlgorithm(f"Unsupported HMAC algorithm: {algorithm}")
        super().__init__(algorithm)
        self._digest = _DIGESTS[algorithm]
        self._sign_key: bytes | None = None
        self._verify_key: bytes | None = None

    def _secret(self, jwk: Jwk) -> bytes:
        if jwk.kty != KEY_TYPE_OCT:
            raise KeyValidationError(f"{self.algorithm} requires an oct key, got kty={jwk.kty!r}")
        jwk.validate()
        return jwk.k

    def set_sign_key(self, jwk: Jwk) -> None:
        self._sign_key = self._secret(jwk)
        logger.debug("Bound %s signing key (kid=%s)", self.algorithm, jwk.kid or "-")

    def set_verify_key(self, jwk: Jwk) -> None:
        self._verify_key = self._secret(jwk)
        logger.debug("Bound %s verification key (kid=%s)", self.algorithm, jwk.kid or "-")

    def _mac(self, key: bytes, message: bytes) -> bytes:
        return hmac.new(key, message, self._digest).digest()

    def sign(self, message: bytes) -> bytes:
        if self._sign_key is None:
            raise KeyNotSet(f"{self.algorithm} signing key is not set")
        return self._mac(self._sign_key, message)

    def verify(self, message: bytes, signature: bytes) -> None:
        if self._verify_key is None:
            raise KeyNotSet(f"{self.algorithm} verification key is not set")
        expected = self._mac(self._verify_key, message)
        if not hmac.compare_digest(expected, signature):
            raise VerificationFailure(f"{self.algorithm} signature does not match")
