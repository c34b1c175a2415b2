# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""ECDSA signatures (ES256, ES384, ES512).

JWS carries ECDSA signatures as the fixed-width concatenation ``r || s``
(RFC 7518 section 3.4), not the DER structure ``cryptography`` produces.
"""

import logging

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)

from .exceptions import KeyNotSet, KeyValidationError, UnsupportedAlgorithm, VerificationFailure
from .jwk import KEY_TYPE_EC, Jwk
from .signer import JwaSigner, hash_for_bits

logger = logging.getLogger("copilot_jose.ec_signer")

_BITS = {"ES256": 256, "ES384": 384, "ES512": 512}
_CURVES = {"ES256": "P-256", "ES384": "P-384", "ES512": "P-521"}


def _coordinate_size(curve: ec.EllipticCurve) -> int:
    return (curve.key_size + 7) // 8


class EcdsaSigner(JwaSigner):
    """ECDSA signer producing raw ``r || s`` signatures."""

    def __init__(self, algorithm: str):
        if algorithm not in _BITS:
            raise UnsupportedAlgorithm(f"Unsupported ECDSA algorithm: {algorithm}")
        super().__init__(algorithm)
        self.hash_algorithm = hash_for_bits(_BITS[algorithm])
        self._private_key: ec.EllipticCurvePrivateKey | None = None
        self._public_key: ec.EllipticCurvePublicKey | None = None

    def _check_kty(self, jwk: Jwk) -> None:
        if jwk.kty != KEY_TYPE_EC:
            raise KeyValidationError(f"{self.algorithm} requires an EC key, got kty={jwk.kty!r}")
        if jwk.crv != _CURVES[self.algorithm]:
            raise KeyValidationError(
                f"{self.algorithm} requires curve {_CURVES[self.algorithm]}, got crv={jwk.crv!r}"
            )
        jwk.validate()

    def set_sign_key(self, jwk: Jwk) -> None:
        self._check_kty(jwk)
        self._private_key = jwk.export_private_key()
        logger.debug("Bound %s signing key (kid=%s, crv=%s)", self.algorithm, jwk.kid or "-", jwk.crv)

    def set_verify_key(self, jwk: Jwk) -> None:
        self._check_kty(jwk)
        self._public_key = jwk.export_public_key()
        logger.debug("Bound %s verification key (kid=%s, crv=%s)", self.algorithm, jwk.kid or "-", jwk.crv)

    def sign(self, message: bytes) -> bytes:
        if self._private_key is None:
            raise KeyNotSet(f"{self.algorithm} signing key is not set")

        der = self._private_key.sign(message, ec.ECDSA(self.hash_algorithm))
        r, s = decode_dss_signature(der)
        size = _coordinate_size(self._private_key.curve)
        return r.to_bytes(size, byteorder="big") + s.to_bytes(size, byteorder="big")

    def verify(self, message: bytes, signature: bytes) -> None:
        if self._public_key is None:
            raise KeyNotSet(f"{self.algorithm} verification key is not set")

        size = _coordinate_size(self._public_key.curve)
        if len(signature) != 2 * size:
            raise VerificationFailure(
                f"{self.algorithm} signature must be {2 * size} bytes, got {len(signature)}"
            )

        r = int.from_bytes(signature[:size], byteorder="big")
        s = int.from_bytes(signature[size:], byteorder="big")
        try:
            self._public_key.verify(encode_dss_signature(r, s), message, ec.ECDSA(self.hash_algorithm))
        except InvalidSignature as e:
            raise VerificationFailure(f"{self.algorithm} signature does not match") from e
