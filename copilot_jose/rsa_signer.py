# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""RSA signatures: RSASSA-PKCS1-v1_5 (RS*) and RSASSA-PSS (PS*)."""

import logging

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .exceptions import (
    JoseError,
    KeyNotSet,
    KeyValidationError,
    UnsupportedAlgorithm,
    VerificationFailure,
)
from .jwk import KEY_TYPE_RSA, Jwk
from .signer import JwaSigner, hash_for_bits

logger = logging.getLogger("copilot_jose.rsa_signer")


class RsaSigner(JwaSigner):
    """Base class for RSA signers; subclasses choose the padding scheme.

    Attributes:
        algorithm: RS256/384/512 or PS256/384/512
        hash_algorithm: SHA-2 hash selected by the algorithm suffix
    """

    prefix = ""

    def __init__(self, algorithm: str):
        if not algorithm.startswith(self.prefix) or algorithm[2:] not in ("256", "384", "512"):
            raise UnsupportedAlgorithm(f"Unsupported {type(self).__name__} algorithm: {algorithm}")
        super().__init__(algorithm)
        self.hash_algorithm = hash_for_bits(int(algorithm[2:]))
        self._private_key: rsa.RSAPrivateKey | None = None
        self._public_key: rsa.RSAPublicKey | None = None

    def _sign_padding(self) -> padding.AsymmetricPadding:
        raise NotImplementedError

    def _verify_padding(self) -> padding.AsymmetricPadding:
        return self._sign_padding()

    def _check_kty(self, jwk: Jwk) -> None:
        if jwk.kty != KEY_TYPE_RSA:
            raise KeyValidationError(f"{self.algorithm} requires an RSA key, got kty={jwk.kty!r}")
        jwk.validate()

    def set_sign_key(self, jwk: Jwk) -> None:
        self._check_kty(jwk)
        self._private_key = jwk.export_private_key()
        logger.debug("Bound %s signing key (kid=%s)", self.algorithm, jwk.kid or "-")

    def set_verify_key(self, jwk: Jwk) -> None:
        self._check_kty(jwk)
        self._public_key = jwk.export_public_key()
        logger.debug("Bound %s verification key (kid=%s)", self.algorithm, jwk.kid or "-")

    def sign(self, message: bytes) -> bytes:
        if self._private_key is None:
            raise KeyNotSet(f"{self.algorithm} signing key is not set")
        try:
            return self._private_key.sign(message, self._sign_padding(), self.hash_algorithm)
        except JoseError:
            raise
        except ValueError as e:
            raise KeyValidationError(f"{self.algorithm} signing failed: {e}") from e

    def verify(self, message: bytes, signature: bytes) -> None:
        if self._public_key is None:
            raise KeyNotSet(f"{self.algorithm} verification key is not set")
        try:
            self._public_key.verify(signature, message, self._verify_padding(), self.hash_algorithm)
        except InvalidSignature as e:
            raise VerificationFailure(f"{self.algorithm} signature does not match") from e


class RsaPkcs1Signer(RsaSigner):
    """RSASSA-PKCS1-v1_5 with SHA-2 (RS256, RS384, RS512)."""

    prefix = "RS"

    def _sign_padding(self) -> padding.AsymmetricPadding:
        return padding.PKCS1v15()


class RsaPssSigner(RsaSigner):
    """RSASSA-PSS with SHA-2 and MGF1 using the same hash (PS256, PS384, PS512).

    Signatures use a salt as long as the digest; verification accepts any
    salt length.
    """

    prefix = "PS"

    def _sign_padding(self) -> padding.AsymmetricPadding:
        return padding.PSS(mgf=padding.MGF1(self.hash_algorithm), salt_length=padding.PSS.DIGEST_LENGTH)

    def _verify_padding(self) -> padding.AsymmetricPadding:
        return padding.PSS(mgf=padding.MGF1(self.hash_algorithm), salt_length=padding.PSS.AUTO)
