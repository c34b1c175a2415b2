# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Abstract base class for JWA signature algorithms."""

from abc import ABC, abstractmethod

from cryptography.hazmat.primitives import hashes

from .jwk import Jwk


def hash_for_bits(bits: int) -> hashes.HashAlgorithm:
    """Return the SHA-2 hash for a 256/384/512 algorithm suffix."""
    if bits == 256:
        return hashes.SHA256()
    if bits == 384:
        return hashes.SHA384()
    if bits == 512:
        return hashes.SHA512()
    raise ValueError(f"Unsupported hash size: {bits}")


class JwaSigner(ABC):
    """Abstract base class for a JWS signature algorithm.

    A signer holds two key slots: the signing key (private or secret) and
    the verification key (public or secret). Each slot is bound from a
    ``Jwk``, which is validated before use.

    Attributes:
        algorithm: JWS algorithm identifier (e.g., "RS256", "ES256", "HS256")
    """

    def __init__(self, algorithm: str):
        """Initialize the signer.

        Args:
            algorithm: JWS algorithm identifier
        """
        self.algorithm = algorithm

    @abstractmethod
    def sign(self, message: bytes) -> bytes:
        """Sign a message and return the signature.

        Args:
            message: JWS signing input

        Returns:
            Signature bytes

        Raises:
            KeyNotSet: If no signing key is bound
            JoseError: If signing fails
        """
        pass

    @abstractmethod
    def verify(self, message: bytes, signature: bytes) -> None:
        """Verify a signature over a message.

        Args:
            message: JWS signing input
            signature: Signature bytes to check

        Raises:
            KeyNotSet: If no verification key is bound
            VerificationFailure: If the signature does not match
        """
        pass

    @abstractmethod
    def set_sign_key(self, jwk: Jwk) -> None:
        """Bind the signing key.

        Raises:
            KeyValidationError: If the key is invalid or of the wrong type
        """
        pass

    @abstractmethod
    def set_verify_key(self, jwk: Jwk) -> None:
        """Bind the verification key.

        Raises:
            KeyValidationError: If the key is invalid or of the wrong type
        """
        pass


class NoneSigner(JwaSigner):
    """Signer for ``alg=none``: signatures are empty and always verify."""

    def __init__(self, algorithm: str = "none"):
        super().__init__(algorithm)

    def sign(self, message: bytes) -> bytes:
        return b""

    def verify(self, message: bytes, signature: bytes) -> None:
        return None

    def set_sign_key(self, jwk: Jwk) -> None:
        return None

    def set_verify_key(self, jwk: Jwk) -> None:
        return None
