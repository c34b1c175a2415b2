# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Factory for creating JWA signer instances."""

import logging
from types import MappingProxyType

from . import algorithms
from .ec_signer import EcdsaSigner
from .exceptions import UnsupportedAlgorithm
from .hmac_signer import HmacSigner
from .rsa_signer import RsaPkcs1Signer, RsaPssSigner
from .signer import JwaSigner, NoneSigner

logger = logging.getLogger("copilot_jose.factory")

_SIGNERS = MappingProxyType({
    algorithms.HS256: HmacSigner,
    algorithms.HS384: HmacSigner,
    algorithms.HS512: HmacSigner,
    algorithms.RS256: RsaPkcs1Signer,
    algorithms.RS384: RsaPkcs1Signer,
    algorithms.RS512: RsaPkcs1Signer,
    algorithms.PS256: RsaPssSigner,
    algorithms.PS384: RsaPssSigner,
    algorithms.PS512: RsaPssSigner,
    algorithms.ES256: EcdsaSigner,
    algorithms.ES384: EcdsaSigner,
    algorithms.ES512: EcdsaSigner,
    algorithms.NONE: NoneSigner,
})


def create_signer(algorithm: str) -> JwaSigner:
    """Create a signer for a JWS algorithm.

    Args:
        algorithm: JWS algorithm identifier (HS*, RS*, PS*, ES* or "none")

    Returns:
        JwaSigner instance with no keys bound

    Raises:
        UnsupportedAlgorithm: If the algorithm is not a JWS signature algorithm

    Examples:
        >>> signer = create_signer("HS256")
        >>> signer.set_sign_key(Jwk.from_key(b"secret"))
        >>> signature = signer.sign(b"header.payload")
    """
    signer_cls = _SIGNERS.get(algorithm) if isinstance(algorithm, str) else None
    if signer_cls is None:
        raise UnsupportedAlgorithm(
            f"Unsupported signature algorithm: {algorithm!r}. "
            f"Supported: {', '.join(sorted(_SIGNERS))}"
        )

    logger.debug("Creating signer: algorithm=%s, type=%s", algorithm, signer_cls.__name__)
    return signer_cls(algorithm)
