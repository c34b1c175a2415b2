# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""JOSE toolkit for Copilot-for-Consensus.

Provides JSON Web Keys, JSON Web Signatures (compact, flattened and general
JSON serializations), JWT claim sets with reference-based validation, and
the HMAC, RSA and ECDSA signature algorithms behind them.
"""

from .claim_set import ClaimSet
from .config import (
    ConfigProvider,
    EnvConfigProvider,
    JoseConfig,
    StaticConfigProvider,
    load_jose_config,
)
from .exceptions import (
    ClaimValidationError,
    DecodeError,
    FieldDecodeError,
    HeaderConsistencyError,
    InvalidKeyType,
    JoseError,
    KeyNotSet,
    KeyValidationError,
    SignatureCountError,
    UnsupportedAlgorithm,
    VerificationFailure,
)
from .factory import create_signer
from .header import JwHeader
from .jwk import Jwk, OtherPrime
from .jwk_set import JwkSet
from .jws import Jws, JwsSignature
from .signer import JwaSigner

__version__ = "0.1.0"

__all__ = [
    "ClaimSet",
    "JwHeader",
    "Jwk",
    "OtherPrime",
    "JwkSet",
    "Jws",
    "JwsSignature",
    "JwaSigner",
    "create_signer",
    "ConfigProvider",
    "EnvConfigProvider",
    "StaticConfigProvider",
    "JoseConfig",
    "load_jose_config",
    "JoseError",
    "DecodeError",
    "FieldDecodeError",
    "InvalidKeyType",
    "KeyValidationError",
    "UnsupportedAlgorithm",
    "KeyNotSet",
    "HeaderConsistencyError",
    "SignatureCountError",
    "VerificationFailure",
    "ClaimValidationError",
]
