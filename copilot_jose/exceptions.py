# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Exceptions for JOSE encoding, key handling, signing and verification."""


class JoseError(Exception):
    """Base exception for all JOSE errors."""
    pass


class DecodeError(JoseError):
    """Raised when base64url, JSON or compact input is malformed."""
    pass


class FieldDecodeError(DecodeError):
    """Raised when the value of a named JSON member cannot be decoded.

    Attributes:
        field: JSON member name whose value was malformed
        reason: Description of the decoding failure
    """

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid value for '{field}': {reason}")


class InvalidKeyType(JoseError):
    """Raised for an unsupported key type (kty) or native key object."""
    pass


class KeyValidationError(JoseError):
    """Raised when key parameters are missing or inconsistent for the key type."""
    pass


class UnsupportedAlgorithm(JoseError):
    """Raised for an unrecognized or disallowed algorithm identifier."""
    pass


class KeyNotSet(JoseError):
    """Raised when a signer is used before its signing or verification key is bound."""
    pass


class HeaderConsistencyError(JoseError):
    """Raised when protected and unprotected headers conflict (alg, kid, crit)."""
    pass


class SignatureCountError(JoseError):
    """Raised when a JWS has the wrong number of signatures for an operation."""
    pass


class VerificationFailure(JoseError):
    """Raised when a signature does not verify."""
    pass


class ClaimValidationError(JoseError):
    """Raised when one or more JWT claim checks fail.

    Every failing check is collected so callers see all rejection reasons.

    Attributes:
        failures: Individual failure messages, one per failing check
    """

    def __init__(self, failures: list[str]):
        self.failures = list(failures)
        super().__init__("\n".join(self.failures))
