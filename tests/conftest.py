# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Shared fixtures for copilot_jose tests."""

import pytest
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from copilot_jose import Jwk

from rfc7515_vectors import RFC_ES256_KEY, RFC_HS256_KEY, RFC_RS256_KEY


@pytest.fixture(scope="session")
def rsa_private_key():
    """Generate an RSA private key shared by the test session."""
    return rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048,
        backend=default_backend()
    )


@pytest.fixture(scope="session")
def ec_private_keys():
    """Generate one EC private key per supported signing curve."""
    return {
        "P-256": ec.generate_private_key(ec.SECP256R1(), default_backend()),
        "P-384": ec.generate_private_key(ec.SECP384R1(), default_backend()),
        "P-521": ec.generate_private_key(ec.SECP521R1(), default_backend()),
    }


@pytest.fixture
def rsa_jwk(rsa_private_key):
    """RSA private key as a Jwk."""
    return Jwk.from_key(rsa_private_key, kid="rsa-1")


@pytest.fixture
def oct_jwk():
    """Symmetric key as a Jwk."""
    return Jwk.from_key(b"0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef", kid="oct-1")


@pytest.fixture
def rfc_hs256_jwk():
    return Jwk.from_json(RFC_HS256_KEY)


@pytest.fixture
def rfc_rs256_jwk():
    return Jwk.from_json(RFC_RS256_KEY)


@pytest.fixture
def rfc_es256_jwk():
    return Jwk.from_json(RFC_ES256_KEY)
