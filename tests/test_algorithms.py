# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for the algorithm registry."""

import pytest

from copilot_jose import algorithms


class TestAlgorithmRegistry:
    """Tests for signature algorithm classification."""

    @pytest.mark.parametrize(
        "alg",
        ["HS256", "HS384", "HS512", "RS256", "RS384", "RS512",
         "PS256", "PS384", "PS512", "ES256", "ES384", "ES512", "none"],
    )
    def test_signature_algorithms_are_valid(self, alg):
        """Test that every JWS algorithm, including none, is recognized."""
        assert algorithms.is_valid_signature_alg(alg)

    @pytest.mark.parametrize("alg", ["RSA-OAEP", "A128GCM", "dir", "HS257", "hs256", "", "None"])
    def test_other_identifiers_are_not_signature_algorithms(self, alg):
        """Test that encryption and unknown identifiers are rejected."""
        assert not algorithms.is_valid_signature_alg(alg)

    @pytest.mark.parametrize(
        "alg,family",
        [
            ("RS256", "RSA"),
            ("PS512", "RSA"),
            ("RSA-OAEP-256", "RSA"),
            ("RSA1_5", "RSA"),
            ("ES384", "EC"),
            ("ECDH-ES+A128KW", "EC"),
            ("HS256", "oct"),
            ("A256KW", "oct"),
            ("A128GCMKW", "oct"),
            ("PBES2-HS256+A128KW", "oct"),
            ("dir", "oct"),
        ],
    )
    def test_key_family(self, alg, family):
        """Test the key family each algorithm requires."""
        assert algorithms.key_family_for(alg) == family

    @pytest.mark.parametrize("alg", ["none", "A128GCM", "XYZ", ""])
    def test_unknown_family(self, alg):
        """Test that unclassified identifiers map to unknown rather than raising."""
        assert algorithms.key_family_for(alg) == algorithms.KEY_FAMILY_UNKNOWN

    def test_tables_are_immutable(self):
        """Test that the registry cannot be modified at runtime."""
        with pytest.raises(TypeError):
            algorithms._KEY_FAMILIES["XYZ"] = "RSA"
        with pytest.raises(AttributeError):
            algorithms.SIGNATURE_ALGORITHMS.add("XYZ")

    def test_registry_sets_are_disjoint(self):
        """Test that no identifier is classified under two purposes."""
        assert not algorithms.SIGNATURE_ALGORITHMS & algorithms.KEY_MANAGEMENT_ALGORITHMS
        assert not algorithms.KEY_MANAGEMENT_ALGORITHMS & algorithms.CONTENT_ENCRYPTION_ALGORITHMS
