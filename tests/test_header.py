# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for JwHeader."""

import base64

import pytest

from copilot_jose import Jwk, JwHeader
from copilot_jose.exceptions import FieldDecodeError


class TestJwHeader:
    """Tests for JwHeader encoding."""

    def test_minimal_header(self):
        """Test the RFC 7515 A.3 protected header."""
        assert JwHeader(alg="ES256").to_json() == '{"alg":"ES256"}'

    def test_all_registered_members_round_trip(self):
        """Test that every registered header parameter survives decode and encode."""
        cert = b"\x30\x82\x01\x0a-not-really-der"
        header = JwHeader(
            alg="RS256",
            enc="A128GCM",
            zip="DEF",
            jku="https://example.com/jwks.json",
            jwk=Jwk(kty="RSA", n=10333, e=65537),
            kid="2010-12-29",
            typ="JWT",
            cty="JWT",
            apu=b"Alice",
            apv=b"Bob",
            epk=Jwk(kty="EC", crv="P-256", x=10333, y=10334),
            crit=["exp"],
            x5u="https://example.com/cert.pem",
            x5c=[cert],
            x5t="dGh1bWI",
            x5t_s256="c2hhMjU2",
            additional_members={"exp": 1363284000},
        )
        encoded = header.to_dict()

        assert encoded["x5t#S256"] == "c2hhMjU2"
        assert encoded["apu"] == "QWxpY2U"
        assert encoded["epk"] == {"kty": "EC", "crv": "P-256", "x": "KF0", "y": "KF4"}
        assert encoded["x5c"] == [base64.b64encode(cert).decode("ascii")]
        assert JwHeader.from_json(header.to_json()) == header

    def test_x5c_uses_padded_standard_base64(self):
        """Test that certificate chain entries are standard base64, not base64url."""
        header = JwHeader.from_json('{"x5c":["MIIB+w=="]}')
        assert header.x5c == [base64.b64decode("MIIB+w==")]

    def test_x5c_invalid_base64(self):
        """Test that a malformed certificate reports the x5c member."""
        with pytest.raises(FieldDecodeError) as exc_info:
            JwHeader.from_json('{"x5c":["not base64"]}')
        assert exc_info.value.field == "x5c"

    def test_nested_jwk_errors_name_header_member(self):
        """Test that a malformed embedded key reports the jwk member."""
        with pytest.raises(FieldDecodeError) as exc_info:
            JwHeader.from_json('{"jwk":"not-an-object"}')
        assert exc_info.value.field == "jwk"

    def test_extension_members_kept(self):
        """Test that private header parameters are kept as additional members."""
        header = JwHeader.from_json('{"alg":"HS256","http://example.com/ext":1}')
        assert header.additional_members == {"http://example.com/ext": 1}

    def test_is_empty(self):
        """Test emptiness of a header."""
        assert JwHeader().is_empty()
        assert not JwHeader(kid="k").is_empty()
