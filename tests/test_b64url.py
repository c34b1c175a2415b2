# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for base64url encoding."""

import pytest

from copilot_jose.b64url import (
    Base64UrlOctets,
    Base64UrlUInt,
    b64url_decode,
    b64url_encode,
    b64url_to_uint,
    uint_to_b64url,
)
from copilot_jose.exceptions import DecodeError


class TestOctets:
    """Tests for byte string encoding."""

    @pytest.mark.parametrize("data", [b"", b"f", b"fo", b"foo", b"foob", bytes(range(256))])
    def test_decode_inverts_encode(self, data):
        """Test that decoding an encoding yields the original bytes, including empty input."""
        assert b64url_decode(b64url_encode(data)) == data

    def test_encode_uses_url_alphabet_without_padding(self):
        """Test that output uses '-' and '_' and never '='."""
        encoded = b64url_encode(b"\xfb\xff\xfe")
        assert encoded == "-__-"
        assert b64url_encode(b"\x00") == "AA"

    def test_decode_accepts_bytes(self):
        """Test decoding ASCII bytes input."""
        assert b64url_decode(b"Zm9v") == b"foo"

    @pytest.mark.parametrize("value", ["Zm9v=", "Zg==", "+/8", "Zm 9v", "Zm9v\n", "é"])
    def test_decode_rejects_padding_and_foreign_characters(self, value):
        """Test that padding, standard-alphabet and whitespace characters are rejected."""
        with pytest.raises(DecodeError):
            b64url_decode(value)

    def test_decode_rejects_impossible_length(self):
        """Test that a length of 4n+1 is rejected."""
        with pytest.raises(DecodeError):
            b64url_decode("Zm9vY")

    def test_decode_rejects_non_string(self):
        """Test that non-text input is rejected."""
        with pytest.raises(DecodeError):
            b64url_decode(123)

    def test_octets_value_type(self):
        """Test the Base64UrlOctets wrapper."""
        value = Base64UrlOctets(b"this my symmettric key")
        assert value.encoded() == "dGhpcyBteSBzeW1tZXR0cmljIGtleQ"
        assert Base64UrlOctets.decode("dGhpcyBteSBzeW1tZXR0cmljIGtleQ") == value


class TestUnsignedIntegers:
    """Tests for Base64urlUInt encoding."""

    @pytest.mark.parametrize(
        "value,encoded",
        [
            (65537, "AQAB"),
            (25, "GQ"),
            (10333, "KF0"),
            (10334, "KF4"),
            (10335, "KF8"),
        ],
    )
    def test_known_encodings(self, value, encoded):
        """Test encodings used by RFC 7515 keys and JWK vectors."""
        assert uint_to_b64url(value) == encoded
        assert b64url_to_uint(encoded) == value

    def test_no_leading_zero_byte(self):
        """Test that encoding uses the minimal big-endian form."""
        assert uint_to_b64url(255) == "_w"
        assert uint_to_b64url(256) == "AQA"

    def test_leading_zero_bytes_are_ignored_on_decode(self):
        """Test that a redundant leading zero decodes to the same integer and re-encodes minimally."""
        value = b64url_to_uint("AAEA")
        assert value == 256
        assert uint_to_b64url(value) == "AQA"

    def test_negative_rejected(self):
        """Test that negative integers cannot be encoded."""
        with pytest.raises(ValueError):
            uint_to_b64url(-1)

    def test_uint_value_type(self):
        """Test the Base64UrlUInt wrapper."""
        assert Base64UrlUInt(65537).encoded() == "AQAB"
        assert Base64UrlUInt.decode("AQAB").value == 65537
