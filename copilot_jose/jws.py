# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""JSON Web Signature (RFC 7515).

A ``Jws`` holds a payload and one or more ``JwsSignature`` entries and can
be serialized in compact, flattened JSON or general JSON form.

Verification always runs over the base64url segments exactly as they were
received (``JwsSignature.raw_protected`` and ``Jws.raw_payload``), never over
a re-encoding of the parsed header, since re-encoding may reorder or
reformat the JSON the signer actually covered. Decoding and signing record
these segments; an object without them cannot be verified.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Collection

from .algorithms import NONE, is_valid_signature_alg
from .b64url import b64url_decode, b64url_encode
from .exceptions import (
    DecodeError,
    HeaderConsistencyError,
    JoseError,
    KeyNotSet,
    SignatureCountError,
    UnsupportedAlgorithm,
    VerificationFailure,
)
from .factory import create_signer
from .header import JwHeader
from .jwk import Jwk
from .jwk_set import JwkSet
from .jws_serialization import (
    COMPACT,
    FLAT,
    GENERAL,
    JSON_SERIALIZATIONS,
    join_compact,
    looks_like_json,
    signing_input,
    split_compact,
)
from .record import (
    Field,
    JsonRecord,
    decode_octets,
    decode_str,
    dumps,
    encode_nested,
    encode_octets,
    nested,
)

logger = logging.getLogger("copilot_jose.jws")

_SIGNATURE_MEMBERS = ("protected", "header", "signature")


def _decode_protected(value: Any) -> JwHeader:
    return JwHeader.from_json(b64url_decode(decode_str(value)))


def _encode_header(header: JwHeader) -> str:
    return b64url_encode(header.to_json().encode("utf-8"))


@dataclass
class JwsSignature(JsonRecord):
    """One signature of a JWS with its protected and unprotected headers.

    Attributes:
        protected: Integrity protected header
        header: Unprotected header
        signature: Signature bytes
        additional_members: Members other than protected, header and signature
        raw_protected: base64url protected header segment as received or signed
    """
    protected: JwHeader | None = None
    header: JwHeader | None = None
    signature: bytes = b""
    additional_members: dict[str, Any] = field(default_factory=dict)
    raw_protected: str | None = field(default=None, compare=False, repr=False)

    json_fields = (
        Field("protected", "protected", _decode_protected),
        Field("header", "header", nested(JwHeader), encode_nested),
        Field("signature", "signature", decode_octets, encode_octets),
    )

    @classmethod
    def from_dict(cls, obj: Any) -> "JwsSignature":
        jsig = super().from_dict(obj)
        raw = obj.get("protected")
        if isinstance(raw, str):
            jsig.raw_protected = raw
        return jsig

    def encode_known(self) -> dict[str, Any]:
        obj = {}
        if self.protected is not None:
            obj["protected"] = self.protected_segment()
        if self.header is not None and not self.header.is_empty():
            obj["header"] = self.header.to_dict()
        obj["signature"] = b64url_encode(self.signature)
        return obj

    def protected_segment(self) -> str:
        """Return the base64url protected header segment.

        The received segment is reused while it still decodes to the current
        protected header, so decoded objects re-encode byte for byte.
        """
        if self.protected is None:
            return ""
        if self.raw_protected and self._raw_protected_matches():
            return self.raw_protected
        return _encode_header(self.protected)

    def _raw_protected_matches(self) -> bool:
        try:
            return _decode_protected(self.raw_protected) == self.protected
        except JoseError:
            return False

    def _header_alg(self) -> str:
        alg_protected = self.protected.alg if self.protected is not None else ""
        alg_unprotected = self.header.alg if self.header is not None else ""

        if not alg_protected and not alg_unprotected:
            raise HeaderConsistencyError(
                "No algorithm (alg) found in protected or unprotected header"
            )
        if alg_protected and alg_unprotected and alg_protected != alg_unprotected:
            raise HeaderConsistencyError(
                "Two non-matching algorithm (alg) parameters found in unprotected and protected header"
            )

        alg = alg_protected or alg_unprotected
        if not is_valid_signature_alg(alg):
            raise UnsupportedAlgorithm(f"Header algorithm (alg) {alg!r} is not a JWS algorithm")
        return alg

    def get_alg(self) -> str:
        """Resolve the signature algorithm from the protected and unprotected headers.

        Raises:
            HeaderConsistencyError: If alg is missing, conflicting, or "none"
                with a non-empty signature
            UnsupportedAlgorithm: If alg is not a JWS algorithm
        """
        alg = self._header_alg()
        if alg == NONE and self.signature:
            raise HeaderConsistencyError("Unsecured JWS (alg=none) must have an empty signature")
        return alg

    def get_key_id(self) -> str:
        """Resolve the key ID; returns "" when neither header carries one.

        Raises:
            HeaderConsistencyError: If both headers carry different key IDs
        """
        kid_protected = self.protected.kid if self.protected is not None else ""
        kid_unprotected = self.header.kid if self.header is not None else ""

        if kid_protected and kid_unprotected and kid_protected != kid_unprotected:
            raise HeaderConsistencyError(
                "Unprotected header keyId different than protected header keyId"
            )
        return kid_protected or kid_unprotected

    def _check_headers(self) -> None:
        self.get_key_id()
        if self.header is not None and self.header.crit:
            raise HeaderConsistencyError(
                "Critical (crit) parameter must only be present in the protected header"
            )

    def validate(self) -> None:
        """Check header consistency; does not check the signature itself."""
        self.get_alg()
        self._check_headers()

    def sign(self, jws: "Jws", jwk: Jwk | None) -> None:
        """Sign ``jws.payload`` with this entry's headers and store the signature.

        The signed segments are recorded as verification evidence on this
        entry and on ``jws``.
        """
        alg = self._header_alg()
        self._check_headers()

        protected_b64 = _encode_header(self.protected) if self.protected is not None else ""
        payload_b64 = b64url_encode(jws.payload)

        if alg == NONE:
            logger.warning("Producing an unsecured JWS (alg=none)")
            self.signature = b""
        elif jwk is None:
            raise KeyNotSet(f"{alg} requires a signing key")
        else:
            signer = create_signer(alg)
            signer.set_sign_key(jwk)
            self.signature = signer.sign(signing_input(protected_b64, payload_b64))

        self.raw_protected = protected_b64 if self.protected is not None else None
        jws.raw_payload = payload_b64
        logger.debug("Signed JWS entry (alg=%s, kid=%s)", alg, self.get_key_id() or "-")

    def verify(
        self,
        jws: "Jws",
        jwk: Jwk | None,
        allowed_algorithms: Collection[str] | None = None,
    ) -> None:
        """Verify this entry's signature over the received wire segments.

        Args:
            jws: JWS holding the payload segment
            jwk: Verification key (unused for alg=none)
            allowed_algorithms: If non-empty, the algorithms accepted

        Raises:
            HeaderConsistencyError: If the headers are inconsistent
            UnsupportedAlgorithm: If the algorithm is unknown or not allowed
            VerificationFailure: If evidence is missing or the signature does not match
        """
        alg = self.get_alg()
        self._check_headers()

        if allowed_algorithms and alg not in allowed_algorithms:
            raise UnsupportedAlgorithm(f"Algorithm {alg} is not allowed")

        if alg == NONE:
            logger.warning("Accepting an unsecured JWS (alg=none)")
            return

        if self.protected is not None and self.raw_protected is None:
            raise VerificationFailure("Protected header wire segment is not available")
        if jws.raw_payload is None:
            raise VerificationFailure("Payload wire segment is not available")

        if jwk is None:
            raise KeyNotSet(f"{alg} requires a verification key")

        signer = create_signer(alg)
        signer.set_verify_key(jwk)
        signer.verify(signing_input(self.raw_protected or "", jws.raw_payload), self.signature)


def _decode_signatures(value: Any) -> list[JwsSignature]:
    if not isinstance(value, list):
        raise TypeError("expected an array of signature objects")
    return [JwsSignature.from_dict(v) for v in value]


def _encode_signatures(value: list[JwsSignature]) -> list[dict[str, Any]]:
    return [s.to_dict() for s in value]


@dataclass
class Jws(JsonRecord):
    """A JSON Web Signature.

    Attributes:
        payload: Payload bytes
        signatures: Signature entries
        serialization: compact, flat or general; how ``encode()`` renders the object
        additional_members: Top-level members other than the JWS members
        raw_payload: base64url payload segment as received or signed
    """
    payload: bytes = b""
    signatures: list[JwsSignature] = field(default_factory=list)
    serialization: str = GENERAL
    additional_members: dict[str, Any] = field(default_factory=dict)
    raw_payload: str | None = field(default=None, compare=False, repr=False)

    json_fields = (
        Field("payload", "payload", decode_octets, encode_octets),
        Field("signatures", "signatures", _decode_signatures, _encode_signatures),
    )

    @classmethod
    def reserved_names(cls) -> frozenset[str]:
        return super().reserved_names() | frozenset(_SIGNATURE_MEMBERS)

    @classmethod
    def from_dict(cls, obj: Any) -> "Jws":
        """Decode a general or flattened JSON serialization.

        Raises:
            DecodeError: If neither "signatures" nor "signature" is present,
                or a member is malformed
        """
        if not isinstance(obj, dict):
            raise DecodeError("JWS must be a JSON object")

        members = dict(obj)
        if "signatures" in members:
            mode = GENERAL
            values = cls.decode_known(members)
        elif "signature" in members:
            mode = FLAT
            signature_members = {name: members.pop(name) for name in _SIGNATURE_MEMBERS if name in members}
            values = cls.decode_known(members)
            values["signatures"] = [JwsSignature.from_dict(signature_members)]
        else:
            raise DecodeError(
                "JWS JSON must contain 'signatures' (general) or 'signature' (flattened)"
            )

        raw_payload = obj.get("payload", "")
        jws = cls(serialization=mode, additional_members=members, **values)
        jws.raw_payload = raw_payload
        logger.debug("Decoded %s JSON JWS with %d signature(s)", mode, len(jws.signatures))
        return jws

    @classmethod
    def from_compact(cls, data: str | bytes) -> "Jws":
        """Decode a compact serialization.

        Raises:
            DecodeError: If the input is not three valid base64url segments
        """
        protected_b64, payload_b64, signature_b64 = split_compact(data)

        jsig = JwsSignature(
            protected=_decode_protected(protected_b64),
            signature=b64url_decode(signature_b64),
        )
        jsig.raw_protected = protected_b64

        jws = cls(payload=b64url_decode(payload_b64), signatures=[jsig], serialization=COMPACT)
        jws.raw_payload = payload_b64
        logger.debug("Decoded compact JWS")
        return jws

    @classmethod
    def decode(cls, data: str | bytes) -> "Jws":
        """Decode any serialization, detecting JSON by a leading ``{``."""
        if looks_like_json(data):
            return cls.from_json(data)
        return cls.from_compact(data)

    def to_dict(self, mode: str | None = None) -> dict[str, Any]:
        """Build the JSON serialization.

        Args:
            mode: "flat" or "general"; defaults to ``serialization``, with
                compact objects rendered as general

        Raises:
            SignatureCountError: If flat is requested without exactly one signature
            ValueError: If mode is not a JSON serialization
        """
        if mode is None:
            mode = self.serialization if self.serialization in JSON_SERIALIZATIONS else GENERAL
        elif mode not in JSON_SERIALIZATIONS:
            raise ValueError(f"Unsupported JSON serialization: {mode}")

        obj = {}
        if self.payload:
            obj["payload"] = b64url_encode(self.payload)

        if mode == FLAT:
            if len(self.signatures) != 1:
                raise SignatureCountError(
                    f"Flattened JSON serialization requires exactly one signature, got {len(self.signatures)}"
                )
            obj.update(self.signatures[0].encode_known())
        else:
            obj["signatures"] = _encode_signatures(self.signatures)

        return self.merge_additional(obj)

    def to_json(self, mode: str | None = None) -> str:
        return dumps(self.to_dict(mode))

    def to_compact(self) -> str:
        """Build the compact serialization.

        Raises:
            SignatureCountError: Unless there is exactly one signature
            HeaderConsistencyError: If the protected header is missing or an
                unprotected header is present
        """
        if len(self.signatures) != 1:
            raise SignatureCountError(
                f"Compact serialization requires exactly one signature, got {len(self.signatures)}"
            )

        jsig = self.signatures[0]
        if jsig.protected is None:
            raise HeaderConsistencyError("Compact serialization requires a protected header")
        if jsig.header is not None and not jsig.header.is_empty():
            raise HeaderConsistencyError("Compact serialization cannot carry an unprotected header")

        return join_compact(
            jsig.protected_segment(),
            b64url_encode(self.payload),
            b64url_encode(jsig.signature),
        )

    def encode(self) -> str:
        """Serialize according to ``serialization``."""
        if self.serialization == COMPACT:
            return self.to_compact()
        return self.to_json()

    def sign(self, jwk: Jwk | None) -> None:
        """Sign the single signature entry; a JWS without entries is left unchanged.

        Raises:
            SignatureCountError: If there is more than one signature entry
        """
        if len(self.signatures) > 1:
            raise SignatureCountError("More than one signature structure found")
        if not self.signatures:
            return
        self.signatures[0].sign(self, jwk)

    def verify(self, jwk: Jwk | None, allowed_algorithms: Collection[str] | None = None) -> None:
        """Verify the single signature entry.

        Raises:
            SignatureCountError: Unless there is exactly one signature entry
            VerificationFailure: If the signature does not verify
        """
        if len(self.signatures) != 1:
            raise SignatureCountError(
                f"Verification requires exactly one signature, got {len(self.signatures)}"
            )
        self.signatures[0].verify(self, jwk, allowed_algorithms)

    def verify_with_key_set(
        self,
        jwk_set: JwkSet,
        allowed_algorithms: Collection[str] | None = None,
    ) -> Jwk | None:
        """Verify the single signature entry with the key selected by its ``kid``.

        Returns:
            The key that verified the signature (None for alg=none)

        Raises:
            SignatureCountError: Unless there is exactly one signature entry
            VerificationFailure: If no key matches the key ID or the signature does not verify
        """
        if len(self.signatures) != 1:
            raise SignatureCountError(
                f"Verification requires exactly one signature, got {len(self.signatures)}"
            )

        jsig = self.signatures[0]
        if jsig.get_alg() == NONE:
            jsig.verify(self, None, allowed_algorithms)
            return None

        kid = jsig.get_key_id()
        jwk = jwk_set.find_by_id(kid)
        if jwk is None:
            raise VerificationFailure(f"No key found for key ID {kid!r}")
        jsig.verify(self, jwk, allowed_algorithms)
        return jwk
