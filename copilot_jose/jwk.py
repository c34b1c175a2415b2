# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""JSON Web Key model (RFC 7517, RFC 7518 section 6).

A ``Jwk`` holds symmetric (``oct``), elliptic curve (``EC``) or RSA key
material. Keys are imported from and exported to ``cryptography`` key
objects; ``validate()`` checks the parameter set for the key type before a
key is handed to a signer.
"""

import copy
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from .algorithms import (
    KEY_FAMILY_EC,
    KEY_FAMILY_OCT,
    KEY_FAMILY_RSA,
    KEY_FAMILY_UNKNOWN,
    key_family_for,
)
from .exceptions import DecodeError, InvalidKeyType, KeyValidationError
from .record import (
    Field,
    JsonRecord,
    decode_octets,
    decode_str,
    decode_str_list,
    decode_uint,
    encode_octets,
    encode_uint,
)

logger = logging.getLogger("copilot_jose.jwk")

KEY_TYPE_OCT = KEY_FAMILY_OCT
KEY_TYPE_EC = KEY_FAMILY_EC
KEY_TYPE_RSA = KEY_FAMILY_RSA
KEY_TYPES = frozenset({KEY_TYPE_OCT, KEY_TYPE_EC, KEY_TYPE_RSA})

KEY_USE_SIG = "sig"
KEY_USE_ENC = "enc"

KEY_OP_SIGN = "sign"
KEY_OP_VERIFY = "verify"
KEY_OP_ENCRYPT = "encrypt"
KEY_OP_DECRYPT = "decrypt"
KEY_OP_WRAP_KEY = "wrapKey"
KEY_OP_UNWRAP_KEY = "unwrapKey"
KEY_OP_DERIVE_KEY = "deriveKey"
KEY_OP_DERIVE_BITS = "deriveBits"

# Marks an RSA public exponent that has not been set
E_UNSET = -1

_CURVES = MappingProxyType({
    "P-224": ec.SECP224R1,
    "P-256": ec.SECP256R1,
    "P-384": ec.SECP384R1,
    "P-521": ec.SECP521R1,
})

_CURVE_NAMES = MappingProxyType({
    "secp224r1": "P-224",
    "secp256r1": "P-256",
    "secp384r1": "P-384",
    "secp521r1": "P-521",
})


def curve_by_name(name: str) -> ec.EllipticCurve | None:
    """Return the curve for a JWK ``crv`` name, or None if unsupported."""
    curve_cls = _CURVES.get(name)
    return curve_cls() if curve_cls else None


@dataclass
class OtherPrime:
    """An additional RSA prime of a multi-prime key (RFC 7518 section 6.3.2.7).

    Attributes:
        r: Prime factor
        d: Factor CRT exponent
        t: Factor CRT coefficient
    """
    r: int | None = None
    d: int | None = None
    t: int | None = None

    @classmethod
    def from_dict(cls, obj: Any) -> "OtherPrime":
        if not isinstance(obj, dict):
            raise TypeError("other prime info must be a JSON object")
        return cls(**{name: decode_uint(obj[name]) for name in ("r", "d", "t") if name in obj})

    def to_dict(self) -> dict[str, str]:
        return {
            name: encode_uint(getattr(self, name))
            for name in ("r", "d", "t")
            if getattr(self, name) is not None
        }


def _decode_other_primes(value: Any) -> list[OtherPrime]:
    if not isinstance(value, list):
        raise TypeError("expected an array of other prime info objects")
    return [OtherPrime.from_dict(v) for v in value]


def _encode_other_primes(value: list[OtherPrime]) -> list[dict[str, str]]:
    return [p.to_dict() for p in value]


def _is_unset_exponent(value: int) -> bool:
    return value < 0


_COMMON_FIELDS = (
    Field("kty", "kty", decode_str),
    Field("kid", "kid", decode_str),
    Field("alg", "alg", decode_str),
    Field("use", "use", decode_str),
    Field("key_ops", "key_ops", decode_str_list),
)

_EC_FIELDS = (
    Field("crv", "crv", decode_str),
    Field("x", "x", decode_uint, encode_uint),
    Field("y", "y", decode_uint, encode_uint),
    Field("d", "d", decode_uint, encode_uint),
)

_RSA_FIELDS = (
    Field("n", "n", decode_uint, encode_uint),
    Field("e", "e", decode_uint, encode_uint, _is_unset_exponent),
    Field("d", "d", decode_uint, encode_uint),
    Field("p", "p", decode_uint, encode_uint),
    Field("q", "q", decode_uint, encode_uint),
    Field("dp", "dp", decode_uint, encode_uint),
    Field("dq", "dq", decode_uint, encode_uint),
    Field("qi", "qi", decode_uint, encode_uint),
    Field("oth", "oth", _decode_other_primes, _encode_other_primes),
)

_OCT_FIELDS = (
    Field("k", "k", decode_octets, encode_octets),
)

_TYPE_FIELDS = MappingProxyType({
    KEY_TYPE_EC: _EC_FIELDS,
    KEY_TYPE_RSA: _RSA_FIELDS,
    KEY_TYPE_OCT: _OCT_FIELDS,
})

_PRIVATE_PARAMS = ("d", "p", "q", "dp", "dq", "qi")
_CRT_PARAMS = ("p", "q", "dp", "dq", "qi")


@dataclass
class Jwk(JsonRecord):
    """A JSON Web Key.

    Only the parameters of the active key type (``kty``) are serialized.

    Attributes:
        kty: Key type ("oct", "EC" or "RSA")
        kid: Key ID
        alg: Intended algorithm
        use: Public key use ("sig" or "enc")
        key_ops: Permitted key operations
        crv: EC curve name
        x: EC x coordinate
        y: EC y coordinate
        d: EC private key or RSA private exponent
        n: RSA modulus
        e: RSA public exponent (``E_UNSET`` when absent)
        p: RSA first prime factor
        q: RSA second prime factor
        dp: RSA first factor CRT exponent
        dq: RSA second factor CRT exponent
        qi: RSA first CRT coefficient
        oth: RSA other primes info
        k: Symmetric key value
        additional_members: Members other than the registered parameters
    """
    kty: str = ""
    kid: str = ""
    alg: str = ""
    use: str = ""
    key_ops: list[str] = field(default_factory=list)
    crv: str = ""
    x: int | None = None
    y: int | None = None
    d: int | None = None
    n: int | None = None
    e: int = E_UNSET
    p: int | None = None
    q: int | None = None
    dp: int | None = None
    dq: int | None = None
    qi: int | None = None
    oth: list[OtherPrime] = field(default_factory=list)
    k: bytes = b""
    additional_members: dict[str, Any] = field(default_factory=dict)

    # "d" is shared by EC and RSA and is decoded once
    json_fields = _COMMON_FIELDS + _EC_FIELDS + tuple(f for f in _RSA_FIELDS if f.name != "d") + _OCT_FIELDS

    @classmethod
    def new(cls, kty: str) -> "Jwk":
        """Create an empty key of the given type.

        Raises:
            InvalidKeyType: If kty is not "oct", "EC" or "RSA"
        """
        if kty not in KEY_TYPES:
            raise InvalidKeyType(f"Key type {kty!r} is invalid. Must be oct, RSA or EC")
        return cls(kty=kty)

    @classmethod
    def from_key(cls, key: Any, **params: Any) -> "Jwk":
        """Create a key from a native key object.

        Args:
            key: ``cryptography`` RSA/EC key, or ``bytes``/``str`` secret
            **params: Common parameters (kid, alg, use, key_ops)
        """
        jwk = cls(**params)
        jwk.import_key(key)
        return jwk

    def active_fields(self) -> tuple[Field, ...]:
        return _COMMON_FIELDS + _TYPE_FIELDS.get(self.kty, ())

    def clear_type_params(self) -> None:
        """Reset every key-type specific parameter to its unset state."""
        self.crv = ""
        self.x = None
        self.y = None
        self.d = None
        self.n = None
        self.e = E_UNSET
        self.p = None
        self.q = None
        self.dp = None
        self.dq = None
        self.qi = None
        self.oth = []
        self.k = b""

    def import_key(self, key: Any) -> None:
        """Replace the key material with a native key.

        Supported inputs are ``cryptography`` RSA and EC public/private keys
        and non-empty ``bytes``/``str`` symmetric secrets. Parameters of other
        key types are cleared.

        Raises:
            KeyValidationError: If a symmetric secret is empty
            InvalidKeyType: If the key object is not supported
        """
        if isinstance(key, rsa.RSAPrivateKey):
            numbers = key.private_numbers()
            self._import_rsa_public(numbers.public_numbers)
            self.d = numbers.d
            self.p = numbers.p
            self.q = numbers.q
            self.dp = numbers.dmp1
            self.dq = numbers.dmq1
            self.qi = numbers.iqmp
        elif isinstance(key, rsa.RSAPublicKey):
            self._import_rsa_public(key.public_numbers())
        elif isinstance(key, ec.EllipticCurvePrivateKey):
            numbers = key.private_numbers()
            self._import_ec_public(numbers.public_numbers)
            self.d = numbers.private_value
        elif isinstance(key, ec.EllipticCurvePublicKey):
            self._import_ec_public(key.public_numbers())
        elif isinstance(key, (bytes, bytearray, str)):
            if len(key) < 1:
                raise KeyValidationError("Symmetric key value is empty")
            self.clear_type_params()
            self.kty = KEY_TYPE_OCT
            self.k = key.encode("utf-8") if isinstance(key, str) else bytes(key)
        else:
            raise InvalidKeyType(
                "Key must be an RSA or EC public/private key, str or bytes. "
                f"Passed key type: {type(key).__name__}"
            )
        logger.debug("Imported %s key (kid=%s)", self.kty, self.kid or "-")

    def _import_rsa_public(self, numbers: rsa.RSAPublicNumbers) -> None:
        self.clear_type_params()
        self.kty = KEY_TYPE_RSA
        self.n = numbers.n
        self.e = numbers.e

    def _import_ec_public(self, numbers: ec.EllipticCurvePublicNumbers) -> None:
        crv = _CURVE_NAMES.get(numbers.curve.name)
        if crv is None:
            raise InvalidKeyType(f"Unsupported EC curve: {numbers.curve.name}")
        self.clear_type_params()
        self.kty = KEY_TYPE_EC
        self.crv = crv
        self.x = numbers.x
        self.y = numbers.y

    def is_private(self) -> bool:
        """Return True if the key carries private (or secret) material."""
        if self.kty == KEY_TYPE_OCT:
            return len(self.k) > 0
        return self.d is not None

    def export_key(self) -> Any:
        """Export the native key: bytes for oct, a private key if ``d`` is set, else a public key."""
        if self.kty == KEY_TYPE_OCT:
            return self.k
        if self.d is not None:
            return self.export_private_key()
        return self.export_public_key()

    def export_public_key(self) -> rsa.RSAPublicKey | ec.EllipticCurvePublicKey:
        """Build a ``cryptography`` public key from the stored parameters.

        Raises:
            InvalidKeyType: For symmetric keys
            KeyValidationError: If the parameters do not form a valid key
        """
        try:
            if self.kty == KEY_TYPE_RSA:
                return self._rsa_public_numbers().public_key()
            if self.kty == KEY_TYPE_EC:
                return self._ec_public_numbers().public_key()
        except ValueError as e:
            raise KeyValidationError(f"Invalid {self.kty} public key parameters: {e}") from e
        raise InvalidKeyType(f"Key type {self.kty!r} has no public key")

    def export_private_key(self) -> rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey:
        """Build a ``cryptography`` private key from the stored parameters.

        RSA keys stored without CRT parameters have them recomputed from
        (n, e, d).

        Raises:
            InvalidKeyType: For symmetric keys
            KeyValidationError: If private parameters are missing or invalid
        """
        if self.kty not in (KEY_TYPE_RSA, KEY_TYPE_EC):
            raise InvalidKeyType(f"Key type {self.kty!r} has no private key")
        if self.d is None:
            raise KeyValidationError(f"{self.kty} private key parameter (d) is not set")

        try:
            if self.kty == KEY_TYPE_EC:
                return ec.EllipticCurvePrivateNumbers(self.d, self._ec_public_numbers()).private_key()
            return self._rsa_private_numbers().private_key()
        except ValueError as e:
            raise KeyValidationError(f"Invalid {self.kty} private key parameters: {e}") from e

    def _rsa_public_numbers(self) -> rsa.RSAPublicNumbers:
        if self.n is None or self.e < 1:
            raise KeyValidationError("RSA public key requires n and e")
        return rsa.RSAPublicNumbers(self.e, self.n)

    def _rsa_private_numbers(self) -> rsa.RSAPrivateNumbers:
        if self.oth:
            raise KeyValidationError("Multi-prime RSA keys (oth) cannot be exported")

        public_numbers = self._rsa_public_numbers()
        if all(getattr(self, name) is not None for name in _CRT_PARAMS):
            p, q, dp, dq, qi = self.p, self.q, self.dp, self.dq, self.qi
        else:
            p, q = rsa.rsa_recover_prime_factors(self.n, self.e, self.d)
            dp = rsa.rsa_crt_dmp1(self.d, p)
            dq = rsa.rsa_crt_dmq1(self.d, q)
            qi = rsa.rsa_crt_iqmp(p, q)
        return rsa.RSAPrivateNumbers(p, q, self.d, dp, dq, qi, public_numbers)

    def _ec_public_numbers(self) -> ec.EllipticCurvePublicNumbers:
        curve = curve_by_name(self.crv)
        if curve is None:
            raise KeyValidationError(f"Unsupported EC curve (crv): {self.crv!r}")
        if self.x is None or self.y is None:
            raise KeyValidationError("EC public key requires x and y")
        return ec.EllipticCurvePublicNumbers(self.x, self.y, curve)

    def public_jwk(self) -> "Jwk":
        """Return a copy of this key without private parameters.

        Raises:
            InvalidKeyType: For symmetric keys, which have no public form
        """
        if self.kty not in (KEY_TYPE_RSA, KEY_TYPE_EC):
            raise InvalidKeyType(f"Key type {self.kty!r} has no public form")

        public = copy.deepcopy(self)
        for name in _PRIVATE_PARAMS:
            setattr(public, name, None)
        public.oth = []
        return public

    @classmethod
    def from_pem(cls, pem: str | bytes, password: bytes | None = None, **params: Any) -> "Jwk":
        """Create a key from a PEM encoded private or public key.

        Raises:
            DecodeError: If the PEM data cannot be loaded
            InvalidKeyType: If the PEM holds an unsupported key type
        """
        data = pem.encode("utf-8") if isinstance(pem, str) else pem
        try:
            if b"PRIVATE KEY" in data:
                key = serialization.load_pem_private_key(data, password=password)
            else:
                key = serialization.load_pem_public_key(data)
        except (ValueError, TypeError) as e:
            raise DecodeError(f"Failed to load PEM key: {e}") from e
        return cls.from_key(key, **params)

    def to_pem(self, private: bool = False) -> str:
        """Export the key as PEM (PKCS8 for private keys, SubjectPublicKeyInfo otherwise)."""
        if private:
            pem = self.export_private_key().private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
        else:
            pem = self.export_public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
        return pem.decode("utf-8")

    def validate(self) -> None:
        """Check that the parameter set forms a valid key of type ``kty``.

        Raises:
            InvalidKeyType: If kty is not oct, EC or RSA
            KeyValidationError: Describing the first parameter that is
                missing or inconsistent, or an ``alg`` that requires a
                different key type
        """
        if self.kty == KEY_TYPE_RSA:
            self._validate_rsa_params()
        elif self.kty == KEY_TYPE_EC:
            self._validate_ec_params()
        elif self.kty == KEY_TYPE_OCT:
            self._validate_oct_params()
        else:
            raise InvalidKeyType(f"Key type (kty) must be EC, RSA or oct, got {self.kty!r}")

        if self.alg:
            family = key_family_for(self.alg)
            if family != KEY_FAMILY_UNKNOWN and family != self.kty:
                raise KeyValidationError(
                    f"Jwk type (kty={self.kty}) doesn't match the key type "
                    f"required by alg={self.alg} ({family})"
                )

    def _validate_rsa_params(self) -> None:
        if self.e < 1:
            raise KeyValidationError("RSA required parameter (e) is unset or not positive")
        if self.n is None:
            raise KeyValidationError("RSA required parameter (n) is missing")

        present = [name for name in _CRT_PARAMS if getattr(self, name) is not None]

        if self.d is None:
            if present or self.oth:
                raise KeyValidationError(
                    "RSA prime parameters are present without the private exponent (d)"
                )
            return

        if present and len(present) != len(_CRT_PARAMS):
            missing = [name for name in _CRT_PARAMS if name not in present]
            raise KeyValidationError(
                f"RSA CRT parameters must be all present or all absent; missing: {', '.join(missing)}"
            )
        if self.oth and not present:
            raise KeyValidationError(
                "RSA other primes (oth) are present but p, q, dp, dq and qi are missing"
            )
        for i, prime in enumerate(self.oth):
            for name in ("t", "r", "d"):
                if getattr(prime, name) is None:
                    raise KeyValidationError(f"RSA other prime at index {i} is missing {name}")

    def _validate_ec_params(self) -> None:
        if self.x is None:
            raise KeyValidationError("EC required parameter (x) is missing")
        if self.y is None:
            raise KeyValidationError("EC required parameter (y) is missing")
        if not self.crv:
            raise KeyValidationError("EC required parameter (crv) is missing")
        if curve_by_name(self.crv) is None:
            raise KeyValidationError(f"EC curve (crv) {self.crv!r} is not supported")

    def _validate_oct_params(self) -> None:
        if len(self.k) < 1:
            raise KeyValidationError("oct required parameter (k) is empty")
