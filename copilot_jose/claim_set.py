# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""JWT claim set model and reference-based claim validation (RFC 7519)."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from .exceptions import ClaimValidationError
from .record import (
    Field,
    JsonRecord,
    decode_date,
    decode_str,
    encode_date,
)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _decode_audience(value: Any) -> list[str]:
    # "aud" may be a single case-sensitive string (RFC 7519 section 4.1.3)
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise TypeError("expected a string or an array of strings")
    return list(value)


@dataclass
class ClaimSet(JsonRecord):
    """A JWT claim set.

    Attributes:
        iss: Issuer
        sub: Subject
        aud: Audiences
        jti: JWT ID
        exp: Expiration time
        nbf: Not-before time
        iat: Issued-at time
        additional_claims: Claims other than the seven registered ones
    """
    iss: str = ""
    sub: str = ""
    aud: list[str] = field(default_factory=list)
    jti: str = ""
    exp: datetime | None = None
    nbf: datetime | None = None
    iat: datetime | None = None
    additional_claims: dict[str, Any] = field(default_factory=dict)

    json_fields = (
        Field("iss", "iss", decode_str),
        Field("sub", "sub", decode_str),
        Field("aud", "aud", _decode_audience),
        Field("jti", "jti", decode_str),
        Field("exp", "exp", decode_date, encode_date),
        Field("nbf", "nbf", decode_date, encode_date),
        Field("iat", "iat", decode_date, encode_date),
    )
    additional_attr = "additional_claims"

    def validate(
        self,
        ref: "ClaimSet",
        now: datetime | None = None,
        leeway: int | float = 0,
    ) -> None:
        """Validate this claim set against a reference claim set.

        Only the claims set in ``ref`` are checked. For ``exp`` and ``nbf``
        the reference value only marks the check as required; the claim is
        compared with the current time.

        Args:
            ref: Reference claim set describing the expected claims
            now: Time to validate against (defaults to the current UTC time)
            leeway: Clock skew tolerance in seconds for exp and nbf

        Raises:
            ClaimValidationError: Listing every failing check
        """
        now = now or datetime.now(timezone.utc)
        failures = []

        checks = [
            ("Exp", ref.exp is not None, lambda: self.validate_exp(now, leeway)),
            ("Nbf", ref.nbf is not None, lambda: self.validate_nbf(now, leeway)),
            ("Iss", bool(ref.iss), lambda: self.validate_iss(ref.iss)),
            ("Sub", bool(ref.sub), lambda: self.validate_sub(ref.sub)),
            ("Aud", bool(ref.aud), lambda: self.validate_aud(ref.aud)),
            ("Jti", bool(ref.jti), lambda: self.validate_jti(ref.jti)),
            ("Additional Claims", bool(ref.additional_claims),
             lambda: self.validate_additional_claims(ref.additional_claims)),
        ]
        for label, required, check in checks:
            if not required:
                continue
            try:
                check()
            except ClaimValidationError as e:
                failures.extend(f"[{label}] Validation failed: {msg}" for msg in e.failures)

        if failures:
            raise ClaimValidationError(failures)

    def validate_iss(self, iss: str) -> None:
        if self.iss.strip() != iss.strip():
            raise ClaimValidationError([f"Issuer ({self.iss}) doesn't match ref ({iss})"])

    def validate_sub(self, sub: str) -> None:
        if self.sub.strip() != sub.strip():
            raise ClaimValidationError([f"Subject ({self.sub}) doesn't match ref ({sub})"])

    def validate_jti(self, jti: str) -> None:
        if self.jti.strip() != jti.strip():
            raise ClaimValidationError([f"JWT ID ({self.jti}) doesn't match ref ({jti})"])

    def validate_aud(self, aud: list[str]) -> None:
        """Require every reference audience to be present in this claim set."""
        present = {a.strip() for a in self.aud}
        missing = [a for a in aud if a.strip() not in present]
        if missing:
            raise ClaimValidationError(
                [f"Audience value ({a}) doesn't exist in claim set" for a in missing]
            )

    def validate_exp(self, now: datetime | None = None, leeway: int | float = 0) -> None:
        if self.exp is None:
            raise ClaimValidationError(["Expiration (exp) claim is missing"])
        now = _as_utc(now or datetime.now(timezone.utc))
        if _as_utc(self.exp) + timedelta(seconds=leeway) < now:
            raise ClaimValidationError(["JWT has expired"])

    def validate_nbf(self, now: datetime | None = None, leeway: int | float = 0) -> None:
        if self.nbf is None:
            raise ClaimValidationError(["Not-before (nbf) claim is missing"])
        now = _as_utc(now or datetime.now(timezone.utc))
        if now < _as_utc(self.nbf) - timedelta(seconds=leeway):
            raise ClaimValidationError(["JWT can not yet be accepted for processing"])

    def validate_additional_claims(self, claims: dict[str, Any]) -> None:
        failures = []
        for key, expected in claims.items():
            if key not in self.additional_claims:
                failures.append(f"Key ({key}) doesn't exist in claim set")
            elif self.additional_claims[key] != expected:
                failures.append(
                    f"Reference key ({key}) with value ({expected!r}) doesn't match "
                    f"claim value ({self.additional_claims[key]!r})"
                )
        if failures:
            raise ClaimValidationError(failures)
