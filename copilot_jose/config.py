# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Verification policy configuration.

Settings are read through a ``ConfigProvider``; ``EnvConfigProvider`` reads
environment variables and ``StaticConfigProvider`` serves fixed values
(useful for tests).

Environment variables:
    JOSE_ALLOWED_ALGORITHMS: Comma-separated algorithms accepted on verify
        (empty accepts any JWS algorithm)
    JOSE_CLOCK_SKEW_SECONDS: Leeway for exp/nbf checks (default 0)
    JOSE_ALLOW_UNSIGNED: Accept alg=none objects (default false)
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .algorithms import NONE, is_valid_signature_alg
from .claim_set import ClaimSet
from .exceptions import UnsupportedAlgorithm
from .jwk import Jwk
from .jws import Jws

logger = logging.getLogger("copilot_jose.config")

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


class ConfigProvider(ABC):
    """Abstract base class for configuration providers."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        raise NotImplementedError

    @abstractmethod
    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get a boolean configuration value."""
        raise NotImplementedError

    @abstractmethod
    def get_int(self, key: str, default: int = 0) -> int:
        """Get an integer configuration value."""
        raise NotImplementedError


def _parse_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        value_lower = value.strip().lower()
        if value_lower in _TRUE_VALUES:
            return True
        if value_lower in _FALSE_VALUES:
            return False
    return default


def _parse_int(value: Any, default: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


class EnvConfigProvider(ConfigProvider):
    """Configuration provider that reads from environment variables."""

    def __init__(self, environ: dict[str, str] | None = None):
        self._environ = environ if environ is not None else os.environ

    def get(self, key: str, default: Any = None) -> Any:
        return self._environ.get(key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._environ.get(key)
        if value is None:
            return default
        return _parse_bool(value, default)

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._environ.get(key)
        if value is None:
            return default
        return _parse_int(value, default)


class StaticConfigProvider(ConfigProvider):
    """Configuration provider with static values (useful for tests)."""

    def __init__(self, config: dict[str, Any] | None = None):
        self._config = config if config is not None else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._config.get(key)
        if value is None:
            return default
        return _parse_bool(value, default)

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._config.get(key)
        if value is None:
            return default
        return _parse_int(value, default)

    def set(self, key: str, value: Any) -> None:
        self._config[key] = value


@dataclass(frozen=True)
class JoseConfig:
    """Policy applied when accepting tokens.

    Attributes:
        allowed_algorithms: Algorithms accepted on verify; empty accepts any
        clock_skew_seconds: Leeway for exp and nbf checks
        allow_unsigned: Whether alg=none objects are accepted
    """
    allowed_algorithms: tuple[str, ...] = ()
    clock_skew_seconds: int = 0
    allow_unsigned: bool = False

    def __post_init__(self):
        for alg in self.allowed_algorithms:
            if not is_valid_signature_alg(alg):
                raise ValueError(f"Unknown signature algorithm in allowed_algorithms: {alg!r}")
        if self.clock_skew_seconds < 0:
            raise ValueError(f"clock_skew_seconds must be >= 0, got {self.clock_skew_seconds}")

    def validate_claims(self, claims: ClaimSet, ref: ClaimSet, now: datetime | None = None) -> None:
        """Validate ``claims`` against ``ref`` using the configured clock skew."""
        claims.validate(ref, now=now, leeway=self.clock_skew_seconds)

    def verify_jws(self, jws: Jws, jwk: Jwk | None) -> None:
        """Verify a single-signature JWS under this policy.

        Raises:
            UnsupportedAlgorithm: If the algorithm is not allowed, including
                alg=none when ``allow_unsigned`` is False
            VerificationFailure: If the signature does not verify
        """
        if not self.allow_unsigned and jws.signatures and jws.signatures[0].get_alg() == NONE:
            raise UnsupportedAlgorithm("Unsecured JWS (alg=none) is not allowed")
        jws.verify(jwk, allowed_algorithms=self.allowed_algorithms or None)


def load_jose_config(provider: ConfigProvider | None = None) -> JoseConfig:
    """Load the verification policy from a configuration provider.

    Args:
        provider: Configuration source (defaults to the process environment)

    Returns:
        JoseConfig instance

    Raises:
        ValueError: If an algorithm name is unknown or the clock skew is negative
    """
    provider = provider or EnvConfigProvider()

    raw_algorithms = provider.get("JOSE_ALLOWED_ALGORITHMS", "") or ""
    if isinstance(raw_algorithms, str):
        allowed = tuple(a.strip() for a in raw_algorithms.split(",") if a.strip())
    else:
        allowed = tuple(raw_algorithms)

    config = JoseConfig(
        allowed_algorithms=allowed,
        clock_skew_seconds=provider.get_int("JOSE_CLOCK_SKEW_SECONDS", 0),
        allow_unsigned=provider.get_bool("JOSE_ALLOW_UNSIGNED", False),
    )
    logger.debug(
        "Loaded JOSE config: allowed_algorithms=%s, clock_skew_seconds=%d, allow_unsigned=%s",
        ",".join(config.allowed_algorithms) or "*",
        config.clock_skew_seconds,
        config.allow_unsigned,
    )
    return config
