"""Service configuration loaded from environment variables.

All configuration values have defaults matching the production
deployment (``core.constants``).  Environment variables override them.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any value is out
    of its valid range, so a bad deployment setting is caught when the
    service is constructed rather than on the first cache miss.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass

from region_boundaries.core.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_CACHE_TTL_S,
    DEFAULT_FETCH_TIMEOUT_S,
    DEFAULT_INDEX_URL,
    DEFAULT_REGION_KEY,
    DEFAULT_SIMPLIFY_TOLERANCE,
)
from region_boundaries.core.exceptions import ValidationError

# Environment variable names.
ENV_INDEX_URL = "BOUNDARY_INDEX_URL"
ENV_BASE_URL = "BOUNDARY_BASE_URL"
ENV_REGION_KEY = "BOUNDARY_REGION_KEY"
ENV_CACHE_TTL_S = "BOUNDARY_CACHE_TTL_S"
ENV_SIMPLIFY_TOLERANCE = "BOUNDARY_SIMPLIFY_TOLERANCE"
ENV_FETCH_TIMEOUT_S = "BOUNDARY_FETCH_TIMEOUT_S"

_URL_SCHEMES = ("http://", "https://")


class ConfigValidationError(ValidationError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Immutable service configuration.

    Loaded once at process startup and handed to ``RegionBoundaryService``.

    Attributes:
        index_url: URL of the index document (region -> {name: filename}).
        base_url: Base URL the per-file names are appended to.
        region_key: Index key of the region to serve (e.g. ``"Asia"``).
        cache_ttl_s: Seconds a built collection stays fresh.
        simplify_tolerance: RDP tolerance in coordinate units.
        fetch_timeout_s: Per-request HTTP timeout in seconds.
    """

    index_url: str = DEFAULT_INDEX_URL
    base_url: str = DEFAULT_BASE_URL
    region_key: str = DEFAULT_REGION_KEY
    cache_ttl_s: float = DEFAULT_CACHE_TTL_S
    simplify_tolerance: float = DEFAULT_SIMPLIFY_TOLERANCE
    fetch_timeout_s: float = DEFAULT_FETCH_TIMEOUT_S

    @classmethod
    def from_env(cls) -> ServiceConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range or a
                required string value is empty.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``BOUNDARY_CACHE_TTL_S=abc``).
        """
        config = cls(
            index_url=os.getenv(ENV_INDEX_URL, DEFAULT_INDEX_URL),
            base_url=os.getenv(ENV_BASE_URL, DEFAULT_BASE_URL),
            region_key=os.getenv(ENV_REGION_KEY, DEFAULT_REGION_KEY),
            cache_ttl_s=float(os.getenv(ENV_CACHE_TTL_S, str(DEFAULT_CACHE_TTL_S))),
            simplify_tolerance=float(
                os.getenv(ENV_SIMPLIFY_TOLERANCE, str(DEFAULT_SIMPLIFY_TOLERANCE))
            ),
            fetch_timeout_s=float(os.getenv(ENV_FETCH_TIMEOUT_S, str(DEFAULT_FETCH_TIMEOUT_S))),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration ranges.  Raises ``ConfigValidationError``."""
        _validate(self)

    def file_url(self, filename: str) -> str:
        """Resolve a per-region filename against ``base_url``."""
        base = self.base_url if self.base_url.endswith("/") else f"{self.base_url}/"
        return f"{base}{filename}"


def _validate(config: ServiceConfig) -> None:
    if not (math.isfinite(config.cache_ttl_s) and config.cache_ttl_s > 0):
        raise ConfigValidationError(
            ENV_CACHE_TTL_S,
            config.cache_ttl_s,
            "must be a finite number > 0 (seconds)",
        )

    if not (math.isfinite(config.simplify_tolerance) and config.simplify_tolerance >= 0):
        raise ConfigValidationError(
            ENV_SIMPLIFY_TOLERANCE,
            config.simplify_tolerance,
            "must be a finite number >= 0 (coordinate units)",
        )

    if not (math.isfinite(config.fetch_timeout_s) and config.fetch_timeout_s > 0):
        raise ConfigValidationError(
            ENV_FETCH_TIMEOUT_S,
            config.fetch_timeout_s,
            "must be a finite number > 0 (seconds)",
        )

    for key, url in ((ENV_INDEX_URL, config.index_url), (ENV_BASE_URL, config.base_url)):
        if not url.startswith(_URL_SCHEMES):
            raise ConfigValidationError(key, url, "must be an http(s) URL")

    if not config.region_key:
        raise ConfigValidationError(
            ENV_REGION_KEY,
            config.region_key,
            "must not be empty",
        )
