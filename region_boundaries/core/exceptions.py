"""Unified service exception taxonomy.

Every domain exception inherits from ``BoundaryServiceError`` and
carries structured context fields that let the calling HTTP layer
decide on a status code, a retry, or an alert without string matching.

Taxonomy categories
-------------------
- ``ValidationError`` : configuration/input violations, never retryable.
- anything else       : ``"transient"`` when ``retryable`` (network,
  throttling, upstream 5xx), otherwise ``"permanent"``.

Malformed geometry inside an upstream document is *not* an error: the
shape predicates in ``region_boundaries.geometry.validation`` return
``False`` and the offending value is skipped or passed through.

Every exception exposes ``to_error_dict()`` for a stable structured
error payload suitable for logging and error responses.
"""

from __future__ import annotations


class BoundaryServiceError(Exception):
    """Base exception for all boundary-service errors.

    Attributes:
        message: Human-readable error description.
        stage: Stage where the error occurred
            (e.g. ``"config"``, ``"fetch"``).
        code: Machine-readable error code (e.g. ``"UPSTREAM_FETCH_FAILED"``).
        retryable: Whether a later attempt may succeed.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category from the class and ``retryable``."""
        if isinstance(self, ValidationError):
            return "validation"
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
        }


# ---------------------------------------------------------------------------
# Category base class
# ---------------------------------------------------------------------------


class ValidationError(BoundaryServiceError):
    """Configuration or input validation failure. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]

