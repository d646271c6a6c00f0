"""
Structured error types for squishydb.

Every error raised by the mapping engine extends :class:`SquishyError`, which
carries a category, a context mapping and an optional chained cause so that
failures can be logged as structured events instead of bare strings.

Manifesto:
    - **Typed hierarchy:** configuration, schema, connection, execution and
      marshalling failures are distinct types
    - **Fail fast on programmer errors:** ``SchemaError`` and
      ``ConfigurationError`` are always raised
    - **Contain backend failures:** ``ExecutionError`` and
      ``DatabaseConnectionError`` are logged by the engine and reported
      through its normal return values
    - **Error chaining:** the driver exception is preserved as ``cause``

Architecture:
    ::

        ┌────────────────────────────────────────────────────────────┐
        │                       SquishyError                          │
        │            (category, context, cause, to_dict)              │
        ├────────────────────────────────────────────────────────────┤
        │                                                             │
        │  ConfigurationError      SchemaError        MarshalError    │
        │  (CONFIG)                (SCHEMA)           (MARSHAL)       │
        │       │                                                     │
        │  MissingConfigError      DatabaseConnectionError            │
        │  InvalidConfigError      (CONNECTION)                       │
        │                                                             │
        │                          ExecutionError                     │
        │                          (EXECUTION)                        │
        └────────────────────────────────────────────────────────────┘

Examples:
    >>> error = SchemaError("No primary key", table="customer")
    >>> error.category
    <ErrorCategory.SCHEMA: 'SCHEMA'>
    >>> error.to_dict()["context"]
    {'table': 'customer'}

Guardrails:
    ❌ DON'T: Raise ExecutionError out of a CRUD call
    ✅ DO: Let the engine log it and disable itself

    ❌ DON'T: Swallow the driver exception
    ✅ DO: Pass it as cause= for error chaining

Tags:
    error-handling, exception-hierarchy, error-context, squishydb

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories used for routing and log filtering."""

    CONFIG = "CONFIG"             # Builder / settings problems
    SCHEMA = "SCHEMA"             # Record declaration problems
    CONNECTION = "CONNECTION"     # Initial connect failures
    EXECUTION = "EXECUTION"       # Statement / query failures
    MARSHAL = "MARSHAL"           # Row <-> record conversion
    INTERNAL = "INTERNAL"


class SquishyError(Exception):
    """
    Base exception for all squishydb errors.

    Subclasses set ``default_category``; the category can still be
    overridden per instance. Keyword arguments that are not part of the
    signature are stored in :attr:`context` and rendered by
    :meth:`to_dict`.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        cause: BaseException | None = None,
        **context: Any,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context: dict[str, Any] = dict(context)
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SquishyError:
        """Add context to this error (fluent API)."""
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigurationError(SquishyError):
    """
    Bad or missing builder parameters, unknown backend type, missing driver.

    Never recoverable at runtime - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG


class MissingConfigError(ConfigurationError):
    """A required builder / settings field is missing."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Missing required configuration: {key}", key=key)


class InvalidConfigError(ConfigurationError):
    """A builder / settings field has an unusable value."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}", key=key)


# =============================================================================
# SCHEMA ERRORS
# =============================================================================


class SchemaError(SquishyError):
    """
    Record declaration error detected at table-definition time.

    Raised for a missing or duplicated primary key, a foreign field without
    reference metadata, or an identifier that cannot be used in DDL.
    """

    default_category = ErrorCategory.SCHEMA


# =============================================================================
# BACKEND ERRORS
# =============================================================================


class DatabaseConnectionError(SquishyError):
    """Initial connection to the backend failed."""

    default_category = ErrorCategory.CONNECTION


class ExecutionError(SquishyError):
    """A statement or query failed while executing."""

    default_category = ErrorCategory.EXECUTION


# =============================================================================
# MARSHALLING ERRORS
# =============================================================================


class MarshalError(SquishyError):
    """A declared, non-ignored field is absent from a returned row/document."""

    default_category = ErrorCategory.MARSHAL


__all__ = [
    "ErrorCategory",
    "SquishyError",
    "ConfigurationError",
    "MissingConfigError",
    "InvalidConfigError",
    "SchemaError",
    "DatabaseConnectionError",
    "ExecutionError",
    "MarshalError",
]
