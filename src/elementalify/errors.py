"""Error hierarchy for elementalify.

Conversion is total under the default configuration: malformed nodes are
dropped and recorded as :class:`~elementalify.models.ConversionWarning`
entries instead.  Errors are raised in two situations only:

* schema validation of a storage document
  (:class:`ElementalifyValidationError`), and
* conversion with a ``"raise"`` policy switched on in
  :class:`~elementalify.config.ElementalifyConfig`
  (:class:`ElementalifyUnsupportedNodeError`,
  :class:`ElementalifyDepthError`).

Every error carries ``code``, ``message``, ``context`` and ``cause``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable codes, one per concrete error class."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONVERSION_ERROR = "CONVERSION_ERROR"
    UNSUPPORTED_NODE = "UNSUPPORTED_NODE"
    DEPTH_EXCEEDED = "DEPTH_EXCEEDED"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class ElementalifyError(Exception):
    """Base exception for all elementalify errors.

    Parameters
    ----------
    code:
        An :class:`ErrorCode` (or any string) naming the error category.
    message:
        Human-readable description; also the ``str()`` of the error.
    context:
        Structured diagnostic data.  Each subclass documents its keys.
    cause:
        The wrapped exception, also set as ``__cause__``.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = dict(context) if context else {}
        self.cause: Exception | None = cause
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        parts = [f"code={self.code!r}", f"message={self.message!r}"]
        if self.context:
            parts.append(f"context={self.context!r}")
        return f"{type(self).__name__}({', '.join(parts)})"


class _PinnedCodeError(ElementalifyError):
    """An error whose code is fixed by the class (:attr:`code_value`)."""

    code_value: ClassVar[ErrorCode]

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(self.code_value, message, context, cause)


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class ElementalifyValidationError(_PinnedCodeError):
    """A storage document does not match the content schema.

    Context keys: ``errors`` (pydantic error dicts), ``error_count``.
    """

    code_value = ErrorCode.VALIDATION_ERROR


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------

class ElementalifyConversionError(_PinnedCodeError):
    """Base class for errors raised by a tree converter."""

    code_value = ErrorCode.CONVERSION_ERROR

    def __init__(
        self,
        message: str = "Conversion failed",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, context, cause)


class ElementalifyUnsupportedNodeError(ElementalifyConversionError):
    """A block carries a ``type`` tag no converter handles.

    Raised only with ``unknown_node_policy="raise"``.
    Context keys: ``node_type``, ``depth``.
    """

    code_value = ErrorCode.UNSUPPORTED_NODE


class ElementalifyDepthError(ElementalifyConversionError):
    """A tree nests deeper than ``max_depth``.

    Raised only with ``depth_overflow_policy="raise"``.
    Context keys: ``max_depth``, ``node_type``.
    """

    code_value = ErrorCode.DEPTH_EXCEEDED
