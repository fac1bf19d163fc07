"""Error codes and error types for the skin engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for skin loading and theming."""

    # Document errors
    SYNTAX_ERROR = auto()
    SCHEMA_ERROR = auto()
    DOCUMENT_MISSING = auto()

    # Value resolution errors
    UNRESOLVED_TOKEN = auto()
    INVALID_VARIABLE = auto()
    COLOR_FORMAT = auto()
    INVALID_BOOLEAN = auto()

    # Layout errors
    UNKNOWN_COMPONENT_ID = auto()
    VARIANT_LIST_EMPTY = auto()

    # Runtime errors
    MISSING_ASSET = auto()
    CLUSTERING_DEGENERATE = auto()
    RELOAD_FAILED = auto()


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.SYNTAX_ERROR: "The document is not valid TOML.",
    ErrorCode.SCHEMA_ERROR: "A field has the wrong shape; its default was used.",
    ErrorCode.DOCUMENT_MISSING: "The skin document could not be found or read.",
    ErrorCode.UNRESOLVED_TOKEN: "A token reference could not be resolved.",
    ErrorCode.INVALID_VARIABLE: "A variable is not a number; 0 was used.",
    ErrorCode.COLOR_FORMAT: "Unsupported color format; the default color was used.",
    ErrorCode.INVALID_BOOLEAN: "Unrecognized boolean value; the default was used.",
    ErrorCode.UNKNOWN_COMPONENT_ID: "Unknown layout component; the node was skipped.",
    ErrorCode.VARIANT_LIST_EMPTY: "The layout declares no usable variants.",
    ErrorCode.MISSING_ASSET: "A referenced asset file was not found.",
    ErrorCode.CLUSTERING_DEGENERATE: "Artwork has too few distinct colors for a gradient.",
    ErrorCode.RELOAD_FAILED: "Skin reload failed; the previous skin is still active.",
}


@dataclass(eq=False)
class SkinError(Exception):
    """Base exception for the skin engine with error code and context."""

    code: ErrorCode
    message: str = ""
    path: Path | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.message:
            self.message = ERROR_MESSAGES.get(self.code, "An unexpected error occurred.")

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f" ({self.path})")
        if self.details:
            details_str = " | ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f" [{details_str}]")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging or UI display."""
        return {
            "code": self.code.name,
            "message": self.message,
            "path": str(self.path) if self.path else None,
            "details": self.details,
        }


class ColorFormatError(SkinError):
    """Raised when a color literal is not in a supported form."""

    def __init__(self, value: str, reason: str = "") -> None:
        message = f"Unsupported color {value!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(ErrorCode.COLOR_FORMAT, message=message, details={"value": value})
        self.value = value


class InvalidBooleanError(SkinError):
    """Raised when a value is not one of the recognized boolean literals."""

    def __init__(self, value: object) -> None:
        super().__init__(
            ErrorCode.INVALID_BOOLEAN,
            message=f"Not a boolean: {value!r}",
            details={"value": value},
        )
        self.value = value


class DocumentSyntaxError(SkinError):
    """Raised when a skin document is not well-formed TOML."""

    def __init__(
        self,
        reason: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if line is not None:
            details["line"] = line
        if column is not None:
            details["column"] = column
        super().__init__(
            ErrorCode.SYNTAX_ERROR,
            message=f"Syntax error: {reason}",
            path=path,
            details=details,
        )
        self.line = line
        self.column = column


class DocumentMissingError(SkinError):
    """Raised when a skin document is absent or unreadable."""

    def __init__(self, path: Path, reason: str = "") -> None:
        message = f"Document not available: {path.name}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(ErrorCode.DOCUMENT_MISSING, message=message, path=path)


class VariantListEmptyError(SkinError):
    """Raised when a layout has no variants to select from."""

    def __init__(self, path: Path | None = None) -> None:
        super().__init__(ErrorCode.VARIANT_LIST_EMPTY, path=path)


class SkinBuildError(SkinError):
    """Raised when a strict skin build has to be abandoned as a whole."""

    def __init__(self, cause: SkinError, failing_path: Path | None) -> None:
        super().__init__(
            cause.code,
            message=cause.message,
            path=failing_path,
            details=dict(cause.details),
        )
        self.cause = cause


class ClusteringDegenerateError(SkinError):
    """Raised when artwork yields fewer than two distinct color clusters."""

    def __init__(self, distinct: int) -> None:
        super().__init__(ErrorCode.CLUSTERING_DEGENERATE, details={"distinct": distinct})
        self.distinct = distinct
