#!/usr/bin/env python3
"""
Rejection taxonomy for the AngelScript binding generator.

Every error here is a static, deterministic "this signature can not be bound"
outcome. Drivers catch `BindingError` per signature, skip that binding and keep
going; none of these should ever abort a whole generation run.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class BindingError(Exception):
    """
    Base class for all per-signature rejections.

    `type_spelling` is the C++ spelling of the offending type (may be empty when
    the rejection is not about a single type).
    """

    def __init__(self, message: str, type_spelling: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.type_spelling = type_spelling

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self):
        return {
            "kind": self.kind,
            "type": self.type_spelling,
            "message": self.message,
        }


class UnsupportedQualifierShape(BindingError):
    """Rvalue reference, double pointer or reference to pointer."""


class UnbindableReason(Enum):
    UNKNOWN = "unknown"
    INTERNAL = "internal"
    ALIAS = "alias"
    TEMPLATE_RESIDUE = "template residue"
    SCOPED = "scoped"
    VOID_POINTER = "void pointer"


class UnbindableType(BindingError):
    def __init__(self, message: str, type_spelling: str = "", reason: UnbindableReason = UnbindableReason.UNKNOWN) -> None:
        super().__init__(message, type_spelling)
        self.reason = reason

    def to_dict(self):
        d = super().to_dict()
        d["reason"] = self.reason.value
        return d


class MarkedNoBind(BindingError):
    pass


class DisallowedContextUsage(BindingError):
    pass


class UnsupportedOwnershipTransfer(BindingError):
    pass


class UnsupportedPointerOwnership(BindingError):
    pass


class UnsupportedDefaultValue(BindingError):
    def __init__(self, message: str, type_spelling: str = "", default_value: Optional[str] = None) -> None:
        super().__init__(message, type_spelling)
        self.default_value = default_value


class UnknownPrimitiveError(LookupError):
    """
    Raised only by the strict primitive lookup. Not a BindingError: a miss means
    "not a primitive" and callers fall back to the type's own name.
    """


__all__ = [
    "BindingError",
    "UnsupportedQualifierShape",
    "UnbindableReason",
    "UnbindableType",
    "MarkedNoBind",
    "DisallowedContextUsage",
    "UnsupportedOwnershipTransfer",
    "UnsupportedPointerOwnership",
    "UnsupportedDefaultValue",
    "UnknownPrimitiveError",
]
