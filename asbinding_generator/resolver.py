#!/usr/bin/env python3
"""
Type resolver: decides whether a base type name can be exposed to AngelScript.

Decisions are total. `resolve()` never answers "unknown"; it returns either an
accepted Resolution or a rejected one carrying the specific reason.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .catalog import SymbolCatalog
from .errors import BindingError, MarkedNoBind, UnbindableReason, UnbindableType
from .models import ClassInfo, CppType


@dataclass(frozen=True)
class Resolution:
    name: str
    accepted: bool
    reason: Optional[UnbindableReason] = None
    no_bind: bool = False
    class_info: Optional[ClassInfo] = None

    def to_error(self, type_spelling: str) -> BindingError:
        """Exception matching this rejection."""
        if self.no_bind:
            return MarkedNoBind(
                f'Error: type "{self.name}" can not automatically bind because it has the NO_BIND mark',
                type_spelling,
            )
        reason = self.reason or UnbindableReason.UNKNOWN
        if reason == UnbindableReason.INTERNAL:
            message = f'Error: type "{type_spelling}" can not automatically bind because internal'
        elif reason == UnbindableReason.ALIAS:
            message = f'Using "{self.name}" can not automatically bind'
        else:
            message = f'Error: type "{type_spelling}" can not automatically bind'
        return UnbindableType(message, type_spelling, reason=reason)


class TypeResolver:
    def __init__(self, catalog: SymbolCatalog) -> None:
        self.catalog = catalog
        self.config = catalog.config

    def resolve(self, name: str) -> Resolution:
        if "::" in name:
            return Resolution(name, False, UnbindableReason.SCOPED)

        if not self.catalog.is_known_type_name(name):
            return Resolution(name, False, UnbindableReason.UNKNOWN)

        ci = self.catalog.lookup_class_by_name(name)
        if ci is not None and ci.is_internal:
            return Resolution(name, False, UnbindableReason.INTERNAL, class_info=ci)
        if ci is not None and ci.has_marker(self.config.no_bind_marker):
            return Resolution(name, False, no_bind=True, class_info=ci)

        if self.catalog.is_type_alias(name) and name not in self.config.alias_whitelist:
            return Resolution(name, False, UnbindableReason.ALIAS)

        return Resolution(name, True, class_info=ci)

    def is_bindable(self, name: str) -> bool:
        return self.resolve(name).accepted

    def require_bindable(self, cpp_type: CppType) -> Resolution:
        """Resolve the base name of `cpp_type`, raising the matching BindingError on rejection."""
        resolution = self.resolve(cpp_type.name)
        if not resolution.accepted:
            raise resolution.to_error(cpp_type.spelling)
        return resolution

    def supports_handles(self, name: str) -> bool:
        """
        A pointer to `name` can become a borrowed handle only if the class is
        reference counted or documented as FAKE_REF.
        """
        ci = self.catalog.lookup_class_by_name(name)
        if ci is None:
            return False
        return ci.is_ref_counted or ci.has_marker(self.config.fake_ref_marker)


__all__ = [
    "Resolution",
    "TypeResolver",
]
