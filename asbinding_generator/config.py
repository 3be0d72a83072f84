#!/usr/bin/env python3
"""
Conventions and tunables for the AngelScript type mapping.

The defaults reproduce the conventions of the Urho3D engine headers and its
AngelScript glue helpers (CScriptArray, VectorToArray, ArrayToVector, ...).
Changing them changes the shape of generated bindings, so treat every value
here as part of the compatibility contract.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple


# Header directory prefix -> compile-time guard macro. Wrappers for
# declarations under these directories are emitted inside #ifdef/#endif.
DEFAULT_GUARD_MACROS: Tuple[Tuple[str, str], ...] = (
    ("Database/", "URHO3D_DATABASE"),
    ("IK/", "URHO3D_IK"),
    ("Navigation/", "URHO3D_NAVIGATION"),
    ("Network/", "URHO3D_NETWORK"),
    ("Physics/", "URHO3D_PHYSICS"),
    ("Urho2D/", "URHO3D_URHO2D"),
)


@dataclass(frozen=True)
class ConversionConfig:
    """
    Settings for the type resolver and the variable converter.
    """
    # Spellings of the string-sequence type. Only the first one (the
    # template spelling) is accepted as a const-reference parameter.
    string_sequence_names: Tuple[str, ...] = ("Vector<String>", "StringVector")
    # Container templates, keyed by convention
    value_sequence_template: str = "PODVector"
    handle_sequence_template: str = "Vector"
    single_owner_template: str = "SharedPtr"
    # Non-copyable engine context, only valid as a constructor's first argument
    context_type: str = "Context"
    # Element types whose single reference can not be handed to the script runtime
    ownership_denylist: FrozenSet[str] = frozenset({"WorkItem"})
    # `using` aliases accepted regardless of the alias rule
    alias_whitelist: FrozenSet[str] = frozenset({"VariantMap"})
    # Bitmask enum wrappers follow this naming suffix
    flags_suffix: str = "Flags"
    # Documentation markers
    no_bind_marker: str = "NO_BIND"
    fake_ref_marker: str = "FAKE_REF"
    # Suffix for the CScriptArray* parameter that replaces a container parameter
    converted_param_suffix: str = "_conv"
    script_array_type: str = "CScriptArray*"
    guard_macros: Tuple[Tuple[str, str], ...] = field(default=DEFAULT_GUARD_MACROS)

    @property
    def string_sequence_template_name(self) -> str:
        return self.string_sequence_names[0]

    def guard_macro_for_header(self, header_file: Optional[str]) -> Optional[str]:
        """
        Return the #ifdef macro guarding declarations from `header_file`, if any.

        Header paths are matched on their directory component relative to the
        engine source root, e.g. '../Physics/RigidBody.h' or
        'Source/Urho3D/Physics/RigidBody.h' both map to URHO3D_PHYSICS.
        """
        if not header_file:
            return None
        normalized = header_file.replace("\\", "/")
        for prefix, macro in self.guard_macros:
            if normalized.startswith(prefix) or f"/{prefix}" in normalized:
                return macro
        return None


DEFAULT_CONFIG = ConversionConfig()


__all__ = [
    "ConversionConfig",
    "DEFAULT_CONFIG",
    "DEFAULT_GUARD_MACROS",
]
