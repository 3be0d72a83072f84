#!/usr/bin/env python3
"""
Symbol catalog: the read-only set of classes, enums and `using` aliases the
type resolver consults.

The catalog is built once (from libclang traversal, JSON, or directly from
model objects) and never mutated afterwards. It is passed explicitly to every
resolver/converter; there is no process-wide registry.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .config import DEFAULT_CONFIG, ConversionConfig
from .models import ClassInfo, EnumInfo, FieldInfo, FunctionInfo, UsingInfo
from .primitives import is_primitive

logger = logging.getLogger(__name__)


class SymbolCatalog:
    """
    Immutable lookup tables for bindability decisions.

    Build with:
      - SymbolCatalog(classes=..., enums=..., usings=...)
      - SymbolCatalog.from_dict(data) / load_catalog(path)
    """

    def __init__(
        self,
        classes: Iterable[ClassInfo] = (),
        enums: Iterable[EnumInfo] = (),
        usings: Iterable[UsingInfo] = (),
        config: Optional[ConversionConfig] = None,
    ) -> None:
        by_name: Dict[str, ClassInfo] = {}
        by_id: Dict[str, ClassInfo] = {}
        for ci in classes:
            if ci.name in by_name:
                logger.debug("Duplicate class '%s' in catalog; keeping first definition", ci.name)
                continue
            by_name[ci.name] = ci
            if ci.id:
                by_id[ci.id] = ci
        self._classes_by_name: Mapping[str, ClassInfo] = MappingProxyType(by_name)
        self._classes_by_id: Mapping[str, ClassInfo] = MappingProxyType(by_id)
        self._enums: Mapping[str, EnumInfo] = MappingProxyType({e.name: e for e in enums})
        self._usings: Mapping[str, UsingInfo] = MappingProxyType({u.name: u for u in usings})
        self.config = config or DEFAULT_CONFIG

    # ---- Lookups ----

    @property
    def classes(self) -> Mapping[str, ClassInfo]:
        return self._classes_by_name

    @property
    def enums(self) -> Mapping[str, EnumInfo]:
        return self._enums

    @property
    def usings(self) -> Mapping[str, UsingInfo]:
        return self._usings

    def lookup_class_by_name(self, name: str) -> Optional[ClassInfo]:
        return self._classes_by_name.get(name)

    def lookup_class_by_id(self, class_id: str) -> Optional[ClassInfo]:
        return self._classes_by_id.get(class_id)

    def lookup_enum(self, name: str) -> Optional[EnumInfo]:
        return self._enums.get(name)

    def is_type_alias(self, name: str) -> bool:
        return name in self._usings

    def is_known_type_name(self, name: str) -> bool:
        """
        Primitives (and void), catalog classes and enums, names following the
        flags convention, and the whitelisted aliases.
        """
        if name == "void" or is_primitive(name):
            return True
        if name in self.config.alias_whitelist:
            return True
        if name in self._classes_by_name or name in self._enums:
            return True
        return name.endswith(self.config.flags_suffix)

    # ---- Serialization ----

    def to_dict(self) -> Dict[str, Any]:
        return {
            "classes": [c.to_dict() for c in self._classes_by_name.values()],
            "enums": [e.to_dict() for e in self._enums.values()],
            "usings": [u.to_dict() for u in self._usings.values()],
        }

    @staticmethod
    def from_dict(d: Dict[str, Any], config: Optional[ConversionConfig] = None) -> SymbolCatalog:
        return SymbolCatalog(
            classes=[ClassInfo.from_dict(c) for c in d.get("classes", [])],
            enums=[EnumInfo.from_dict(e) for e in d.get("enums", [])],
            usings=[UsingInfo.from_dict(u) for u in d.get("usings", [])],
            config=config,
        )

    def __repr__(self) -> str:
        return (
            f"SymbolCatalog(classes={len(self._classes_by_name)}, "
            f"enums={len(self._enums)}, usings={len(self._usings)})"
        )


@dataclass
class BindingInputs:
    """Everything a generation run consumes: the catalog and the declarations to bind."""
    catalog: SymbolCatalog
    functions: List[FunctionInfo] = field(default_factory=list)
    fields: List[FieldInfo] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        d = self.catalog.to_dict()
        d["functions"] = [fn.to_dict() for fn in self.functions]
        d["fields"] = [fi.to_dict() for fi in self.fields]
        return d


def load_catalog(path: Union[str, Path], config: Optional[ConversionConfig] = None) -> BindingInputs:
    """
    Load a catalog and the declarations to bind from a JSON document:

        {
          "classes":   [{"name": "Node", "is_ref_counted": true, ...}],
          "enums":     [{"name": "CreateMode"}],
          "usings":    [{"name": "VariantMap", "target": "HashMap<StringHash, Variant>"}],
          "functions": [{"name": "GetChild", "kind": "INSTANCE", "class_name": "Node", ...}],
          "fields":    [{"name": "position_", "type": "Vector3", "class_name": "Ray"}]
        }
    """
    p = Path(path)
    try:
        with open(p, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise RuntimeError(f"Invalid catalog JSON in {p}: {e}") from e
    inputs = BindingInputs(
        catalog=SymbolCatalog.from_dict(data, config=config),
        functions=[FunctionInfo.from_dict(fd) for fd in data.get("functions", [])],
        fields=[FieldInfo.from_dict(fd) for fd in data.get("fields", [])],
    )
    logger.info(
        "Loaded %r, %d function(s) and %d field(s) from %s",
        inputs.catalog, len(inputs.functions), len(inputs.fields), p,
    )
    return inputs


__all__ = [
    "SymbolCatalog",
    "BindingInputs",
    "load_catalog",
]
