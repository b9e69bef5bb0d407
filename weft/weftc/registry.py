# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type metadata registry.

Maps fully-qualified type names to `TypeInfo` records gathered by the two
extraction passes, and keeps the list of public enums that are exported to the
host automatically. Insertion order is preserved (a replaced record keeps its
original position) because glue generation walks the registry in order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from weft.weftc.core.span import Span
from weft.weftc.core.types_core import Linkage, TypeDef, TypeKind
from weft.weftc.errors import TypeNameCollision, UnknownType, WrongKind
from weft.weftc.parser.ast import DeclKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TypeInfo:
	"""Metadata about one declared type."""

	id: str  # fully-qualified name, `module::Name`
	type: TypeDef
	linkage: Linkage
	is_resolved: bool  # False before whole-program resolution, True after
	module_id: str
	module_path: Optional[Path]
	location: Span = field(default_factory=Span)
	decl_kind: DeclKind = DeclKind.TYPE

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"kind": self.type.kind.name.lower(),
			"linkage": self.linkage.value,
			"is_resolved": self.is_resolved,
			"module_id": self.module_id,
			"module_path": str(self.module_path) if self.module_path is not None else None,
			"line": self.location.line,
		}


class TypeRegistry:
	def __init__(self, *, strict_names: bool = False) -> None:
		self._types: Dict[str, TypeInfo] = {}
		self._public_enums: List[TypeInfo] = []
		self._strict_names = strict_names
		self._collisions: Set[Tuple[str, FrozenSet[Optional[Path]]]] = set()

	def __len__(self) -> int:
		return len(self._types)

	def __contains__(self, type_id: object) -> bool:
		return type_id in self._types

	def record(self, info: TypeInfo) -> bool:
		"""
		Insert or replace the record for `info.id`.

		Returns False if the record was dropped: an unresolved record never
		replaces a resolved one. A record coming from another module file than
		the current one is a name collision, reported once per pair of files:
		a warning (the later definition wins) or, if the registry is strict,
		`TypeNameCollision`.
		"""
		prev = self._types.get(info.id)
		if prev is not None:
			if prev.module_path != info.module_path:
				self._collision(prev, info)
			if prev.is_resolved and not info.is_resolved:
				logger.debug("  keeping resolved record for '%s'", info.id)
				return False
		self._types[info.id] = info
		return True

	def _collision(self, prev: TypeInfo, info: TypeInfo) -> None:
		key = (info.id, frozenset((prev.module_path, info.module_path)))
		if key in self._collisions:
			return
		msg = f"type '{info.id}' redefined by {info.module_path} (first defined in {prev.module_path})"
		if self._strict_names:
			raise TypeNameCollision(message=msg, path=str(info.module_path) if info.module_path else None)
		self._collisions.add(key)
		logger.warning("%s; later definition wins", msg)

	def add_public_enum(self, info: TypeInfo) -> None:
		"""Add to the auto-export list; an enum re-read from the same file is listed once."""
		for e in self._public_enums:
			if e.id == info.id and e.module_path == info.module_path:
				return
		self._public_enums.append(info)

	@property
	def public_enums(self) -> List[TypeInfo]:
		return list(self._public_enums)

	def lookup(self, type_id: str, kind: TypeKind | None = None) -> TypeInfo:
		"""
		Return the record for `type_id`.

		Raises `UnknownType` if there is none, and `WrongKind` if `kind` is given
		and the recorded type is not of that kind.
		"""
		info = self._types.get(type_id)
		if info is None:
			raise UnknownType.for_id(type_id)
		if kind is not None and not info.type.is_a(kind):
			raise WrongKind.for_id(type_id)
		return info

	def types(self, exported_only: bool = False, exported_ids: Iterable[str] = ()) -> List[TypeInfo]:
		"""
		All records in insertion order; with `exported_only`, only those named in
		`exported_ids` or auto-exported as public enums.
		"""
		if not exported_only:
			return list(self._types.values())
		wanted = set(exported_ids) | {e.id for e in self._public_enums}
		return [t for t in self._types.values() if t.id in wanted]

	def clear(self) -> None:
		self._types.clear()
		self._public_enums.clear()
		self._collisions.clear()


__all__ = ["TypeInfo", "TypeRegistry"]
