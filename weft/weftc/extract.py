# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type metadata extraction from a module's declaration tree.

The driver runs a `TypeExtractor` twice per module: right after parsing
(`is_resolved=False`, definitions as written) and after whole-program
resolution (`is_resolved=True`, resolved definitions). Only user-visible types
are collected: declarations of the internal support modules are skipped, and
so are modules that were constructed in memory or are not weft source.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from weft.weftc.compiler.resolve import PRELUDE_MODULE, RUNTIME_MODULE
from weft.weftc.compiler.unit import ModuleUnit
from weft.weftc.core.span import Span
from weft.weftc.core.types_core import qualified_id
from weft.weftc.parser.ast import Decl, DeclKind, ModuleAst, walk
from weft.weftc.registry import TypeInfo

# Compiler prelude and runtime support modules; never user-visible.
INTERNAL_MODULES = frozenset({PRELUDE_MODULE, RUNTIME_MODULE, "host_rt"})

SOURCE_EXTENSION = ".weft"


def wants_unit(unit: ModuleUnit) -> bool:
	"""True if `unit` contributes user-visible types."""
	if unit.extension != SOURCE_EXTENSION:
		return False
	if unit.in_memory:
		return False
	return unit.module_id not in INTERNAL_MODULES


@dataclass
class TypeExtractor:
	module_id: str
	path: Optional[Path]
	is_resolved: bool

	@classmethod
	def for_unit(cls, unit: ModuleUnit, *, is_resolved: bool) -> "TypeExtractor":
		return cls(module_id=unit.module_id, path=unit.path, is_resolved=is_resolved)

	def collect(self, module: ModuleAst) -> List[TypeInfo]:
		"""Walk `module` once and return one record per type declaration."""
		if self.path is None or self.module_id in INTERNAL_MODULES:
			return []
		out: List[TypeInfo] = []
		for node in walk(module):
			if not isinstance(node, Decl):
				continue
			kind = node.kind
			if kind is DeclKind.TYPE or kind is DeclKind.ENUM or kind is DeclKind.UNIT:
				out.append(self._info(node))
			elif kind is DeclKind.OTHER:
				continue
			else:
				raise AssertionError(f"unhandled declaration kind {kind}")
		return out

	def _info(self, decl: Decl) -> TypeInfo:
		definition = decl.resolved if self.is_resolved else decl.definition
		assert definition is not None, f"{decl.name}: missing {'resolved' if self.is_resolved else 'parsed'} definition"
		type_id = qualified_id(self.module_id, decl.name)
		# Keep the declaration's id and the definition's name in sync.
		assert definition.name == type_id, (definition.name, type_id)
		return TypeInfo(
			id=type_id,
			type=definition,
			linkage=decl.linkage,
			is_resolved=self.is_resolved,
			module_id=self.module_id,
			module_path=self.path,
			location=Span.from_loc(decl.loc, file=self.path),
			decl_kind=decl.kind,
		)


__all__ = ["TypeExtractor", "INTERNAL_MODULES", "SOURCE_EXTENSION", "wants_unit"]
