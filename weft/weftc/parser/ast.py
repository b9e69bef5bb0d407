# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration tree produced by the weft parser.

Top-level declarations are a tagged variant: every `Decl` carries a `DeclKind`
and consumers match on the tag instead of on Python subclasses. `walk` gives a
depth-first pre-order traversal that yields each node exactly once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, List, Optional, Union

from weft.weftc.core.types_core import Linkage, TypeDef, TypeRef


class DeclKind(Enum):
	"""Tag of a top-level declaration."""

	TYPE = auto()  # struct or alias declaration
	ENUM = auto()
	UNIT = auto()
	OTHER = auto()  # imports, constants


TYPE_DECL_KINDS = frozenset({DeclKind.TYPE, DeclKind.ENUM, DeclKind.UNIT})


@dataclass(frozen=True)
class Located:
	line: int
	column: int


@dataclass
class FieldNode:
	name: str
	type_ref: TypeRef
	loc: Optional[Located] = None


@dataclass
class Decl:
	"""
	One top-level declaration.

	For type declarations (`TYPE`, `ENUM`, `UNIT`) `definition` holds the type as
	written; the resolver fills in `resolved` once the whole program is known.
	For `OTHER`, `other` names what it is ("import" or "const") and `value`
	holds a constant's value.
	"""

	kind: DeclKind
	name: str
	loc: Optional[Located] = None
	linkage: Linkage = Linkage.PRIVATE
	definition: Optional[TypeDef] = None
	resolved: Optional[TypeDef] = None
	fields: List[FieldNode] = field(default_factory=list)
	other: Optional[str] = None
	value: Optional[int] = None

	@property
	def is_type_decl(self) -> bool:
		return self.kind in TYPE_DECL_KINDS


@dataclass
class ModuleAst:
	name: str
	decls: List[Decl] = field(default_factory=list)
	loc: Optional[Located] = None

	@property
	def imports(self) -> List[Decl]:
		return [d for d in self.decls if d.kind is DeclKind.OTHER and d.other == "import"]

	@property
	def type_decls(self) -> List[Decl]:
		return [d for d in self.decls if d.is_type_decl]


Node = Union[ModuleAst, Decl, FieldNode]


def walk(module: ModuleAst) -> Iterator[Node]:
	"""Depth-first pre-order walk over a module's declaration tree."""
	yield module
	for decl in module.decls:
		yield decl
		for fld in decl.fields:
			yield fld


__all__ = [
	"DeclKind",
	"TYPE_DECL_KINDS",
	"Located",
	"FieldNode",
	"Decl",
	"ModuleAst",
	"Node",
	"walk",
]
