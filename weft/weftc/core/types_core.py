# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Minimal type core shared by the parser, the resolver and the driver.

A `TypeDef` is the structural definition of a declared type. The driver treats
it as an opaque payload: it stores it in the registry and only ever inspects
its kind (`TypeDef.is_a`). References to other types are `TypeRef`s; before
whole-program resolution they carry only the spelling found in the source,
afterwards `resolved` holds the fully-qualified target and `kind` its kind.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Callable, Iterator, Optional, Tuple


class TypeKind(Enum):
	"""Kinds of types understood by the type core."""

	SCALAR = auto()
	ENUM = auto()
	UNIT = auto()
	STRUCT = auto()
	ALIAS = auto()
	VECTOR = auto()


class Linkage(Enum):
	"""Visibility of a declaration."""

	PRIVATE = "private"
	PUBLIC = "public"


# Builtin scalar types every module can name without an import.
BUILTIN_SCALARS = frozenset(
	{
		"bool",
		"bytes",
		"string",
		"real",
		"int8",
		"int16",
		"int32",
		"int64",
		"uint8",
		"uint16",
		"uint32",
		"uint64",
	}
)

# Builtin generic container types (name -> arity).
BUILTIN_GENERICS = {"vector": 1}

SCOPE_SEP = "::"


def qualified_id(module_id: str, local: str) -> str:
	return f"{module_id}{SCOPE_SEP}{local}"


def split_qualified(name: str) -> tuple[str | None, str]:
	"""Split `mod::Name` into (`mod`, `Name`); unqualified names yield (None, name)."""
	if SCOPE_SEP not in name:
		return None, name
	head, _, tail = name.rpartition(SCOPE_SEP)
	return head, tail


@dataclass(frozen=True)
class TypeRef:
	"""Reference to a type by name, optionally resolved."""

	name: str
	args: Tuple["TypeRef", ...] = ()
	resolved: Optional[str] = None
	kind: Optional[TypeKind] = None

	@property
	def is_resolved(self) -> bool:
		return self.resolved is not None and all(a.is_resolved for a in self.args)

	def render(self) -> str:
		base = self.resolved or self.name
		if not self.args:
			return base
		return f"{base}<{', '.join(a.render() for a in self.args)}>"


@dataclass(frozen=True)
class FieldDef:
	name: str
	type_ref: TypeRef


@dataclass(frozen=True)
class EnumLabel:
	name: str
	value: int


@dataclass(frozen=True)
class TypeDef:
	"""
	Structural definition of a declared type.

	`name` is the fully-qualified id of the declaration. Which of the payload
	fields is meaningful depends on `kind`: `fields` for units and structs,
	`labels` for enums, `target` for aliases.
	"""

	kind: TypeKind
	name: str
	fields: Tuple[FieldDef, ...] = ()
	labels: Tuple[EnumLabel, ...] = ()
	target: Optional[TypeRef] = None

	def is_a(self, kind: TypeKind) -> bool:
		"""
		Return True if this type is of `kind`.

		A resolved alias answers for the kind of the type it stands for.
		"""
		if self.kind is kind:
			return True
		if self.kind is TypeKind.ALIAS and self.target is not None:
			return self.target.kind is kind
		return False

	def refs(self) -> Iterator[TypeRef]:
		"""Yield the top-level type references of this definition."""
		for f in self.fields:
			yield f.type_ref
		if self.target is not None:
			yield self.target

	@property
	def is_resolved(self) -> bool:
		return all(r.is_resolved for r in self.refs())

	def map_refs(self, fn: Callable[[TypeRef], TypeRef]) -> "TypeDef":
		"""Return a copy with every top-level reference replaced by `fn(ref)`."""
		return replace(
			self,
			fields=tuple(FieldDef(name=f.name, type_ref=fn(f.type_ref)) for f in self.fields),
			target=fn(self.target) if self.target is not None else None,
		)

	def label(self, name: str) -> EnumLabel | None:
		for lbl in self.labels:
			if lbl.name == name:
				return lbl
		return None


__all__ = [
	"TypeKind",
	"Linkage",
	"TypeRef",
	"FieldDef",
	"EnumLabel",
	"TypeDef",
	"BUILTIN_SCALARS",
	"BUILTIN_GENERICS",
	"SCOPE_SEP",
	"qualified_id",
	"split_qualified",
]
