# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Whole-program type resolution.

Runs once all units of a compilation are parsed. Every type reference is bound
to a fully-qualified declaration (or a builtin) and annotated with the kind of
the type it finally denotes; aliases are followed, alias cycles are reported.
The result is stored in `Decl.resolved`; `Decl.definition` is left untouched.

Name lookup rules:
  - `Name` looks in the referencing module, then in the prelude;
  - `mod::Name` requires `mod` to be the referencing module, an imported module,
    the prelude or the runtime support module;
  - a private type is only visible inside its own module.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Set, Tuple

from weft.weftc.core.diagnostics import Diagnostic
from weft.weftc.core.span import Span
from weft.weftc.core.types_core import (
	BUILTIN_GENERICS,
	BUILTIN_SCALARS,
	Linkage,
	TypeDef,
	TypeKind,
	TypeRef,
	qualified_id,
	split_qualified,
)
from weft.weftc.parser.ast import Decl, Located
from .unit import ModuleUnit

PRELUDE_MODULE = "weft"
RUNTIME_MODULE = "weft_rt"


class _Resolver:
	def __init__(self, units: Sequence[ModuleUnit]) -> None:
		self.units = list(units)
		self.diagnostics: List[Diagnostic] = []
		self._decls: Dict[str, Tuple[Decl, ModuleUnit]] = {}
		self._alias_targets: Dict[str, Optional[str]] = {}
		self._kinds: Dict[str, Optional[TypeKind]] = {}
		self._reported_cycles: Set[str] = set()
		loaded = {u.module_id for u in self.units}
		self._implicit_modules = {PRELUDE_MODULE} | ({RUNTIME_MODULE} & loaded)
		for unit in self.units:
			for decl in unit.module.type_decls:
				self._decls[qualified_id(unit.module_id, decl.name)] = (decl, unit)

	def _error(self, message: str, unit: ModuleUnit, loc: Located | None) -> None:
		self.diagnostics.append(Diagnostic(message=message, phase="resolve", span=Span.from_loc(loc, file=unit.path)))

	def run(self) -> List[Diagnostic]:
		named: List[Tuple[Decl, TypeDef]] = []
		for unit in self.units:
			for decl in unit.module.type_decls:
				assert decl.definition is not None
				# Field refs report at the field, everything else at the declaration.
				locs = {id(f.type_ref): f.loc for f in decl.fields}

				def bind(ref: TypeRef, _unit: ModuleUnit = unit, _locs: dict = locs, _loc: Located | None = decl.loc) -> TypeRef:
					return self._bind_names(ref, _unit, _locs.get(id(ref)) or _loc)

				bound = decl.definition.map_refs(bind)
				if bound.kind is TypeKind.ALIAS:
					assert bound.target is not None
					self._alias_targets[bound.name] = bound.target.resolved
				named.append((decl, bound))
		for decl, bound in named:
			decl.resolved = bound.map_refs(self._with_kind)
		return self.diagnostics

	def _bind_names(self, ref: TypeRef, unit: ModuleUnit, loc: Located | None) -> TypeRef:
		args = tuple(self._bind_names(a, unit, loc) for a in ref.args)
		if ref.name in BUILTIN_GENERICS:
			arity = BUILTIN_GENERICS[ref.name]
			if len(args) != arity:
				self._error(f"type '{ref.name}' expects {arity} type argument(s), got {len(args)}", unit, loc)
				return TypeRef(name=ref.name, args=args)
			return TypeRef(name=ref.name, args=args, resolved=ref.name)
		if args:
			self._error(f"type '{ref.name}' does not take type arguments", unit, loc)
			return TypeRef(name=ref.name, args=args)
		if ref.name in BUILTIN_SCALARS:
			return TypeRef(name=ref.name, resolved=ref.name)
		module_id, local = split_qualified(ref.name)
		if module_id is None:
			candidates = [qualified_id(unit.module_id, local), qualified_id(PRELUDE_MODULE, local)]
		else:
			visible = {unit.module_id} | {imp.name for imp in unit.module.imports} | self._implicit_modules
			if module_id not in visible:
				self._error(f"module '{module_id}' is not imported into '{unit.module_id}'", unit, loc)
				return ref
			candidates = [ref.name]
		for fq in candidates:
			hit = self._decls.get(fq)
			if hit is None:
				continue
			target_decl, target_unit = hit
			if target_decl.linkage is Linkage.PRIVATE and target_unit.module_id != unit.module_id:
				self._error(f"type '{fq}' is private to module '{target_unit.module_id}'", unit, loc)
				return ref
			return TypeRef(name=ref.name, resolved=fq)
		self._error(f"unknown type '{ref.name}'", unit, loc)
		return ref

	def _with_kind(self, ref: TypeRef) -> TypeRef:
		args = tuple(self._with_kind(a) for a in ref.args)
		if ref.resolved is None:
			return TypeRef(name=ref.name, args=args)
		return TypeRef(name=ref.name, args=args, resolved=ref.resolved, kind=self._kind_of(ref.resolved, ()))

	def _kind_of(self, fq: str, stack: Tuple[str, ...]) -> Optional[TypeKind]:
		if fq in BUILTIN_SCALARS:
			return TypeKind.SCALAR
		if fq in BUILTIN_GENERICS:
			return TypeKind.VECTOR
		if fq in self._kinds:
			return self._kinds[fq]
		decl, unit = self._decls[fq]
		assert decl.definition is not None
		if decl.definition.kind is not TypeKind.ALIAS:
			kind: Optional[TypeKind] = decl.definition.kind
		elif fq in stack:
			if fq not in self._reported_cycles:
				self._reported_cycles.update(stack)
				self._error(f"alias cycle through '{fq}'", unit, decl.loc)
			return None
		else:
			target = self._alias_targets.get(fq)
			kind = self._kind_of(target, stack + (fq,)) if target is not None else None
		self._kinds[fq] = kind
		return kind


def resolve_program(units: Sequence[ModuleUnit]) -> List[Diagnostic]:
	"""Resolve all type declarations of `units` in place; returns diagnostics."""
	return _Resolver(units).run()


__all__ = ["resolve_program", "PRELUDE_MODULE", "RUNTIME_MODULE"]
