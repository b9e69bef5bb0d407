# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
lark-based parser for weft modules.

`parse_module(source)` returns a `ModuleAst`. Type declarations carry their
definition as written (`TypeDef` with unresolved `TypeRef`s); resolution is the
compiler's job.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree

from weft.weftc.core.types_core import (
	EnumLabel,
	FieldDef,
	Linkage,
	TypeDef,
	TypeKind,
	TypeRef,
	qualified_id,
)
from .ast import Decl, DeclKind, FieldNode, Located, ModuleAst

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	start="program",
	propagate_positions=True,
	maybe_placeholders=False,
)


class DeclError(ValueError):
	"""
	User-facing error for declarations the grammar accepts but the language does not.

	The compiler converts this into a parser-phase diagnostic.
	"""

	def __init__(self, message: str, *, loc: Located | None) -> None:
		super().__init__(message)
		self.loc = loc


def parse_module(source: str) -> ModuleAst:
	tree = _PARSER.parse(source)
	return _build_program(tree)


def _name(tree: Tree) -> str:
	return tree.data if isinstance(tree.data, str) else tree.data.value


def _loc(node: Tree | Token) -> Optional[Located]:
	if isinstance(node, Token):
		if node.line is None:
			return None
		return Located(line=node.line, column=node.column or 0)
	meta = node.meta
	if getattr(meta, "empty", True):
		return None
	return Located(line=meta.line, column=meta.column)


def _tokens(tree: Tree, kind: str) -> List[Token]:
	return [c for c in tree.children if isinstance(c, Token) and c.type == kind]


def _subtrees(tree: Tree) -> List[Tree]:
	return [c for c in tree.children if isinstance(c, Tree)]


def _build_program(tree: Tree) -> ModuleAst:
	module_name: Optional[str] = None
	module_loc: Optional[Located] = None
	decls: List[Decl] = []
	seen_names: dict[str, Decl] = {}
	for child in _subtrees(tree):
		kind = _name(child)
		if kind == "module_decl":
			module_name = _tokens(child, "NAME")[0].value
			module_loc = _loc(child)
			continue
		assert module_name is not None  # grammar puts module_decl first
		if kind == "import_decl":
			decl = _build_import(child)
		elif kind == "type_decl":
			decl = _build_type_decl(child, module_name)
		elif kind == "const_decl":
			decl = _build_const_decl(child)
		else:
			raise AssertionError(f"unexpected top-level node {kind}")
		if decl.kind is not DeclKind.OTHER or decl.other == "const":
			prev = seen_names.get(decl.name)
			if prev is not None:
				raise DeclError(f"duplicate declaration of '{decl.name}' in module '{module_name}'", loc=decl.loc)
			seen_names[decl.name] = decl
		decls.append(decl)
	assert module_name is not None
	return ModuleAst(name=module_name, decls=decls, loc=module_loc)


def _build_import(tree: Tree) -> Decl:
	name_tok = _tokens(tree, "NAME")[0]
	return Decl(kind=DeclKind.OTHER, name=name_tok.value, loc=_loc(tree), other="import")


def _build_linkage(tree: Tree) -> Linkage:
	for child in tree.children:
		if isinstance(child, Tree) and _name(child) == "linkage":
			tok = child.children[0]
			return Linkage.PUBLIC if tok.type == "PUBLIC" else Linkage.PRIVATE
	return Linkage.PRIVATE


def _build_const_decl(tree: Tree) -> Decl:
	return Decl(
		kind=DeclKind.OTHER,
		name=_tokens(tree, "NAME")[0].value,
		loc=_loc(tree),
		linkage=_build_linkage(tree),
		other="const",
		value=int(_tokens(tree, "INT")[0].value),
	)


def _build_type_decl(tree: Tree, module_name: str) -> Decl:
	loc = _loc(tree)
	local = _tokens(tree, "NAME")[0].value
	fq = qualified_id(module_name, local)
	linkage = _build_linkage(tree)
	body = next(c for c in _subtrees(tree) if _name(c) != "linkage")
	body_kind = _name(body)
	if body_kind == "enum_body":
		labels = _build_enum_labels(body, loc)
		return Decl(
			kind=DeclKind.ENUM,
			name=local,
			loc=loc,
			linkage=linkage,
			definition=TypeDef(kind=TypeKind.ENUM, name=fq, labels=labels),
		)
	if body_kind in ("unit_body", "struct_body"):
		fields = [_build_field(f) for f in _subtrees(body)]
		_check_unique_fields(fields, local)
		type_kind = TypeKind.UNIT if body_kind == "unit_body" else TypeKind.STRUCT
		return Decl(
			kind=DeclKind.UNIT if type_kind is TypeKind.UNIT else DeclKind.TYPE,
			name=local,
			loc=loc,
			linkage=linkage,
			definition=TypeDef(
				kind=type_kind,
				name=fq,
				fields=tuple(FieldDef(name=f.name, type_ref=f.type_ref) for f in fields),
			),
			fields=fields,
		)
	if body_kind == "type_ref":
		return Decl(
			kind=DeclKind.TYPE,
			name=local,
			loc=loc,
			linkage=linkage,
			definition=TypeDef(kind=TypeKind.ALIAS, name=fq, target=_build_type_ref(body)),
		)
	raise AssertionError(f"unexpected type body {body_kind}")


def _build_enum_labels(tree: Tree, decl_loc: Located | None) -> tuple[EnumLabel, ...]:
	"""
	Build enum labels; labels without an explicit value continue counting from
	the previous one (starting at 0).
	"""
	labels: List[EnumLabel] = []
	seen: set[str] = set()
	next_value = 0
	for lbl in _subtrees(tree):
		name = _tokens(lbl, "NAME")[0].value
		ints = _tokens(lbl, "INT")
		value = int(ints[0].value) if ints else next_value
		if name in seen:
			raise DeclError(f"duplicate enum label '{name}'", loc=_loc(lbl) or decl_loc)
		seen.add(name)
		labels.append(EnumLabel(name=name, value=value))
		next_value = value + 1
	return tuple(labels)


def _build_field(tree: Tree) -> FieldNode:
	name_tok = _tokens(tree, "NAME")[0]
	ref_node = next(c for c in _subtrees(tree) if _name(c) == "type_ref")
	return FieldNode(name=name_tok.value, type_ref=_build_type_ref(ref_node), loc=_loc(tree))


def _check_unique_fields(fields: List[FieldNode], type_name: str) -> None:
	seen: set[str] = set()
	for f in fields:
		if f.name in seen:
			raise DeclError(f"duplicate field '{f.name}' in type '{type_name}'", loc=f.loc)
		seen.add(f.name)


def _build_type_ref(tree: Tree) -> TypeRef:
	scoped = next(c for c in _subtrees(tree) if _name(c) == "scoped_name")
	name = "::".join(tok.value for tok in _tokens(scoped, "NAME"))
	args: tuple[TypeRef, ...] = ()
	for c in _subtrees(tree):
		if _name(c) == "type_args":
			args = tuple(_build_type_ref(a) for a in _subtrees(c))
	return TypeRef(name=name, args=args)


__all__ = ["parse_module", "DeclError"]
