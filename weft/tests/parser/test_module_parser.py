# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Module parser: declarations, imports and syntax diagnostics with source positions.
"""

from __future__ import annotations

from pathlib import Path

from weft.weftc.core.types_core import Linkage, TypeKind
from weft.weftc.parser import Decl, DeclKind, FieldNode, ModuleAst, parse_module_file, parse_module_source, walk


def _parse(src: str) -> ModuleAst:
	module, diags = parse_module_source(src)
	assert diags == []
	assert module is not None
	return module


def test_enum_labels_continue_numbering_from_previous_value() -> None:
	module = _parse("module m;\npublic type Color = enum { Red, Green = 5, Blue, };\n")
	(decl,) = module.decls
	assert decl.kind is DeclKind.ENUM
	assert decl.linkage is Linkage.PUBLIC
	assert decl.definition is not None
	assert decl.definition.name == "m::Color"
	assert [(l.name, l.value) for l in decl.definition.labels] == [("Red", 0), ("Green", 5), ("Blue", 6)]


def test_unit_struct_and_alias_declarations_are_tagged() -> None:
	module = _parse(
		"""
module m;
type Msg = unit { kind: uint8; body: vector<bytes>; };
private type Hdr = struct { len: uint16; };
public type Id = uint32;
"""
	)
	msg, hdr, ident = module.decls
	assert msg.kind is DeclKind.UNIT
	assert msg.definition is not None and msg.definition.kind is TypeKind.UNIT
	assert [f.name for f in msg.fields] == ["kind", "body"]
	assert msg.definition.fields[1].type_ref.args[0].name == "bytes"
	assert hdr.kind is DeclKind.TYPE
	assert hdr.definition is not None and hdr.definition.kind is TypeKind.STRUCT
	assert hdr.linkage is Linkage.PRIVATE
	assert ident.kind is DeclKind.TYPE
	assert ident.definition is not None and ident.definition.kind is TypeKind.ALIAS
	assert ident.definition.target is not None and ident.definition.target.name == "uint32"
	# Parsed definitions are not resolved yet.
	assert not msg.definition.is_resolved
	assert msg.resolved is None


def test_imports_and_constants_are_other_declarations() -> None:
	module = _parse("module m;\nimport other;\nconst Max = 16;\n# comment\ntype T = other::U;\n")
	imp, const, alias = module.decls
	assert (imp.kind, imp.other, imp.name) == (DeclKind.OTHER, "import", "other")
	assert (const.kind, const.other, const.value) == (DeclKind.OTHER, "const", 16)
	assert [d.name for d in module.imports] == ["other"]
	assert module.type_decls == [alias]
	assert alias.definition is not None and alias.definition.target is not None
	assert alias.definition.target.name == "other::U"


def test_walk_yields_every_node_once_in_preorder() -> None:
	"""Declarations come before their fields, and each node is visited once."""
	module = _parse("module m;\ntype A = unit { x: uint8; y: uint8; };\ntype B = enum { One };\n")
	nodes = list(walk(module))
	assert nodes[0] is module
	assert isinstance(nodes[1], Decl) and nodes[1].name == "A"
	assert [n.name for n in nodes[2:4] if isinstance(n, FieldNode)] == ["x", "y"]
	assert isinstance(nodes[4], Decl) and nodes[4].name == "B"
	assert len(nodes) == 5
	assert len({id(n) for n in nodes}) == len(nodes)


def test_duplicate_declaration_is_a_parser_diagnostic() -> None:
	module, diags = parse_module_source("module m;\ntype A = uint8;\ntype A = uint16;\n", path="m.weft")
	assert module is None
	assert len(diags) == 1
	assert diags[0].phase == "parser"
	assert "duplicate declaration of 'A'" in diags[0].message
	assert diags[0].span.file == "m.weft"
	assert diags[0].span.line == 3


def test_duplicate_enum_label_and_field_are_rejected() -> None:
	_, diags = parse_module_source("module m;\ntype E = enum { A, A };\n")
	assert "duplicate enum label 'A'" in diags[0].message
	_, diags = parse_module_source("module m;\ntype U = unit { a: uint8; a: uint8; };\n")
	assert "duplicate field 'a'" in diags[0].message


def test_syntax_error_reports_position() -> None:
	module, diags = parse_module_source("module m;\ntype = uint8;\n", path="bad.weft")
	assert module is None
	assert len(diags) == 1
	assert diags[0].phase == "parser"
	assert diags[0].span.line == 2
	assert diags[0].format_human().startswith("bad.weft:2:")


def test_unreadable_file_is_a_diagnostic(tmp_path: Path) -> None:
	module, diags = parse_module_file(tmp_path / "nope.weft")
	assert module is None
	assert "cannot read" in diags[0].message
