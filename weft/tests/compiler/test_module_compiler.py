# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Module compiler: import discovery, resolution and listener hook ordering.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

import pytest

from weft.weftc.compiler import CompiledProgram, ModuleCompiler, ModuleUnit
from weft.weftc.core.types_core import TypeKind
from weft.weftc.errors import CompileFailure, LoadFailure
from weft.weftc.options import DriverOptions


class RecordingListener:
	def __init__(self) -> None:
		self.events: List[Tuple[str, Optional[str], bool]] = []

	def _resolved(self, unit: ModuleUnit) -> bool:
		return all(d.resolved is not None for d in unit.module.type_decls)

	def hook_new_ast_pre_compilation(self, unit: ModuleUnit) -> None:
		self.events.append(("pre", unit.module_id, self._resolved(unit) and bool(unit.module.type_decls)))

	def hook_new_ast_post_compilation(self, unit: ModuleUnit) -> None:
		self.events.append(("post", unit.module_id, self._resolved(unit)))

	def hook_compilation_finished(self, program: CompiledProgram) -> None:
		self.events.append(("finished", None, True))


def _field_refs(program: CompiledProgram, module_id: str, type_name: str) -> dict:
	unit = program.unit(module_id)
	assert unit is not None
	decl = next(d for d in unit.module.type_decls if d.name == type_name)
	assert decl.resolved is not None
	return {f.name: f.type_ref for f in decl.resolved.fields}


def test_hooks_fire_pre_for_all_units_then_post_then_finished(write) -> None:
	"""Every unit gets its pre hook before any unit gets its post hook."""
	a = write("a.weft", "module a;\nimport b;\npublic type T = struct { d: b::D; };\n")
	write("b.weft", "module b;\npublic type D = enum { X };\n")
	compiler = ModuleCompiler(DriverOptions())
	compiler.add_input(a)
	listener = RecordingListener()
	compiler.compile(listener=listener)
	assert [(e[0], e[1]) for e in listener.events] == [
		("pre", "weft"),
		("pre", "weft_rt"),
		("pre", "a"),
		("pre", "b"),
		("post", "weft"),
		("post", "weft_rt"),
		("post", "a"),
		("post", "b"),
		("finished", None),
	]
	# Nothing is resolved while the pre hooks run; everything is by the post hooks.
	assert not any(resolved for hook, _, resolved in listener.events if hook == "pre")
	assert all(resolved for hook, _, resolved in listener.events if hook == "post")


def test_references_resolve_across_modules_and_prelude(write) -> None:
	write("b.weft", "module b;\npublic type Data = struct { x: uint8; };\n")
	a = write(
		"a.weft",
		"""
module a;
import b;
public type Color = enum { Red };
public type Msg = unit {
	c: Color;
	p: weft::Port;
	n: Byte;
	d: b::Data;
	v: vector<Color>;
};
""",
	)
	compiler = ModuleCompiler()
	compiler.add_input(a)
	program = compiler.compile()
	refs = _field_refs(program, "a", "Msg")
	assert (refs["c"].resolved, refs["c"].kind) == ("a::Color", TypeKind.ENUM)
	assert (refs["p"].resolved, refs["p"].kind) == ("weft::Port", TypeKind.SCALAR)
	assert (refs["n"].resolved, refs["n"].kind) == ("weft::Byte", TypeKind.SCALAR)
	assert (refs["d"].resolved, refs["d"].kind) == ("b::Data", TypeKind.STRUCT)
	assert refs["v"].kind is TypeKind.VECTOR
	assert refs["v"].args[0].resolved == "a::Color"
	assert refs["v"].render() == "vector<a::Color>"


def test_alias_kind_follows_its_target(write) -> None:
	"""An alias takes the kind of the type it names, through any chain of aliases."""
	a = write("a.weft", "module a;\ntype M = unit { x: uint8; };\ntype N = M;\ntype O = N;\n")
	compiler = ModuleCompiler()
	compiler.add_input(a)
	program = compiler.compile()
	unit = program.unit("a")
	assert unit is not None
	o = next(d for d in unit.module.type_decls if d.name == "O")
	assert o.resolved is not None
	assert o.resolved.is_a(TypeKind.UNIT)
	assert o.resolved.is_a(TypeKind.ALIAS)
	assert not o.resolved.is_a(TypeKind.ENUM)
	# The parsed definition is kept as written.
	assert o.definition is not None and o.definition.target is not None
	assert o.definition.target.resolved is None


@pytest.mark.parametrize(
	"body, message",
	[
		("type T = struct { x: Nope; };", "unknown type 'Nope'"),
		("type T = struct { x: c::U; };", "module 'c' is not imported into 'a'"),
		("type A = B;\ntype B = A;", "alias cycle through"),
		("type T = struct { x: vector<uint8, uint8>; };", "expects 1 type argument(s), got 2"),
		("type T = struct { x: uint8<bool>; };", "does not take type arguments"),
	],
)
def test_resolution_errors_fail_the_compilation(write, body: str, message: str) -> None:
	a = write("a.weft", f"module a;\n{body}\n")
	compiler = ModuleCompiler()
	compiler.add_input(a)
	with pytest.raises(CompileFailure) as excinfo:
		compiler.compile()
	assert message in excinfo.value.message
	assert excinfo.value.diagnostics[0].phase == "resolve"
	assert excinfo.value.path == str(a)


def test_private_types_are_not_visible_from_other_modules(write) -> None:
	write("b.weft", "module b;\ntype Hidden = struct { x: uint8; };\n")
	a = write("a.weft", "module a;\nimport b;\ntype T = struct { h: b::Hidden; };\n")
	compiler = ModuleCompiler()
	compiler.add_input(a)
	with pytest.raises(CompileFailure, match="type 'b::Hidden' is private to module 'b'"):
		compiler.compile()


def test_imports_are_found_along_the_library_path(tmp_path: Path, write) -> None:
	write("lib/shared.weft", "module shared;\npublic type Id = uint32;\n")
	a = write("src/a.weft", "module a;\nimport shared;\ntype T = struct { id: shared::Id; };\n")
	compiler = ModuleCompiler(DriverOptions(library_paths=[tmp_path / "lib"]))
	compiler.add_input(a)
	program = compiler.compile()
	shared = program.unit("shared")
	assert shared is not None
	assert shared.path == tmp_path / "lib" / "shared.weft"


def test_missing_import_and_module_name_mismatch(write) -> None:
	a = write("a.weft", "module a;\nimport zzz;\n")
	compiler = ModuleCompiler()
	compiler.add_input(a)
	with pytest.raises(CompileFailure) as excinfo:
		compiler.compile()
	assert "cannot find module 'zzz'" in excinfo.value.message
	assert excinfo.value.diagnostics[0].span.line == 2

	write("b.weft", "module c;\n")
	a2 = write("a2.weft", "module a2;\nimport b;\n")
	compiler.add_input(a2)
	with pytest.raises(CompileFailure, match="declares module 'c', expected 'b'"):
		compiler.compile()


def test_parse_error_in_input_fails_with_parser_diagnostic(write) -> None:
	a = write("a.weft", "module a;\ntype T = ;\n")
	compiler = ModuleCompiler()
	compiler.add_input(a)
	with pytest.raises(CompileFailure) as excinfo:
		compiler.compile()
	assert excinfo.value.diagnostics[0].phase == "parser"


def test_link_inputs_pass_through_and_queue_is_consumed(write) -> None:
	a = write("a.weft", "module a;\n")
	cc = write("glue_impl.cc", "// native\n")
	obj = write("pre.wiro", "")
	compiler = ModuleCompiler(DriverOptions(auto_import_runtime=False))
	compiler.add_input(a)
	compiler.add_input(a)
	compiler.add_input(cc)
	compiler.add_input(obj)
	program = compiler.compile()
	assert [u.module_id for u in program.units] == ["weft", "a"]
	assert program.link_inputs == [cc, obj]
	assert program.unit("weft") is not None and program.unit("weft").in_memory
	assert not compiler.has_inputs()


def test_add_input_rejects_non_compiler_inputs(write, tmp_path: Path) -> None:
	compiler = ModuleCompiler()
	with pytest.raises(LoadFailure, match="not a compiler input"):
		compiler.add_input(write("x.glue", "export a::T;\n"))
	with pytest.raises(LoadFailure, match="not a regular file"):
		compiler.add_input(tmp_path / "missing.weft")
	assert not compiler.has_inputs()


def test_listener_exception_aborts_compilation(write) -> None:
	"""An exception from a listener hook propagates unchanged and stops the run."""
	class Boom(RecordingListener):
		def hook_new_ast_post_compilation(self, unit: ModuleUnit) -> None:
			raise KeyError(unit.module_id)

	a = write("a.weft", "module a;\n")
	compiler = ModuleCompiler()
	compiler.add_input(a)
	listener = Boom()
	with pytest.raises(KeyError):
		compiler.compile(listener=listener)
	assert ("finished", None, True) not in listener.events
