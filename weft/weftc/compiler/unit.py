# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compilation units and the listener interface the compiler reports through.

The compiler owns `ModuleUnit`s. A listener receives a unit only for the
duration of one hook call and must not keep it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol

from weft.weftc.parser.ast import ModuleAst


@dataclass
class ModuleUnit:
	"""A parsed module: identity, origin, dispatch tag and declaration tree."""

	module_id: str
	path: Optional[Path]  # None for modules constructed in memory
	extension: str
	module: ModuleAst

	@property
	def in_memory(self) -> bool:
		return self.path is None


@dataclass
class CompiledProgram:
	"""Result of one whole-program compilation."""

	units: List[ModuleUnit] = field(default_factory=list)
	# Precompiled objects and native code handed through to the linker.
	link_inputs: List[Path] = field(default_factory=list)

	def unit(self, module_id: str) -> ModuleUnit | None:
		"""Return the last unit compiled for `module_id`."""
		found = None
		for u in self.units:
			if u.module_id == module_id:
				found = u
		return found


class CompileListener(Protocol):
	"""
	Hooks invoked by `ModuleCompiler.compile`, all on the caller's stack.

	Every unit gets `hook_new_ast_pre_compilation` before any unit is resolved;
	every unit then gets `hook_new_ast_post_compilation`; finally
	`hook_compilation_finished` runs once. An exception raised by a hook aborts
	the compilation and propagates to the caller of `compile`.
	"""

	def hook_new_ast_pre_compilation(self, unit: ModuleUnit) -> None:
		...

	def hook_new_ast_post_compilation(self, unit: ModuleUnit) -> None:
		...

	def hook_compilation_finished(self, program: CompiledProgram) -> None:
		...


__all__ = ["ModuleUnit", "CompiledProgram", "CompileListener"]
