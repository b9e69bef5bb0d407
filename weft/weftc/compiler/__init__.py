# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
weft multi-module compiler.

Public API:
  - ModuleCompiler: queue inputs, compile them as one program
  - ModuleUnit / CompiledProgram: what the compiler hands out
  - CompileListener: hooks the compiler calls back into during `compile`
"""

from .compiler import ModuleCompiler
from .resolve import PRELUDE_MODULE, RUNTIME_MODULE, resolve_program
from .unit import CompiledProgram, CompileListener, ModuleUnit

__all__ = [
	"ModuleCompiler",
	"ModuleUnit",
	"CompiledProgram",
	"CompileListener",
	"PRELUDE_MODULE",
	"RUNTIME_MODULE",
	"resolve_program",
]
