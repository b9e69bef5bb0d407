# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Multi-module compiler for weft.

Inputs are queued with `add_input` and compiled together by `compile`:

  parse (inputs, then imports found through the search path)
     -> listener.hook_new_ast_pre_compilation, once per unit, right after parsing
  resolve (whole program, see `resolve.py`)
     -> listener.hook_new_ast_post_compilation, once per unit
     -> listener.hook_compilation_finished, once

Besides the inputs, every compilation contains the in-memory prelude module
`weft` and, unless disabled, the runtime support module `weft_rt` from the
search path. Precompiled objects and native code are not parsed; they are
passed through as link inputs.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from weft.weftc.core.diagnostics import Diagnostic, has_errors
from weft.weftc.core.span import Span
from weft.weftc.errors import CompileFailure, LoadFailure
from weft.weftc.inputs import EXTENSION_KINDS, InputKind, find_in_paths, normalize_path
from weft.weftc.options import DriverOptions
from weft.weftc.parser import parse_module_file, parse_module_source
from .resolve import PRELUDE_MODULE, RUNTIME_MODULE, resolve_program
from .unit import CompiledProgram, CompileListener, ModuleUnit

logger = logging.getLogger(__name__)

PRELUDE_SOURCE = """
module weft;

public type Byte = uint8;
public type Port = uint16;
public type ByteOrder = enum { Little, Big, Network };
"""

# Extensions tried, in order, when resolving `import name;`.
IMPORT_EXTENSIONS = (".weft", ".wir")

_PARSED_KINDS = frozenset({InputKind.SOURCE, InputKind.IR})


class ModuleCompiler:
	def __init__(self, options: Optional[DriverOptions] = None) -> None:
		self._options = options or DriverOptions()
		self._inputs: List[Path] = []

	@property
	def options(self) -> DriverOptions:
		return self._options

	def add_input(self, path: Path) -> None:
		"""Queue a module, object or native file. Re-adding a queued file is a no-op."""
		path = normalize_path(Path(path))
		kind = EXTENSION_KINDS.get(path.suffix)
		if kind is None or kind is InputKind.GLUE:
			raise LoadFailure(message=f"not a compiler input: {path}", path=str(path))
		if not path.is_file():
			raise LoadFailure(message=f"cannot load input {path}: not a regular file", path=str(path))
		if path in self._inputs:
			return
		self._inputs.append(path)

	def has_inputs(self) -> bool:
		return bool(self._inputs)

	def compile(self, listener: Optional[CompileListener] = None) -> CompiledProgram:
		"""
		Compile all queued inputs as one program.

		Raises `CompileFailure` carrying the diagnostics of the first failing
		phase; exceptions raised by listener hooks propagate unchanged. The queue
		is consumed either way.
		"""
		inputs, self._inputs = self._inputs, []
		run = _CompileRun(self._options, listener)
		return run.execute(inputs)


class _CompileRun:
	"""State of one `ModuleCompiler.compile` call."""

	def __init__(self, options: DriverOptions, listener: Optional[CompileListener]) -> None:
		self.options = options
		self.listener = listener
		self.search_paths = options.search_paths()
		self.program = CompiledProgram()
		self._loaded_paths: set[Path] = set()
		self._loaded_ids: set[str] = set()

	def execute(self, inputs: List[Path]) -> CompiledProgram:
		self._add_prelude()
		if self.options.auto_import_runtime:
			self._import_module(RUNTIME_MODULE, importer=None)
		for path in inputs:
			kind = EXTENSION_KINDS[path.suffix]
			if kind in _PARSED_KINDS:
				self._load_file(path)
			else:
				logger.debug("passing through %s input %s", kind.value, path)
				self.program.link_inputs.append(path)
		# Imports discovered while parsing extend `units`; iterate by index.
		i = 0
		while i < len(self.program.units):
			unit = self.program.units[i]
			for imp in unit.module.imports:
				if imp.name not in self._loaded_ids:
					self._import_module(imp.name, importer=unit, loc=imp.loc)
			i += 1

		logger.debug("resolving %d module(s)", len(self.program.units))
		diagnostics = resolve_program(self.program.units)
		if has_errors(diagnostics):
			raise CompileFailure.from_diagnostics(diagnostics)

		if self.listener is not None:
			for unit in self.program.units:
				self.listener.hook_new_ast_post_compilation(unit)
			self.listener.hook_compilation_finished(self.program)
		return self.program

	def _add_prelude(self) -> None:
		module, diagnostics = parse_module_source(PRELUDE_SOURCE)
		assert module is not None and not diagnostics, diagnostics
		self._register(ModuleUnit(module_id=PRELUDE_MODULE, path=None, extension=".weft", module=module))

	def _load_file(self, path: Path) -> ModuleUnit | None:
		if path in self._loaded_paths:
			return None
		module, diagnostics = parse_module_file(path)
		if module is None or has_errors(diagnostics):
			raise CompileFailure.from_diagnostics(diagnostics)
		logger.debug("parsed module %s from %s", module.name, path)
		unit = ModuleUnit(module_id=module.name, path=path, extension=path.suffix, module=module)
		self._loaded_paths.add(path)
		self._register(unit)
		return unit

	def _register(self, unit: ModuleUnit) -> None:
		self.program.units.append(unit)
		self._loaded_ids.add(unit.module_id)
		if self.listener is not None:
			self.listener.hook_new_ast_pre_compilation(unit)

	def _import_module(self, name: str, *, importer: ModuleUnit | None, loc: object | None = None) -> None:
		"""Find `name` next to the importing file first, then along the search path."""
		dirs: List[Path] = []
		if importer is not None and importer.path is not None:
			dirs.append(importer.path.parent)
		dirs.extend(self.search_paths)
		for ext in IMPORT_EXTENSIONS:
			found = find_in_paths(Path(name + ext), dirs)
			if found is None:
				continue
			unit = self._load_file(normalize_path(found))
			if unit is not None and unit.module_id != name:
				span = Span(file=str(found), line=unit.module.loc.line if unit.module.loc else None)
				raise CompileFailure.from_diagnostics(
					[
						Diagnostic(
							message=f"file {found} declares module '{unit.module_id}', expected '{name}'",
							phase="import",
							span=span,
						)
					]
				)
			return
		file = str(importer.path) if importer is not None and importer.path is not None else None
		raise CompileFailure.from_diagnostics(
			[Diagnostic(message=f"cannot find module '{name}'", phase="import", span=Span.from_loc(loc, file=file))]
		)


__all__ = ["ModuleCompiler", "PRELUDE_SOURCE", "IMPORT_EXTENSIONS"]
