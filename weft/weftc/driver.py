# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
weft compilation driver.

The driver is the orchestration layer above the module compiler and the glue
coordinator:

  load_file (resolve -> classify -> glue.load_glue_file | compiler.add_input)
     ... repeated ...
  compile
     -> compiler.compile(listener=self)
          hook_new_ast_pre_compilation   (extract unresolved types, auto-export public enums)
          hook_new_ast_post_compilation  (extract resolved types, announce module to glue)
          hook_compilation_finished      (glue.compile, at most once per driver)

It owns the type registry for the lifetime of one compilation run; create one
driver per run and `close()` it (or use it as a context manager) when done.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Protocol, Tuple

from weft.weftc.compiler import CompiledProgram, ModuleCompiler, ModuleUnit
from weft.weftc.core.types_core import Linkage, TypeKind
from weft.weftc.errors import CompileFailure, GlueFailure, LoadFailure, UnknownType
from weft.weftc.extract import TypeExtractor, wants_unit
from weft.weftc.inputs import InputKind, classify_input, resolve_input_path
from weft.weftc.options import DriverOptions
from weft.weftc.parser.ast import DeclKind
from weft.weftc.registry import TypeInfo, TypeRegistry
from weft.weftc.runtime import HostRuntime, Runtime

logger = logging.getLogger(__name__)


class PipelineState(Enum):
	IDLE = auto()
	LOADING = auto()
	COMPILING = auto()
	GLUE_COMPILED = auto()
	FAILED = auto()


class GlueCoordinator(Protocol):
	"""What the driver needs from a glue compiler."""

	def init(self, driver: "Driver") -> None:
		...

	def load_glue_file(self, path: Path) -> bool:
		...

	def add_source_module(self, module_id: str, path: Path) -> None:
		...

	def compile(self) -> bool:
		...

	def exported_ids(self) -> List[Tuple[str, str]]:
		...


class Driver:
	def __init__(
		self,
		glue: GlueCoordinator,
		options: Optional[DriverOptions] = None,
		*,
		compiler: Optional[ModuleCompiler] = None,
		runtime: Optional[Runtime] = None,
		on_new_type: Optional[Callable[[TypeInfo], None]] = None,
		on_new_unit_type: Optional[Callable[[TypeInfo], None]] = None,
	) -> None:
		self._options = options if options is not None else DriverOptions.from_env()
		self._glue = glue
		self._compiler = compiler if compiler is not None else ModuleCompiler(self._options)
		self._runtime = runtime if runtime is not None else HostRuntime()
		self._registry = TypeRegistry(strict_names=self._options.strict_type_names)
		self._on_new_type = on_new_type
		self._on_new_unit_type = on_new_unit_type
		self._state = PipelineState.IDLE
		self._need_glue = True  # glue code has not been compiled yet
		self._closed = False
		logger.debug("search paths:")
		for p in self._options.search_paths():
			logger.debug("  %s", p)
		self._glue.init(self)

	# -- context ----------------------------------------------------------

	def __enter__(self) -> "Driver":
		return self

	def __exit__(self, *exc: object) -> None:
		self.close()

	def close(self) -> None:
		"""Drop all recorded metadata; the driver cannot be used afterwards."""
		self._registry.clear()
		self._closed = True

	def _check_open(self) -> None:
		if self._closed:
			raise RuntimeError("driver has been closed")

	@property
	def state(self) -> PipelineState:
		return self._state

	@property
	def options(self) -> DriverOptions:
		return self._options

	@property
	def glue_compiler(self) -> GlueCoordinator:
		return self._glue

	# -- pipeline ---------------------------------------------------------

	def load_file(self, file: Path | str, relative_to: Path | str | None = None) -> Path:
		"""
		Schedule a `.weft`, `.wir`, `.wiro`, `.cc`/`.cxx` or `.glue` file for loading.

		Glue files are handed to the glue coordinator right away; everything
		else is queued for `compile()`. Relative paths are tried against
		`relative_to` first, then searched along the library paths. Returns the
		resolved path.
		"""
		self._check_open()
		if self._state is PipelineState.IDLE:
			self._state = PipelineState.LOADING
		path = resolve_input_path(file, relative_to, self._options.search_paths())
		kind = classify_input(path)
		if kind is InputKind.GLUE:
			logger.debug("Loading glue file %s", path)
			if not self._glue.load_glue_file(path):
				raise LoadFailure(message=f"error loading glue file {path}", path=str(path))
			return path
		logger.debug("Loading %s file %s", kind.value, path)
		self._compiler.add_input(path)
		return path

	def compile(self) -> Optional[CompiledProgram]:
		"""
		Compile everything queued so far as one program.

		Returns None when nothing was queued. Failures are raised unchanged and
		end the run: the driver moves to `FAILED` and refuses further compiles.
		"""
		self._check_open()
		if self._state is PipelineState.FAILED:
			raise CompileFailure(message="compilation run has already failed")
		if not self._compiler.has_inputs():
			return None
		logger.debug("Running weft compiler")
		self._state = PipelineState.COMPILING
		try:
			program = self._compiler.compile(listener=self)
		except Exception:
			self._state = PipelineState.FAILED
			raise
		self._state = PipelineState.LOADING if self._need_glue else PipelineState.GLUE_COMPILED
		logger.debug("Done with weft compiler")
		return program

	# -- compiler hooks ---------------------------------------------------

	def hook_new_ast_pre_compilation(self, unit: ModuleUnit) -> None:
		if self._state is PipelineState.FAILED or not wants_unit(unit):
			return
		for info in TypeExtractor.for_unit(unit, is_resolved=False).collect(unit.module):
			logger.debug("  Got type '%s' (pre-compile)", info.id)
			self._registry.record(info)
			if info.decl_kind is DeclKind.ENUM and info.linkage is Linkage.PUBLIC:
				logger.debug("    Automatically exporting public enum for backwards compatibility")
				self._registry.add_public_enum(info)
			self.hook_new_type(info)

	def hook_new_ast_post_compilation(self, unit: ModuleUnit) -> None:
		if self._state is PipelineState.FAILED or not wants_unit(unit):
			return
		for info in TypeExtractor.for_unit(unit, is_resolved=True).collect(unit.module):
			logger.debug("  Got type '%s' (post-compile)", info.id)
			self._registry.record(info)
			self.hook_new_type(info)
			if info.decl_kind is DeclKind.UNIT:
				self.hook_new_unit_type(info)
		assert unit.path is not None
		self._glue.add_source_module(unit.module_id, unit.path)

	def hook_compilation_finished(self, program: CompiledProgram) -> None:
		if self._state is PipelineState.FAILED or not self._need_glue:
			return
		self._need_glue = False
		logger.debug("Compiling glue code")
		if not self._glue.compile():
			raise GlueFailure(message="glue compilation failed")

	def hook_new_type(self, info: TypeInfo) -> None:
		"""
		Called for every type declaration, once before and once after
		resolution (`info.is_resolved` tells which). No-op by default.
		"""
		if self._on_new_type is not None:
			self._on_new_type(info)

	def hook_new_unit_type(self, info: TypeInfo) -> None:
		"""Called for every resolved unit type. No-op by default."""
		if self._on_new_unit_type is not None:
			self._on_new_unit_type(info)

	# -- runtime ----------------------------------------------------------

	def hook_init_runtime(self) -> None:
		self._runtime.init()

	def hook_finish_runtime(self) -> None:
		self._runtime.done()

	@contextmanager
	def runtime(self) -> Iterator["Driver"]:
		"""Bracket execution of compiled output with runtime init/teardown."""
		self.hook_init_runtime()
		try:
			yield self
		finally:
			self.hook_finish_runtime()

	# -- queries ----------------------------------------------------------

	def lookup_type(self, type_id: str, kind: Optional[TypeKind] = None) -> TypeInfo:
		"""
		Return metadata for a type. The module defining it must have been
		compiled already; with `kind`, also require the type to be of that kind.
		"""
		return self._registry.lookup(type_id, kind)

	def types(self, exported_only: bool = False) -> List[TypeInfo]:
		"""
		All types seen so far, resolved or not (see `TypeInfo.is_resolved`).

		With `exported_only`, only types exported by a glue file plus the public
		enums exported automatically.
		"""
		exported = [src for src, _ in self._glue.exported_ids()] if exported_only else []
		return self._registry.types(exported_only, exported)

	def exported_types(self) -> List[Tuple[TypeInfo, str]]:
		"""
		Pairs of (type, host-side name) for everything exported to the host:
		explicit glue exports first, then the automatically exported public enums.
		"""
		result: List[Tuple[TypeInfo, str]] = []
		for source_id, target_id in self._glue.exported_ids():
			try:
				result.append((self._registry.lookup(source_id), target_id))
			except UnknownType:
				logger.error("unknown type '%s' exported", source_id)
		seen: set[str] = set()
		for enum in self._registry.public_enums:
			if enum.id in seen:
				continue
			seen.add(enum.id)
			current = self._registry.lookup(enum.id) if enum.id in self._registry else enum
			result.append((current, enum.id))
		return result

	@property
	def public_enums(self) -> List[TypeInfo]:
		return self._registry.public_enums


__all__ = ["Driver", "PipelineState", "GlueCoordinator"]
