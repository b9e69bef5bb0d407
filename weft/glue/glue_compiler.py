# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Glue compiler: binds compiled weft modules into the host.

Glue files are parsed eagerly when loaded; their directives are checked only
in `compile()`, once the driver has recorded the resolved types of every
module. The result is a list of `AnalyzerBinding`s plus the export table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from lark.exceptions import UnexpectedInput

from weft.weftc.core.diagnostics import Diagnostic, has_errors
from weft.weftc.core.span import Span
from weft.weftc.core.types_core import TypeKind
from weft.weftc.errors import UnknownType, WrongKind
from weft.weftc.inputs import normalize_path
from .parser import AnalyzerDecl, ExportDecl, GlueFile, parse_glue

if TYPE_CHECKING:
	from weft.weftc.driver import Driver

logger = logging.getLogger(__name__)

# Ports a transport accepts; 0 is reserved.
_MAX_PORT = 65535


@dataclass(frozen=True)
class AnalyzerBinding:
	"""An analyzer whose unit type has been checked against the compiled modules."""

	name: str
	transport: str
	unit_id: str
	ports: Tuple[int, ...]
	module_path: Optional[Path]


class GlueCompiler:
	def __init__(self) -> None:
		self._driver: Optional["Driver"] = None
		self._files: List[GlueFile] = []
		self._loaded: set[Path] = set()
		self._modules: Dict[str, Path] = {}
		self.diagnostics: List[Diagnostic] = []
		self.bindings: List[AnalyzerBinding] = []
		self.compiled = False

	def init(self, driver: "Driver") -> None:
		self._driver = driver

	@property
	def modules(self) -> Dict[str, Path]:
		"""Source modules announced by the driver, by module id."""
		return dict(self._modules)

	def load_glue_file(self, path: Path) -> bool:
		"""Parse a glue file. Returns False (with diagnostics) if it cannot be read or parsed."""
		path = normalize_path(Path(path))
		if path in self._loaded:
			return True
		try:
			source = path.read_text(encoding="utf-8")
		except OSError as err:
			self._error(f"cannot read {path}: {err.strerror or err}", Span(file=str(path)))
			return False
		except UnicodeDecodeError as err:
			self._error(f"cannot decode {path}: {err.reason}", Span(file=str(path)))
			return False
		try:
			glue = parse_glue(source, path=path)
		except UnexpectedInput as err:
			span = Span(
				file=str(path),
				line=getattr(err, "line", None),
				column=getattr(err, "column", None),
				raw=err,
			)
			self._error(str(err).strip(), span)
			return False
		logger.debug("glue file %s: %d export(s), %d analyzer(s)", path, len(glue.exports), len(glue.analyzers))
		self._loaded.add(path)
		self._files.append(glue)
		return True

	def add_source_module(self, module_id: str, path: Path) -> None:
		logger.debug("glue: source module %s (%s)", module_id, path)
		self._modules[module_id] = path

	def compile(self) -> bool:
		"""
		Check every export and analyzer against the driver's type registry.

		Returns False if any directive refers to a missing type, an analyzer
		does not parse with a unit type, or two exports claim the same host
		name. Problems are reported in `diagnostics`.
		"""
		if self._driver is None:
			raise RuntimeError("glue compiler not attached to a driver")
		before = len(self.diagnostics)
		targets: Dict[str, ExportDecl] = {}
		for export in self._exports():
			self._check_export(export, targets)
		bindings: List[AnalyzerBinding] = []
		for analyzer in self._analyzers():
			binding = self._bind(analyzer)
			if binding is not None:
				bindings.append(binding)
		ok = not has_errors(self.diagnostics[before:])
		if ok:
			self.bindings = bindings
			self.compiled = True
			logger.debug("glue: %d analyzer(s) bound", len(bindings))
		return ok

	def exported_ids(self) -> List[Tuple[str, str]]:
		"""(weft type id, host name) for every export, in load order."""
		return [(e.source_id, e.target_id) for e in self._exports()]

	def _exports(self) -> List[ExportDecl]:
		return [e for f in self._files for e in f.exports]

	def _analyzers(self) -> List[AnalyzerDecl]:
		return [a for f in self._files for a in f.analyzers]

	def _check_export(self, export: ExportDecl, targets: Dict[str, ExportDecl]) -> None:
		assert self._driver is not None
		try:
			self._driver.lookup_type(export.source_id)
		except UnknownType as err:
			self._error(f"cannot export {export.source_id}: {err.message}", export.span)
			return
		prev = targets.get(export.target_id)
		if prev is not None and prev.source_id != export.source_id:
			self._error(
				f"host name '{export.target_id}' exported twice",
				export.span,
				notes=[f"first exported from {prev.source_id} at {prev.span.format_short()}"],
			)
			return
		targets[export.target_id] = export

	def _bind(self, analyzer: AnalyzerDecl) -> Optional[AnalyzerBinding]:
		assert self._driver is not None
		try:
			info = self._driver.lookup_type(analyzer.unit_id, TypeKind.UNIT)
		except UnknownType as err:
			self._error(f"analyzer {analyzer.name}: {err.message}", analyzer.span)
			return None
		except WrongKind:
			self._error(f"analyzer {analyzer.name}: '{analyzer.unit_id}' is not a unit type", analyzer.span)
			return None
		for port in analyzer.ports:
			if not 0 < port <= _MAX_PORT:
				self._error(f"analyzer {analyzer.name}: invalid port {port}", analyzer.span)
				return None
		return AnalyzerBinding(
			name=analyzer.name,
			transport=analyzer.transport,
			unit_id=info.id,
			ports=analyzer.ports,
			module_path=info.module_path,
		)

	def _error(self, message: str, span: Span, notes: Optional[List[str]] = None) -> None:
		logger.debug("glue error: %s", message)
		self.diagnostics.append(Diagnostic(message=message, phase="glue", span=span, notes=list(notes or [])))


__all__ = ["GlueCompiler", "AnalyzerBinding"]
