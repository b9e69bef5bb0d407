# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
weft parser front door.

Parses `.weft`/`.wir` text into a `ModuleAst` and turns parser failures into
parser-phase diagnostics instead of raw lark exceptions.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from lark.exceptions import UnexpectedInput

from weft.weftc.core.diagnostics import Diagnostic
from weft.weftc.core.span import Span
from . import parser as _parser
from .ast import Decl, DeclKind, FieldNode, Located, ModuleAst, TYPE_DECL_KINDS, walk


def _span_in_file(path: Path | str | None, loc: object | None) -> Span:
	return Span.from_loc(loc, file=path)


def parse_module_source(source: str, *, path: Path | str | None = None) -> Tuple[Optional[ModuleAst], List[Diagnostic]]:
	"""
	Parse module text. On failure returns `(None, diagnostics)`.

	`path` is only used to attribute diagnostics.
	"""
	try:
		return _parser.parse_module(source), []
	except _parser.DeclError as err:
		return None, [Diagnostic(message=str(err), phase="parser", span=_span_in_file(path, err.loc))]
	except UnexpectedInput as err:
		span = Span(
			file=str(path) if path is not None else None,
			line=getattr(err, "line", None),
			column=getattr(err, "column", None),
			raw=err,
		)
		return None, [Diagnostic(message=str(err).strip(), phase="parser", span=span)]


def parse_module_file(path: Path) -> Tuple[Optional[ModuleAst], List[Diagnostic]]:
	"""Read and parse a module file."""
	try:
		source = path.read_text(encoding="utf-8")
	except OSError as err:
		return None, [Diagnostic(message=f"cannot read {path}: {err.strerror or err}", phase="parser", span=Span(file=str(path)))]
	except UnicodeDecodeError as err:
		return None, [Diagnostic(message=f"cannot decode {path}: {err.reason}", phase="parser", span=Span(file=str(path)))]
	return parse_module_source(source, path=path)


__all__ = [
	"parse_module_source",
	"parse_module_file",
	"Decl",
	"DeclKind",
	"FieldNode",
	"Located",
	"ModuleAst",
	"TYPE_DECL_KINDS",
	"walk",
]
