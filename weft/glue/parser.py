# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parser for glue description (`.glue`) files.

A glue file lists the weft types exported to the host (`export`) and the
analyzers that bind a unit type to a transport (`analyzer`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree

from weft.weftc.core.span import Span

_GRAMMAR_PATH = Path(__file__).with_name("glue.lark")

_PARSER = Lark(
	_GRAMMAR_PATH.read_text(),
	parser="lalr",
	propagate_positions=True,
	maybe_placeholders=False,
)


@dataclass(frozen=True)
class ExportDecl:
	source_id: str
	target_id: str
	span: Span = field(default_factory=Span)


@dataclass(frozen=True)
class AnalyzerDecl:
	name: str
	transport: str
	unit_id: str
	ports: tuple[int, ...] = ()
	span: Span = field(default_factory=Span)


@dataclass
class GlueFile:
	path: Optional[Path]
	exports: List[ExportDecl] = field(default_factory=list)
	analyzers: List[AnalyzerDecl] = field(default_factory=list)


def _span(tree: Tree, path: Optional[Path]) -> Span:
	return Span.from_loc(tree.meta, file=path)


def _scoped(tree: Tree) -> str:
	return "::".join(tok.value for tok in tree.children if isinstance(tok, Token))


def parse_glue(source: str, *, path: Optional[Path] = None) -> GlueFile:
	"""Parse glue text; lark's `UnexpectedInput` propagates to the caller."""
	tree = _PARSER.parse(source)
	out = GlueFile(path=path)
	for item in tree.children:
		if not isinstance(item, Tree):
			continue
		names = [c for c in item.children if isinstance(c, Tree) and c.data == "scoped_name"]
		if item.data == "export_decl":
			source_id = _scoped(names[0])
			target_id = _scoped(names[1]) if len(names) > 1 else source_id
			out.exports.append(ExportDecl(source_id=source_id, target_id=target_id, span=_span(item, path)))
		elif item.data == "analyzer_decl":
			tokens = [c for c in item.children if isinstance(c, Token)]
			name = next(t.value for t in tokens if t.type == "NAME")
			transport = next(t.value for t in tokens if t.type == "TRANSPORT")
			ports = tuple(
				int(p.children[0].value) for p in item.children if isinstance(p, Tree) and p.data == "port_spec"
			)
			out.analyzers.append(
				AnalyzerDecl(
					name=name,
					transport=transport,
					unit_id=_scoped(names[0]),
					ports=ports,
					span=_span(item, path),
				)
			)
	return out


__all__ = ["ExportDecl", "AnalyzerDecl", "GlueFile", "parse_glue"]
