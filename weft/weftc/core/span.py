# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics and type metadata.

A Span carries best-effort file/line/column information. Parser positions
(lark `meta` objects, `UnexpectedInput` errors) are converted via `from_loc`,
which keeps the original object in `raw` for richer renderers.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus raw parser loc)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_loc(cls, loc: Any, *, file: str | Path | None = None) -> "Span":
		"""
		Construct a Span from an existing parser/location object.

		If `loc` is already a Span it is returned unchanged (with `file` filled
		in when it was missing); otherwise the parser-specific object is stored in
		`raw`.
		"""
		file_str = str(file) if file is not None else None
		if loc is None:
			return cls(file=file_str)
		if isinstance(loc, cls):
			if loc.file is None and file_str is not None:
				return cls(
					file=file_str,
					line=loc.line,
					column=loc.column,
					end_line=loc.end_line,
					end_column=loc.end_column,
					raw=loc.raw,
				)
			return loc
		# lark's Meta exposes `empty` when the rule matched nothing; there is no
		# position to report in that case.
		if getattr(loc, "empty", False):
			return cls(file=file_str, raw=loc)
		return cls(
			file=file_str or getattr(loc, "file", None) or getattr(loc, "filename", None) or None,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
			raw=loc,
		)

	def format_short(self) -> str:
		"""Format as `file:line:column`, using `?` for unknown parts."""
		f = self.file or "<unknown>"
		l = self.line if self.line is not None else "?"
		c = self.column if self.column is not None else "?"
		return f"{f}:{l}:{c}"


__all__ = ["Span"]
