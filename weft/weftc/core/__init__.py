# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Core data shared across the weftc pipeline: spans, diagnostics, type core."""

from .diagnostics import Diagnostic, has_errors
from .span import Span
from .types_core import (
	BUILTIN_GENERICS,
	BUILTIN_SCALARS,
	EnumLabel,
	FieldDef,
	Linkage,
	TypeDef,
	TypeKind,
	TypeRef,
	qualified_id,
	split_qualified,
)

__all__ = [
	"Diagnostic",
	"has_errors",
	"Span",
	"BUILTIN_GENERICS",
	"BUILTIN_SCALARS",
	"EnumLabel",
	"FieldDef",
	"Linkage",
	"TypeDef",
	"TypeKind",
	"TypeRef",
	"qualified_id",
	"split_qualified",
]
