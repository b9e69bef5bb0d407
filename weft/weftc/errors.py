# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structured, serializable errors raised by the compilation driver.

Every error has a stable `reason_code`, a one-line `message` (its description)
and an optional `context` string with additional detail. Callers report both
and treat the run as failed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Iterable, List

from weft.weftc.core.diagnostics import Diagnostic


@dataclass(eq=False)
class DriverError(Exception):
	"""Base class of all driver errors."""

	reason_code: ClassVar[str] = "driver-error"

	message: str
	context: str | None = None
	path: str | None = None
	diagnostics: List[Diagnostic] = field(default_factory=list)

	def __str__(self) -> str:
		return self.format_human()

	@property
	def description(self) -> str:
		return self.message

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"context": self.context,
			"path": self.path,
			"diagnostics": [d.to_dict() for d in self.diagnostics],
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.context:
			parts.append(self.context)
		return "\n".join(parts)


class InputNotFound(DriverError):
	"""A requested input could not be found (path resolution failure)."""

	reason_code = "not-found"

	@classmethod
	def for_path(cls, requested: Path | str) -> "InputNotFound":
		return cls(message=f"cannot find file {requested}", path=str(requested))


class UnsupportedInput(DriverError):
	"""An input's extension does not map to any handler."""

	reason_code = "unsupported-input"

	@classmethod
	def for_path(cls, path: Path | str) -> "UnsupportedInput":
		return cls(message=f"unknown file type passed to loader: {path}", path=str(path))


class LoadFailure(DriverError):
	"""A glue description or module input was rejected by its subsystem."""

	reason_code = "load-failure"


class CompileFailure(DriverError):
	"""The module compiler failed; carries its diagnostics."""

	reason_code = "compile-failure"

	@classmethod
	def from_diagnostics(cls, diagnostics: Iterable[Diagnostic], *, message: str | None = None) -> "CompileFailure":
		diags = list(diagnostics)
		errors = [d for d in diags if d.severity == "error"]
		if message is None:
			message = errors[0].format_human() if errors else "compilation failed"
			rest = errors[1:]
		else:
			rest = errors
		context = "\n".join(d.format_human() for d in rest) or None
		path = errors[0].span.file if errors else None
		return cls(message=message, context=context, path=path, diagnostics=diags)


class TypeNameCollision(CompileFailure):
	"""Two modules declared the same fully-qualified type name (strict mode)."""

	reason_code = "type-name-collision"


class GlueFailure(DriverError):
	"""Glue compilation reported failure."""

	reason_code = "glue-failure"


class OutputFailure(DriverError):
	"""A result file requested on the command line could not be written."""

	reason_code = "output-failure"


class UnknownType(DriverError):
	"""Registry lookup miss."""

	reason_code = "unknown-type"

	@classmethod
	def for_id(cls, type_id: str) -> "UnknownType":
		return cls(message=f"unknown type '{type_id}'")


class WrongKind(DriverError):
	"""Registry lookup found the name but with a different structural kind."""

	reason_code = "wrong-kind"

	@classmethod
	def for_id(cls, type_id: str) -> "WrongKind":
		return cls(message=f"'{type_id}' is not of expected type")


__all__ = [
	"DriverError",
	"InputNotFound",
	"UnsupportedInput",
	"LoadFailure",
	"CompileFailure",
	"TypeNameCollision",
	"GlueFailure",
	"OutputFailure",
	"UnknownType",
	"WrongKind",
]
