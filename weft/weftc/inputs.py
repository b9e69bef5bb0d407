# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Input path resolution and classification.

`resolve_input_path` turns a requested path into an existing file (base
directory first, then the library paths in order). `classify_input` maps the
resolved file's extension to the subsystem that handles it; it does no I/O.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Optional

from weft.weftc.errors import InputNotFound, UnsupportedInput


class InputKind(Enum):
	GLUE = "glue"  # glue description, loaded eagerly by the glue coordinator
	SOURCE = "source"  # weft source module
	IR = "ir"  # intermediate-representation module
	PRECOMPILED = "precompiled"  # precompiled object module
	NATIVE = "native"  # native passthrough code


# Case-sensitive on purpose: `A.WEFT` is not a weft module.
EXTENSION_KINDS: Dict[str, InputKind] = {
	".glue": InputKind.GLUE,
	".weft": InputKind.SOURCE,
	".wir": InputKind.IR,
	".wiro": InputKind.PRECOMPILED,
	".cc": InputKind.NATIVE,
	".cxx": InputKind.NATIVE,
}

# Kinds handed to the module compiler (everything except glue descriptions).
COMPILER_INPUT_KINDS = frozenset({InputKind.SOURCE, InputKind.IR, InputKind.PRECOMPILED, InputKind.NATIVE})


def normalize_path(path: Path) -> Path:
	"""Collapse `.`/`..` segments without following symlinks; the extension is kept."""
	return Path(os.path.normpath(path))


def find_in_paths(path: Path, search_paths: Iterable[Path]) -> Optional[Path]:
	"""Return the first `dir / path` that exists, or None."""
	for directory in search_paths:
		candidate = Path(directory) / path
		if candidate.exists():
			return candidate
	return None


def resolve_input_path(
	path: Path | str,
	relative_to: Path | str | None = None,
	library_paths: Iterable[Path] = (),
) -> Path:
	"""
	Resolve a requested input to an existing file.

	If `relative_to` is given and `path` is relative, `relative_to / path` is
	tried first. If the file still does not exist, each library path is searched
	in order. Raises `InputNotFound` carrying the requested path.
	"""
	requested = Path(path)
	file = requested
	if relative_to is not None and str(relative_to) and not file.is_absolute():
		candidate = Path(relative_to) / file
		if candidate.exists():
			file = candidate
	if not file.exists():
		found = find_in_paths(requested, library_paths) if not requested.is_absolute() else None
		if found is None:
			raise InputNotFound.for_path(requested)
		file = found
	return normalize_path(file)


def classify_input(path: Path) -> InputKind:
	"""Map a path's extension to its input kind; raises `UnsupportedInput`."""
	kind = EXTENSION_KINDS.get(path.suffix)
	if kind is None:
		raise UnsupportedInput.for_path(path)
	return kind


__all__ = [
	"InputKind",
	"EXTENSION_KINDS",
	"COMPILER_INPUT_KINDS",
	"normalize_path",
	"find_in_paths",
	"resolve_input_path",
	"classify_input",
]
