# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Driver configuration.

Library paths are searched in order when resolving inputs and imports. Entries
from `WEFT_PATH` extend the configured list (they never replace it), and the
bundled library directory holding the built-in support modules is always
searched last.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Mapping, Optional

ENV_SEARCH_PATH = "WEFT_PATH"

# Directory shipped with the package that holds `weft_rt.weft` and `host_rt.weft`.
BUNDLED_LIBRARY_DIR = Path(__file__).resolve().parent / "lib"


@dataclass(frozen=True)
class DriverOptions:
	library_paths: List[Path] = field(default_factory=list)
	# Turn a redefinition of an already recorded type name by a different module
	# into an error instead of letting the later module win.
	strict_type_names: bool = False
	# Make the compiler load `weft_rt` for every compilation.
	auto_import_runtime: bool = True

	@classmethod
	def from_env(cls, environ: Optional[Mapping[str, str]] = None, **kwargs) -> "DriverOptions":
		"""Build options, appending `WEFT_PATH` entries to `library_paths`."""
		opts = cls(**kwargs)
		env = os.environ if environ is None else environ
		raw = env.get(ENV_SEARCH_PATH, "")
		extra = [Path(d) for d in raw.split(":") if d]
		if not extra:
			return opts
		return replace(opts, library_paths=[*opts.library_paths, *extra])

	def search_paths(self) -> List[Path]:
		"""Effective search list: configured paths, then the bundled library dir."""
		out = list(self.library_paths)
		if BUNDLED_LIBRARY_DIR not in out:
			out.append(BUNDLED_LIBRARY_DIR)
		return out


__all__ = ["DriverOptions", "ENV_SEARCH_PATH", "BUNDLED_LIBRARY_DIR"]
