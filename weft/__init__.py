# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
weft: compilation driver for the weft parser-description language.

The compiler driver lives in `weft.weftc`; the glue coordinator that binds
compiled units into a host runtime lives in `weft.glue`.
"""

__version__ = "0.3.0"

__all__ = ["__version__"]
