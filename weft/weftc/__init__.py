# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
weft compiler driver package (`weftc`).

The pipeline driver is `weft.weftc.driver.Driver`; the CLI entrypoint is
`weft.weftc.weftc:main`.
"""

__all__ = []
