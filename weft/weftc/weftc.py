# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
weftc command line tool.

Loads every input through a `Driver` (glue files eagerly, everything else
queued), compiles once, and optionally writes a JSON manifest of the recorded
types, host exports and analyzer bindings.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from weft import __version__
from weft.glue import GlueCompiler
from weft.weftc.driver import Driver
from weft.weftc.errors import DriverError, OutputFailure
from weft.weftc.options import DriverOptions


def _error_to_json(err: DriverError) -> List[dict]:
	"""Diagnostics of a driver error; errors without any get a synthesized one."""
	if err.diagnostics:
		return [d.to_dict() for d in err.diagnostics]
	return [
		{
			"phase": "driver",
			"message": err.message,
			"severity": "error",
			"file": err.path,
			"line": None,
			"column": None,
			"notes": [err.context] if err.context else [],
		}
	]


def _manifest(driver: Driver, glue: GlueCompiler, program) -> dict:
	return {
		"types": [t.to_dict() for t in driver.types()],
		"exports": [{"id": info.id, "name": name} for info, name in driver.exported_types()],
		"analyzers": [
			{
				"name": b.name,
				"transport": b.transport,
				"unit": b.unit_id,
				"ports": list(b.ports),
			}
			for b in glue.bindings
		],
		"link_inputs": [str(p) for p in program.link_inputs] if program is not None else [],
	}


def main(argv: list[str] | None = None) -> int:
	"""
	Compile weft modules and glue files given on the command line.

	With --json, prints `{"exit_code": ..., "diagnostics": [...]}` on stdout;
	otherwise errors go to stderr in human-readable form.
	"""
	parser = argparse.ArgumentParser(prog="weftc", description="weft compiler driver")
	parser.add_argument("inputs", type=Path, nargs="*", help="Input files (.weft, .wir, .wiro, .cc, .cxx, .glue)")
	parser.add_argument(
		"-L",
		"--library-path",
		dest="library_paths",
		action="append",
		type=Path,
		help="Directory to search for inputs and imported modules (repeatable)",
	)
	parser.add_argument(
		"--strict-type-names",
		action="store_true",
		help="Reject a type name defined by two different module files",
	)
	parser.add_argument("-D", "--debug", action="store_true", help="Log driver activity")
	parser.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics as JSON (phase/message/severity/file/line/column)",
	)
	parser.add_argument("-o", "--output", type=Path, help="Write a JSON manifest of types and exports")
	parser.add_argument(
		"--print-library-path",
		action="store_true",
		help="Print the effective library search path and exit",
	)
	parser.add_argument("-v", "--version", action="version", version=f"weftc {__version__}")
	args = parser.parse_args(argv)

	logging.basicConfig(
		level=logging.DEBUG if args.debug else logging.WARNING,
		format="[%(name)s] %(levelname)s: %(message)s",
	)

	options = DriverOptions.from_env(
		library_paths=list(args.library_paths or []),
		strict_type_names=args.strict_type_names,
	)
	if args.print_library_path:
		for p in options.search_paths():
			print(p)
		return 0
	if not args.inputs:
		parser.error("no input files")

	glue = GlueCompiler()
	with Driver(glue, options) as driver:
		try:
			for path in args.inputs:
				driver.load_file(path)
			program = driver.compile()
			if args.output is not None:
				_write_manifest(args.output, _manifest(driver, glue, program))
		except DriverError as err:
			_report(err, glue, as_json=args.json)
			return 1
		if args.json:
			print(json.dumps({"exit_code": 0, "diagnostics": []}))
	return 0


def _write_manifest(path: Path, manifest: dict) -> None:
	try:
		path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
	except OSError as err:
		raise OutputFailure(message=f"cannot write manifest {path}: {err.strerror or err}", path=str(path)) from err


def _report(err: DriverError, glue: GlueCompiler, *, as_json: bool) -> None:
	glue_diags = [d for d in glue.diagnostics if d not in err.diagnostics]
	if as_json:
		payload = {
			"exit_code": 1,
			"reason_code": err.reason_code,
			"diagnostics": _error_to_json(err) + [d.to_dict() for d in glue_diags],
		}
		print(json.dumps(payload))
	else:
		print(f"weftc: error: {err.format_human()}", file=sys.stderr)
		for d in glue_diags:
			print(d.format_human(), file=sys.stderr)


if __name__ == "__main__":
	sys.exit(main())
