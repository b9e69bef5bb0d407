# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Glue coordinator: `.glue` files binding compiled weft units into the host."""

from .glue_compiler import AnalyzerBinding, GlueCompiler
from .parser import AnalyzerDecl, ExportDecl, GlueFile, parse_glue

__all__ = ["GlueCompiler", "AnalyzerBinding", "AnalyzerDecl", "ExportDecl", "GlueFile", "parse_glue"]
