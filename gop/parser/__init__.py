# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Go+ parser front-end.

Two entry points, both returning a package set (`{package name: Package}`):

- `parse_file` parses exactly one source file;
- `parse_dir` parses every `.gop` file directly inside a directory.

Both register their files in the caller's `FileSet` so positions stay
comparable across a run.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

from gop.token import FileSet

from . import ast
from .parser import ParserError, parse_source

logger = logging.getLogger(__name__)

SOURCE_EXT = ".gop"


def _parse_one(fset: FileSet, path: Path) -> ast.File:
	src = path.read_text(encoding="utf-8")
	tfile = fset.add_file(str(path), src)
	logger.debug("parsing %s (%d bytes)", path, len(src))
	return parse_source(src, tfile)


def _add_to_set(pkgs: Dict[str, ast.Package], f: ast.File) -> None:
	pkg = pkgs.get(f.package)
	if pkg is None:
		pkg = ast.Package(name=f.package)
		pkgs[f.package] = pkg
	pkg.files[f.filename] = f


def parse_file(fset: FileSet, path: Path) -> Dict[str, ast.Package]:
	"""Parse a single source file into a one-package set."""
	pkgs: Dict[str, ast.Package] = {}
	_add_to_set(pkgs, _parse_one(fset, Path(path)))
	return pkgs


def parse_dir(fset: FileSet, path: Path) -> Dict[str, ast.Package]:
	"""
	Parse every `.gop` file directly inside `path` (non-recursive).

	Files are visited in name order so the resulting package set, and anything
	generated from it, is deterministic. Parsing stops at the first error.
	"""
	pkgs: Dict[str, ast.Package] = {}
	sources = sorted(p for p in Path(path).iterdir() if p.suffix == SOURCE_EXT and p.is_file())
	if not sources:
		logger.debug("no %s files in %s", SOURCE_EXT, path)
	for src_path in sources:
		_add_to_set(pkgs, _parse_one(fset, src_path))
	return pkgs


class SourceParser:
	"""Default `Parser` capability backed by the lark grammar."""

	def parse_file(self, fset: FileSet, path: Path) -> Dict[str, ast.Package]:
		return parse_file(fset, path)

	def parse_dir(self, fset: FileSet, path: Path) -> Dict[str, ast.Package]:
		return parse_dir(fset, path)


__all__ = ["ParserError", "SourceParser", "SOURCE_EXT", "ast", "parse_dir", "parse_file"]
