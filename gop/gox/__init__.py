# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Go package model produced by lowering, and its serializer.

The lowerer fills a `GoPackage`; `write_file` renders it as gofmt-style Go
source (tab indentation, grouped imports) and writes it to disk. Rendering is
deterministic: imports are sorted by path, functions keep declaration order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

GENERATED_HEADER = "// Code generated by gop; DO NOT EDIT."


@dataclass(frozen=True)
class GoImport:
	path: str
	name: Optional[str] = None

	def render(self) -> str:
		if self.name:
			return f'{self.name} "{self.path}"'
		return f'"{self.path}"'


@dataclass
class GoFunc:
	name: str
	params: List[Tuple[str, str]] = field(default_factory=list)
	result: Optional[str] = None
	# Body lines, indented relative to the function body (tabs).
	body: List[str] = field(default_factory=list)

	def render(self) -> str:
		params = ", ".join(f"{name} {typ}" for name, typ in self.params)
		head = f"func {self.name}({params})"
		if self.result:
			head += f" {self.result}"
		if not self.body:
			return head + " {\n}\n"
		lines = [head + " {"]
		lines.extend("\t" + line if line else "" for line in self.body)
		lines.append("}")
		return "\n".join(lines) + "\n"


@dataclass
class GoPackage:
	name: str
	path: str = ""
	imports: List[GoImport] = field(default_factory=list)
	funcs: List[GoFunc] = field(default_factory=list)

	def add_import(self, path: str, name: Optional[str] = None) -> GoImport:
		for imp in self.imports:
			if imp.path == path and imp.name == name:
				return imp
		imp = GoImport(path=path, name=name)
		self.imports.append(imp)
		return imp

	def has_import(self, path: str) -> bool:
		return any(imp.path == path for imp in self.imports)

	def func(self, name: str) -> Optional[GoFunc]:
		return next((fn for fn in self.funcs if fn.name == name), None)


class BodyWriter:
	"""Accumulates indented statement lines for one Go function body."""

	def __init__(self) -> None:
		self.lines: List[str] = []
		self._depth = 0

	def line(self, text: str) -> None:
		self.lines.append("\t" * self._depth + text)

	def indent(self) -> None:
		self._depth += 1

	def dedent(self) -> None:
		if self._depth == 0:
			raise AssertionError("BodyWriter.dedent below zero")
		self._depth -= 1


def render(pkg: GoPackage) -> str:
	parts = [GENERATED_HEADER, "", f"package {pkg.name}", ""]
	imports = sorted(pkg.imports, key=lambda imp: (imp.path, imp.name or ""))
	if len(imports) == 1:
		parts.extend([f"import {imports[0].render()}", ""])
	elif imports:
		parts.append("import (")
		parts.extend("\t" + imp.render() for imp in imports)
		parts.extend([")", ""])
	out = "\n".join(parts) + "\n"
	return out + "\n".join(fn.render() for fn in pkg.funcs)


def write_file(path: Path, pkg: GoPackage) -> None:
	"""Render `pkg` and write it to `path` (UTF-8); parent must exist."""
	Path(path).write_text(render(pkg), encoding="utf-8")


class GoFileWriter:
	"""Default `Writer` capability."""

	def write(self, path: Path, artifact: GoPackage) -> None:
		write_file(path, artifact)


__all__ = [
	"BodyWriter",
	"GENERATED_HEADER",
	"GoFileWriter",
	"GoFunc",
	"GoImport",
	"GoPackage",
	"render",
	"write_file",
]
