# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Capabilities the run pipeline depends on.

The pipeline only sequences these; the defaults live in `gop.parser`,
`gop.cl`, `gop.gox` and `gop.run.execute`, and tests substitute fakes that
return canned packages, artifacts and errors.
"""

from __future__ import annotations

from pathlib import Path
from typing import IO, Any, Mapping, Protocol, Sequence

from gop.token import FileSet


class Parser(Protocol):
	def parse_file(self, fset: FileSet, path: Path) -> Mapping[str, Any]:
		"""Parse one source file; return `{package name: package}`."""
		...

	def parse_dir(self, fset: FileSet, path: Path) -> Mapping[str, Any]:
		"""Parse every source file directly inside `path` as one package set."""
		...


class Lowerer(Protocol):
	def lower(self, pkg_path: str, pkg: Any, fset: FileSet, conf: Any) -> Any:
		"""Lower a parsed package into a native-language package object."""
		...


class Writer(Protocol):
	def write(self, path: Path, artifact: Any) -> None:
		"""Serialize `artifact` to `path`. The parent directory already exists."""
		...


class ProcessRunner(Protocol):
	def run(
		self,
		argv: Sequence[str],
		*,
		cwd: Path,
		env: Mapping[str, str],
		stdout: IO[bytes],
		stderr: IO[bytes],
	) -> None:
		"""
		Run `argv` to completion, streaming its output into the sinks as it is
		produced.

		Raises `gop.errors.ExitError` when the child exits non-zero; any other
		exception means the child could not be run at all.
		"""
		...


__all__ = ["Lowerer", "Parser", "ProcessRunner", "Writer"]
