# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source positions shared by the parser, the lowerer and the driver.

A `FileSet` hands out disjoint offset ranges to every file parsed during one
run, so a single integer `Pos` identifies a location across all files. `NO_POS`
(0) means "unknown"; every real file starts at base >= 1.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import List, Optional

Pos = int
NO_POS: Pos = 0


@dataclass(frozen=True)
class Position:
	"""Human-facing location (1-based line/column)."""

	filename: str = ""
	line: int = 0
	column: int = 0

	def is_valid(self) -> bool:
		return self.line > 0

	def __str__(self) -> str:
		if not self.filename and not self.is_valid():
			return "-"
		if not self.is_valid():
			return self.filename
		return f"{self.filename}:{self.line}:{self.column}"


@dataclass
class File:
	name: str
	base: int
	size: int
	# Offsets of the first byte of every line; lines[0] is always 0.
	lines: List[int] = field(default_factory=lambda: [0])

	def pos(self, offset: int) -> Pos:
		if offset < 0 or offset > self.size:
			raise ValueError(f"offset {offset} out of range for {self.name} (size {self.size})")
		return self.base + offset

	def offset(self, pos: Pos) -> int:
		if pos < self.base or pos > self.base + self.size:
			raise ValueError(f"pos {pos} does not belong to {self.name}")
		return pos - self.base

	def position(self, pos: Pos) -> Position:
		off = self.offset(pos)
		idx = bisect.bisect_right(self.lines, off) - 1
		return Position(filename=self.name, line=idx + 1, column=off - self.lines[idx] + 1)


class FileSet:
	"""Registry of parsed files; one instance is shared by a whole run."""

	def __init__(self) -> None:
		self._files: List[File] = []
		self._base = 1

	def add_file(self, filename: str, src: str) -> File:
		lines = [0]
		for idx, ch in enumerate(src):
			if ch == "\n":
				lines.append(idx + 1)
		f = File(name=filename, base=self._base, size=len(src), lines=lines)
		self._files.append(f)
		# +1 so the end-of-file position of one file never aliases the next file.
		self._base += len(src) + 1
		return f

	def file(self, pos: Pos) -> Optional[File]:
		if pos == NO_POS:
			return None
		bases = [f.base for f in self._files]
		idx = bisect.bisect_right(bases, pos) - 1
		if idx < 0:
			return None
		f = self._files[idx]
		if pos > f.base + f.size:
			return None
		return f

	def position(self, pos: Pos) -> Position:
		f = self.file(pos)
		if f is None:
			return Position()
		return f.position(pos)

	def files(self) -> List[File]:
		return list(self._files)


__all__ = ["Pos", "NO_POS", "Position", "File", "FileSet"]
