# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import enum
import os
import stat
from dataclasses import dataclass
from pathlib import Path

from gop.errors import PathError


class TargetKind(enum.Enum):
	FILE = "file"
	DIRECTORY = "directory"


@dataclass(frozen=True)
class Target:
	path: Path
	kind: TargetKind

	@property
	def is_dir(self) -> bool:
		return self.kind is TargetKind.DIRECTORY


def resolve_target(raw: str | os.PathLike[str]) -> Target:
	"""
	Make `raw` absolute (symlinks are kept as given) and classify it.

	Raises `PathError` when the path does not exist or cannot be stat'ed.
	"""
	path = Path(os.path.abspath(os.fspath(raw)))
	try:
		st = path.stat()
	except OSError as err:
		raise PathError(f"input arg check failed: {err.strerror or err}", path=str(path)) from err
	kind = TargetKind.DIRECTORY if stat.S_ISDIR(st.st_mode) else TargetKind.FILE
	return Target(path=path, kind=kind)


__all__ = ["Target", "TargetKind", "resolve_target"]
