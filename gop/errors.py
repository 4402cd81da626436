# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar


@dataclass(frozen=True)
class RunError(Exception):
	"""
	A structured, serializable failure of the run pipeline.

	Every subclass is fatal: the pipeline stops at the stage that raised it.
	The underlying exception, when there is one, is chained as `__cause__`.
	"""

	message: str
	path: str | None = None

	reason_code: ClassVar[str] = "run"
	stage: ClassVar[str] = "run"

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		cause = self.__cause__
		return {
			"reason_code": self.reason_code,
			"stage": self.stage,
			"message": self.message,
			"path": self.path,
			"cause": str(cause) if cause is not None else None,
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.path:
			parts.append(f"path={self.path}")
		return " ".join(parts)


class PathError(RunError):
	reason_code = "path"
	stage = "resolve"


class ParseError(RunError):
	reason_code = "parse"
	stage = "parse"


class MissingMainError(RunError):
	reason_code = "missing-main"
	stage = "lower"


class LoweringError(RunError):
	reason_code = "lower"
	stage = "lower"


class UnsupportedFeatureError(RunError):
	reason_code = "unsupported"
	stage = "options"


class WriteError(RunError):
	reason_code = "write"
	stage = "write"


class ExecutionError(RunError):
	reason_code = "exec"
	stage = "execute"


@dataclass(frozen=True)
class ExitError(Exception):
	"""
	The generated program ran and exited with a non-zero status.

	Not a `RunError`: it is the program's own result, relayed to the user
	rather than treated as a pipeline failure.
	"""

	returncode: int
	stderr: bytes = b""

	def __str__(self) -> str:
		return f"exit status {self.returncode}"


__all__ = [
	"ExecutionError",
	"ExitError",
	"LoweringError",
	"MissingMainError",
	"ParseError",
	"PathError",
	"RunError",
	"UnsupportedFeatureError",
	"WriteError",
]
