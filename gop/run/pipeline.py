# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`gop run` pipeline: resolve → acquire → lower → place → execute.

Stages run strictly in order and each one either hands its result to the next
or raises a `RunError`. Nothing is retried. The only non-fatal outcome besides
success is the generated program's own non-zero exit, which is relayed and
reported through `ExecutionOutcome`.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Mapping, Optional

from gop import cl
from gop.errors import (
	LoweringError,
	MissingMainError,
	ParseError,
	UnsupportedFeatureError,
)
from gop.gox import GoFileWriter
from gop.parser import SourceParser
from gop.token import FileSet

from .execute import ExecutionOutcome, SubprocessRunner, binary_stream, go_run
from .interfaces import Lowerer, Parser, ProcessRunner, Writer
from .placement import output_location, save_artifact
from .target import Target, TargetKind, resolve_target

logger = logging.getLogger(__name__)

MAIN_PACKAGE = "main"


@dataclass(frozen=True)
class RunOptions:
	target: str
	asm: bool = False
	quiet: bool = False
	debug: bool = False
	prof: bool = False
	gocmd: Optional[str] = None


@dataclass(frozen=True)
class RunResult:
	target: Target
	output: Path
	outcome: ExecutionOutcome

	@property
	def returncode(self) -> int:
		return self.outcome.returncode


@dataclass
class Capabilities:
	"""The collaborators one run uses. Defaults are the real front-end and `go run`."""

	parser: Parser = field(default_factory=SourceParser)
	lowerer: Lowerer = field(default_factory=cl.GoLowerer)
	writer: Writer = field(default_factory=GoFileWriter)
	runner: ProcessRunner = field(default_factory=SubprocessRunner)


def check_supported(opts: RunOptions) -> None:
	if opts.asm:
		raise UnsupportedFeatureError("-asm is not supported")
	if opts.prof:
		raise UnsupportedFeatureError("-prof is not supported")


def lowering_config(opts: RunOptions) -> cl.Config:
	if opts.debug and not opts.quiet:
		return cl.Config(debug_flags=cl.DBG_FLAG_ALL)
	return cl.Config()


def acquire_sources(target: Target, fset: FileSet, parser: Parser) -> Mapping[str, Any]:
	try:
		if target.kind is TargetKind.DIRECTORY:
			return parser.parse_dir(fset, target.path)
		return parser.parse_file(fset, target.path)
	except Exception as err:
		raise ParseError(str(err), path=str(target.path)) from err


def lower_main(pkgs: Mapping[str, Any], fset: FileSet, lowerer: Lowerer, conf: Any, *, path: Path) -> Any:
	main_pkg = pkgs.get(MAIN_PACKAGE)
	if main_pkg is None:
		found = ", ".join(sorted(pkgs)) or "none"
		raise MissingMainError(f"no {MAIN_PACKAGE} package found (packages: {found})", path=str(path))
	try:
		return lowerer.lower("", main_pkg, fset, conf)
	except Exception as err:
		raise LoweringError(str(err), path=str(path)) from err


def run_pipeline(
	opts: RunOptions,
	caps: Optional[Capabilities] = None,
	*,
	stdout: Optional[IO[bytes]] = None,
	stderr: Optional[IO[bytes]] = None,
	env: Optional[Mapping[str, str]] = None,
) -> RunResult:
	"""
	Run one Go+ target end to end.

	Raises a `RunError` subclass on the first fatal stage failure. A non-zero
	exit of the generated program is not a failure: its stderr has already
	been relayed and `RunResult.returncode` carries its status.
	"""
	check_supported(opts)
	caps = caps or Capabilities()
	stdout = stdout if stdout is not None else binary_stream(sys.stdout)
	stderr = stderr if stderr is not None else binary_stream(sys.stderr)

	target = resolve_target(opts.target)
	logger.info("gop run %s (%s)", target.path, target.kind.value)

	fset = FileSet()
	pkgs = acquire_sources(target, fset, caps.parser)
	logger.debug("parsed packages: %s", ", ".join(sorted(pkgs)) or "none")

	artifact = lower_main(pkgs, fset, caps.lowerer, lowering_config(opts), path=target.path)

	out = output_location(target)
	save_artifact(out, artifact, caps.writer)
	logger.info("generated %s", out)

	outcome = go_run(out, runner=caps.runner, stdout=stdout, stderr=stderr, env=env, gocmd=opts.gocmd)
	return RunResult(target=target, output=out, outcome=outcome)


__all__ = [
	"Capabilities",
	"MAIN_PACKAGE",
	"RunOptions",
	"RunResult",
	"acquire_sources",
	"check_supported",
	"lower_main",
	"lowering_config",
	"run_pipeline",
]
