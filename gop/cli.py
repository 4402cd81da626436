# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import os
import sys

from gop.errors import RunError
from gop.log import configure_logging
from gop.run.execute import GOCMD_ENV
from gop.run.pipeline import RunOptions, run_pipeline

RUN_USAGE = "gop run [-asm -quiet -debug -prof] <gopSrcDir|gopSrcFile>"


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="gop", description="Go+ tooling")
	sub = p.add_subparsers(dest="cmd", required=True)

	run = sub.add_parser(
		"run",
		help="Run a Go+ program",
		usage=RUN_USAGE,
		description=f"Compile a Go+ file or package directory to Go and run it with `go run` (override the go executable with ${GOCMD_ENV}).",
	)
	run.add_argument("-asm", action="store_true", help="generate asm code (not supported)")
	run.add_argument("-quiet", action="store_true", help="don't generate any compiling stage log")
	run.add_argument("-debug", action="store_true", help="print debug information")
	run.add_argument("-prof", action="store_true", help="do profile and generate profile report (not supported)")
	run.add_argument("target", nargs="?", default=None, help="Go+ source file or package directory")
	return p


def _cmd_run(args: argparse.Namespace) -> int:
	if args.target is None:
		print(f"usage: {RUN_USAGE}", file=sys.stderr)
		return 0
	configure_logging(quiet=bool(args.quiet), debug=bool(args.debug))
	opts = RunOptions(
		target=args.target,
		asm=bool(args.asm),
		quiet=bool(args.quiet),
		debug=bool(args.debug),
		prof=bool(args.prof),
		gocmd=os.environ.get(GOCMD_ENV) or None,
	)
	try:
		result = run_pipeline(opts)
	except RunError as err:
		print(f"gop run: {err.format_human()}", file=sys.stderr)
		return 1
	return result.returncode


_COMMANDS = {"run": _cmd_run}


def main(argv: list[str] | None = None) -> int:
	args = _build_parser().parse_args(argv)
	return _COMMANDS[args.cmd](args)


if __name__ == "__main__":
	raise SystemExit(main())
