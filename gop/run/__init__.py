# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Driver for `gop run`: compile a Go+ file or directory to Go and run it."""

from __future__ import annotations

from .execute import ExecutionOutcome, SubprocessRunner, go_run
from .pipeline import Capabilities, RunOptions, RunResult, run_pipeline
from .placement import output_location
from .target import Target, TargetKind, resolve_target

__all__ = [
	"Capabilities",
	"ExecutionOutcome",
	"RunOptions",
	"RunResult",
	"SubprocessRunner",
	"Target",
	"TargetKind",
	"go_run",
	"output_location",
	"resolve_target",
	"run_pipeline",
]
