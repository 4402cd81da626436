# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Execution delegate: hand the generated file to `go run` and relay its output.

The outcome separates two situations that look alike from the outside:

- the generated program ran and exited non-zero (`ExitError`): its output has
  already been streamed, and that is the run's result;
- the toolchain could not run the program at all: fatal `ExecutionError`.
"""

from __future__ import annotations

import logging
import os
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Mapping, Optional, Sequence

from gop.errors import ExecutionError, ExitError

from .interfaces import ProcessRunner

logger = logging.getLogger(__name__)

GOCMD_ENV = "GOP_GOCMD"
DEFAULT_GOCMD = "go"

_RELAY_CHUNK = 64 * 1024


def go_command(env: Optional[Mapping[str, str]] = None) -> str:
	env = os.environ if env is None else env
	return env.get(GOCMD_ENV) or DEFAULT_GOCMD


@dataclass(frozen=True)
class ExecutionOutcome:
	returncode: int = 0
	exit_error: Optional[ExitError] = None

	@property
	def ok(self) -> bool:
		return self.exit_error is None


def binary_stream(stream: IO) -> IO[bytes]:
	"""Return the byte layer of a text stream such as `sys.stderr`."""
	return getattr(stream, "buffer", stream)


def _fileno(stream: IO[bytes]) -> Optional[int]:
	try:
		return stream.fileno()
	except (AttributeError, OSError, ValueError):
		return None


class _Relay(threading.Thread):
	"""
	Copy one child pipe into a sink until EOF.

	A failing sink does not stop the copy: the rest of the output is read and
	dropped so the child never blocks on a full pipe. The first sink error is
	kept in `error` for the caller to raise once the child has exited.
	"""

	def __init__(self, src: IO[bytes], sink: IO[bytes]) -> None:
		super().__init__(daemon=True)
		self.src = src
		self.sink = sink
		self.error: Optional[Exception] = None

	def run(self) -> None:
		fd = self.src.fileno()
		try:
			while True:
				chunk = os.read(fd, _RELAY_CHUNK)
				if not chunk:
					break
				if self.error is not None:
					continue
				try:
					self.sink.write(chunk)
					self.sink.flush()
				except Exception as err:
					self.error = err
		finally:
			self.src.close()


class SubprocessRunner:
	"""
	Default `ProcessRunner`.

	Sinks backed by an OS file descriptor are handed to the child directly, so
	its output goes straight to the terminal. Other sinks (in-memory buffers)
	are fed from a pipe chunk by chunk while the child runs.
	"""

	def run(
		self,
		argv: Sequence[str],
		*,
		cwd: Path,
		env: Mapping[str, str],
		stdout: IO[bytes],
		stderr: IO[bytes],
	) -> None:
		out_fd = _fileno(stdout)
		err_fd = _fileno(stderr)
		stdout.flush()
		stderr.flush()
		proc = subprocess.Popen(
			list(argv),
			cwd=str(cwd),
			env=dict(env),
			stdout=out_fd if out_fd is not None else subprocess.PIPE,
			stderr=err_fd if err_fd is not None else subprocess.PIPE,
		)
		relays: list[_Relay] = []
		if out_fd is None:
			relays.append(_Relay(proc.stdout, stdout))
		if err_fd is None:
			relays.append(_Relay(proc.stderr, stderr))
		for t in relays:
			t.start()
		returncode = proc.wait()
		for t in relays:
			t.join()
		for t in relays:
			if t.error is not None:
				raise t.error
		if returncode != 0:
			raise ExitError(returncode=returncode)


def go_run(
	gofile: Path,
	*,
	runner: ProcessRunner,
	stdout: IO[bytes],
	stderr: IO[bytes],
	env: Optional[Mapping[str, str]] = None,
	gocmd: Optional[str] = None,
) -> ExecutionOutcome:
	"""
	Run `<go> run <gofile>` from the file's directory with the caller's
	environment. Blocks until the child exits; there is no timeout.
	"""
	env = dict(os.environ) if env is None else env
	argv = [gocmd or go_command(env), "run", str(gofile)]
	logger.debug("exec %s (cwd %s)", " ".join(argv), gofile.parent)
	try:
		runner.run(argv, cwd=gofile.parent, env=env, stdout=stdout, stderr=stderr)
	except ExitError as err:
		if err.stderr:
			stderr.write(err.stderr)
			stderr.flush()
		logger.debug("program exited with status %d", err.returncode)
		return ExecutionOutcome(returncode=err.returncode, exit_error=err)
	except Exception as err:
		raise ExecutionError(f"go run failed: {err}", path=str(gofile)) from err
	return ExecutionOutcome(returncode=0)


__all__ = [
	"DEFAULT_GOCMD",
	"ExecutionOutcome",
	"GOCMD_ENV",
	"SubprocessRunner",
	"binary_stream",
	"go_command",
	"go_run",
]
