# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import pytest

from gop.errors import ExitError
from gop.log import ROOT_LOGGER
from gop.run.pipeline import Capabilities


@dataclass
class FakeParser:
	pkgs: dict = field(default_factory=lambda: {"main": "main-pkg"})
	error: Optional[Exception] = None
	calls: list = field(default_factory=list)

	def _parse(self, kind: str, fset: Any, path: Path) -> dict:
		self.calls.append((kind, path))
		if self.error is not None:
			raise self.error
		return self.pkgs

	def parse_file(self, fset: Any, path: Path) -> dict:
		return self._parse("file", fset, path)

	def parse_dir(self, fset: Any, path: Path) -> dict:
		return self._parse("dir", fset, path)


@dataclass
class FakeLowerer:
	artifact: Any = "artifact"
	error: Optional[Exception] = None
	calls: list = field(default_factory=list)

	def lower(self, pkg_path: str, pkg: Any, fset: Any, conf: Any) -> Any:
		self.calls.append((pkg_path, pkg, conf))
		if self.error is not None:
			raise self.error
		return self.artifact


@dataclass
class FakeWriter:
	error: Optional[Exception] = None
	writes: list = field(default_factory=list)

	def write(self, path: Path, artifact: Any) -> None:
		self.writes.append((path, artifact))
		if self.error is not None:
			raise self.error
		path.write_text(f"// {artifact}\n", encoding="utf-8")


@dataclass
class FakeRunner:
	returncode: int = 0
	stdout: bytes = b""
	stderr: bytes = b""
	error: Optional[Exception] = None
	calls: list = field(default_factory=list)

	def run(self, argv, *, cwd, env, stdout, stderr) -> None:
		self.calls.append((list(argv), cwd))
		if self.error is not None:
			raise self.error
		if self.stdout:
			stdout.write(self.stdout)
		if self.returncode != 0:
			raise ExitError(returncode=self.returncode, stderr=self.stderr)


@pytest.fixture
def fake_caps() -> Capabilities:
	return Capabilities(parser=FakeParser(), lowerer=FakeLowerer(), writer=FakeWriter(), runner=FakeRunner())


_FAKE_GO = """\
import os
import sys

assert sys.argv[1] == "run", sys.argv
with open(sys.argv[2], encoding="utf-8") as f:
	src = f.read()
sys.stdout.write("// cwd: " + os.getcwd() + "\\n")
sys.stdout.write(src)
sys.stdout.flush()
if "exit3" in src:
	sys.stderr.write("boom\\n")
	sys.exit(3)
"""


@pytest.fixture
def fake_go(tmp_path: Path) -> Path:
	"""
	Executable standing in for the go toolchain: `<fake> run <file.go>` echoes
	its working directory and the generated file, and exits 3 with "boom" on
	stderr when the file mentions `exit3`.
	"""
	if sys.platform == "win32":
		pytest.skip("needs a POSIX shell wrapper")
	tools = tmp_path / "_tools"
	tools.mkdir()
	script = tools / "fakego.py"
	script.write_text(_FAKE_GO, encoding="utf-8")
	wrapper = tools / "go"
	wrapper.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{script}" "$@"\n', encoding="utf-8")
	os.chmod(wrapper, 0o755)
	return wrapper


@pytest.fixture(autouse=True)
def _reset_gop_logging():
	yield
	logger = logging.getLogger(ROOT_LOGGER)
	for handler in list(logger.handlers):
		if getattr(handler, "_gop_handler", False):
			logger.removeHandler(handler)
	logger.setLevel(logging.NOTSET)
