# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import io
import logging

import pytest

from gop.errors import ExitError, LoweringError, MissingMainError, RunError
from gop.log import LEVEL_SILENT, ROOT_LOGGER, configure_logging, log_level


def test_run_error_serialization() -> None:
	try:
		try:
			raise ValueError("a.gop:3:1: undefined: foo")
		except ValueError as cause:
			raise LoweringError("a.gop:3:1: undefined: foo", path="/src/a.gop") from cause
	except RunError as err:
		caught = err

	assert caught.to_dict() == {
		"reason_code": "lower",
		"stage": "lower",
		"message": "a.gop:3:1: undefined: foo",
		"path": "/src/a.gop",
		"cause": "a.gop:3:1: undefined: foo",
	}
	assert caught.format_human() == "[lower] a.gop:3:1: undefined: foo path=/src/a.gop"
	assert str(MissingMainError("no main package found")) == "[missing-main] no main package found"


def test_exit_error_is_not_a_run_error() -> None:
	err = ExitError(returncode=3, stderr=b"boom")
	assert not isinstance(err, RunError)
	assert str(err) == "exit status 3"


def test_log_level_quiet_wins() -> None:
	assert log_level(quiet=True, debug=True) == LEVEL_SILENT
	assert log_level(quiet=False, debug=True) == logging.DEBUG
	assert log_level(quiet=False, debug=False) == logging.WARNING


def test_configure_logging_replaces_its_handler() -> None:
	first, second = io.StringIO(), io.StringIO()
	configure_logging(debug=True, stream=first)
	logger = configure_logging(debug=True, stream=second)

	logging.getLogger("gop.run.pipeline").debug("parsed %s", "main")

	assert len([h for h in logger.handlers if getattr(h, "_gop_handler", False)]) == 1
	assert first.getvalue() == ""
	assert second.getvalue() == "DEBUG gop.run.pipeline: parsed main\n"
	assert logger.name == ROOT_LOGGER


@pytest.mark.parametrize("quiet, debug", [(True, True), (True, False), (False, False)])
def test_configure_logging_hides_debug(quiet: bool, debug: bool) -> None:
	stream = io.StringIO()
	configure_logging(quiet=quiet, debug=debug, stream=stream)

	logging.getLogger("gop.cl.compile").debug("func main")

	assert stream.getvalue() == ""
