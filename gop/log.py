# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Logging setup for the `gop` logger hierarchy.

Modules log through `logging.getLogger(__name__)`; only the CLI decides where
records go and at which level. Fatal pipeline errors are printed by the CLI
directly and never depend on the log level.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

ROOT_LOGGER = "gop"

# Above CRITICAL: nothing passes, the equivalent of "no compiling-stage log".
LEVEL_SILENT = logging.CRITICAL + 10
LEVEL_DEFAULT = logging.WARNING

_FORMAT = "%(levelname)s %(name)s: %(message)s"


def log_level(*, quiet: bool, debug: bool) -> int:
	# quiet is checked first and wins over debug.
	if quiet:
		return LEVEL_SILENT
	if debug:
		return logging.DEBUG
	return LEVEL_DEFAULT


def configure_logging(*, quiet: bool = False, debug: bool = False, stream: Optional[IO[str]] = None) -> logging.Logger:
	"""
	Point the `gop` logger at `stream` (default: stderr) with the level implied
	by the verbosity flags. Safe to call more than once; the previous handler
	installed here is replaced.
	"""
	logger = logging.getLogger(ROOT_LOGGER)
	for handler in list(logger.handlers):
		if getattr(handler, "_gop_handler", False):
			logger.removeHandler(handler)
	handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
	handler.setFormatter(logging.Formatter(_FORMAT))
	handler._gop_handler = True  # type: ignore[attr-defined]
	logger.addHandler(handler)
	logger.setLevel(log_level(quiet=quiet, debug=debug))
	return logger


__all__ = ["LEVEL_DEFAULT", "LEVEL_SILENT", "ROOT_LOGGER", "configure_logging", "log_level"]
